"""
Tests for reCAPTCHA verification integration.
"""

import json
import pytest
import requests
from unittest.mock import Mock, MagicMock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from config import Settings
from domain.errors import VerificationUnavailable
from integrations.recaptcha_verification import RecaptchaVerifier


def make_http_response(payload=None, status_code=200, raw=None):
    """Build a requests.Response with the given JSON payload or raw body."""
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif payload is not None:
        response._content = json.dumps(payload).encode('utf-8')
    else:
        response._content = b''
    response.url = 'https://www.google.com/recaptcha/api/siteverify'
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def verifier(session):
    return RecaptchaVerifier(secret='test-secret', timeout=3, session=session)


class TestRecaptchaVerifier:
    """Test the verify method."""

    def test_verify_success(self, verifier, session):
        """Test successful verification."""
        # Setup
        session.post.return_value = make_http_response({
            'success': True,
            'hostname': 'example.com',
            'challenge_ts': '2025-01-01T00:00:00Z'
        })

        # Execute
        outcome = verifier.verify('token-abc', remote_ip='203.0.113.7')

        # Assert
        assert outcome.success is True
        assert outcome.hostname == 'example.com'
        assert outcome.challenge_ts == '2025-01-01T00:00:00Z'
        session.post.assert_called_once_with(
            'https://www.google.com/recaptcha/api/siteverify',
            data={'secret': 'test-secret', 'response': 'token-abc', 'remoteip': '203.0.113.7'},
            timeout=3
        )

    def test_verify_without_remote_ip(self, verifier, session):
        session.post.return_value = make_http_response({'success': True})

        verifier.verify('token-abc')

        form = session.post.call_args[1]['data']
        assert 'remoteip' not in form

    def test_verify_rejected(self, verifier, session):
        """Test that an explicit rejection is an outcome, not an exception."""
        session.post.return_value = make_http_response({
            'success': False,
            'error-codes': ['timeout-or-duplicate']
        })

        outcome = verifier.verify('token-abc')

        assert outcome.success is False
        assert outcome.error_codes == ['timeout-or-duplicate']

    def test_verify_connection_error(self, verifier, session):
        """Test provider unreachable."""
        session.post.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(VerificationUnavailable, match="try again later"):
            verifier.verify('token-abc')

    def test_verify_timeout(self, verifier, session):
        session.post.side_effect = requests.Timeout("timed out")

        with pytest.raises(VerificationUnavailable):
            verifier.verify('token-abc')

    def test_verify_http_error(self, verifier, session):
        """Test non-2xx responses are treated as transport failures."""
        session.post.return_value = make_http_response({'error': 'nope'}, status_code=502)

        with pytest.raises(VerificationUnavailable, match="try again later"):
            verifier.verify('token-abc')

    def test_verify_empty_response(self, verifier, session):
        session.post.return_value = make_http_response()

        with pytest.raises(VerificationUnavailable, match="unusable response"):
            verifier.verify('token-abc')

    def test_verify_non_json_response(self, verifier, session):
        session.post.return_value = make_http_response(raw=b'<html>oops</html>')

        with pytest.raises(VerificationUnavailable, match="unusable response"):
            verifier.verify('token-abc')

    @pytest.mark.parametrize("payload", [
        [True],
        {'hostname': 'example.com'},
        {'success': 'true'},
    ])
    def test_verify_malformed_payload(self, verifier, session, payload):
        """Test payloads without a boolean success flag."""
        session.post.return_value = make_http_response(payload)

        with pytest.raises(VerificationUnavailable, match="unusable response"):
            verifier.verify('token-abc')


class TestRecaptchaVerifierConstruction:
    """Test building verifiers."""

    def test_empty_secret(self):
        with pytest.raises(ValueError, match="secret"):
            RecaptchaVerifier(secret='')

    def test_from_settings(self):
        settings = Settings(
            recaptcha_secret='secret',
            owner_email='owner@example.com',
            source_email='owner@example.com',
            verify_url='https://verify.example.com',
            verify_timeout=1.5
        )

        verifier = RecaptchaVerifier.from_settings(settings)

        assert verifier.secret == 'secret'
        assert verifier.verify_url == 'https://verify.example.com'
        assert verifier.timeout == 1.5
        assert isinstance(verifier.session, requests.Session)
