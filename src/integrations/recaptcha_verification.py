"""
Google reCAPTCHA verification module.

This module verifies client-supplied reCAPTCHA tokens against the siteverify
endpoint. The provider is treated as untrusted and possibly unavailable:

- transport failures (unreachable, timeout, non-2xx) raise VerificationUnavailable
- empty or malformed payloads raise VerificationUnavailable
- an explicit rejection is returned as VerificationOutcome(success=False)

Usage:
    from integrations.recaptcha_verification import RecaptchaVerifier

    verifier = RecaptchaVerifier(secret="...")
    outcome = verifier.verify(token, remote_ip="203.0.113.7")
    if outcome.success:
        ...
"""

import logging
import time
from typing import Any, Dict, Optional

import requests

from config import Settings, DEFAULT_VERIFY_URL
from domain.errors import VerificationUnavailable
from domain.models import VerificationOutcome

# Configure logging
logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = 'Unable to verify your submission right now. Please try again later.'
MALFORMED_MESSAGE = 'Verification service returned an unusable response.'


class RecaptchaVerifier:
    """
    Client for the reCAPTCHA siteverify endpoint.

    Holds a requests.Session that is reused across warm invocations.
    No retries: a failed call is reported immediately.
    """

    def __init__(
        self,
        secret: str,
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None
    ):
        if not secret:
            raise ValueError("reCAPTCHA secret cannot be empty")
        self.secret = secret
        self.verify_url = verify_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> 'RecaptchaVerifier':
        """Build a verifier from loaded settings."""
        verifier = cls(
            secret=settings.recaptcha_secret,
            verify_url=settings.verify_url,
            timeout=settings.verify_timeout
        )
        logger.info(
            f"reCAPTCHA verifier initialized: url={settings.verify_url}, "
            f"timeout={settings.verify_timeout}s, no retries"
        )
        return verifier

    def verify(self, token: str, remote_ip: Optional[str] = None) -> VerificationOutcome:
        """
        Verify a client token with the provider.

        Args:
            token: Client-supplied reCAPTCHA token
            remote_ip: Caller's IP address, forwarded when known

        Returns:
            VerificationOutcome: success flag and provider details

        Raises:
            VerificationUnavailable: If the call fails or the payload is unusable
        """
        form = {
            'secret': self.secret,
            'response': token,
        }
        if remote_ip:
            form['remoteip'] = remote_ip

        start_time = time.time()
        try:
            response = self.session.post(self.verify_url, data=form, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"reCAPTCHA verification call failed: {e}")
            raise VerificationUnavailable(UNAVAILABLE_MESSAGE)

        payload = self._parse_payload(response)
        outcome = VerificationOutcome(
            success=payload['success'],
            error_codes=list(payload.get('error-codes') or []),
            hostname=payload.get('hostname'),
            challenge_ts=payload.get('challenge_ts')
        )

        logger.info(
            f"reCAPTCHA verification completed: success={outcome.success}, "
            f"hostname={outcome.hostname}, error_codes={outcome.error_codes}, "
            f"execution_time={time.time() - start_time:.2f}s"
        )
        return outcome

    def _parse_payload(self, response: requests.Response) -> Dict[str, Any]:
        """
        Decode the provider response.

        Raises:
            VerificationUnavailable: If the body is empty, not JSON, not an
                object, or has no boolean success flag
        """
        if not response.content:
            logger.error("reCAPTCHA verification returned an empty response")
            raise VerificationUnavailable(MALFORMED_MESSAGE)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse reCAPTCHA response: {e}, body: {response.text[:200]}")
            raise VerificationUnavailable(MALFORMED_MESSAGE)

        if not isinstance(payload, dict) or not isinstance(payload.get('success'), bool):
            logger.error(f"reCAPTCHA response has no success flag: {str(payload)[:200]}")
            raise VerificationUnavailable(MALFORMED_MESSAGE)

        return payload
