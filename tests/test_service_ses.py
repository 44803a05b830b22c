"""
Tests for SES templated email service.
"""

import pytest
from unittest.mock import MagicMock, patch
from botocore.exceptions import ClientError, EndpointConnectionError
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from config import Settings
from domain.models import TemplatedEmail
from services import ses


@pytest.fixture
def ses_client():
    client = MagicMock()
    client.send_templated_email.return_value = {'MessageId': 'message-id-123'}
    return client


@pytest.fixture
def email():
    return TemplatedEmail(
        source='owner@example.com',
        to_addresses=['ada@example.com'],
        reply_to_addresses=['owner@example.com'],
        template='PortfolioThankYou',
        template_data='{"name": "Ada"}'
    )


class TestTemplatedEmailSender:
    """Test sending templated emails."""

    def test_send_success(self, ses_client, email):
        """Test successful send returns the SES message id."""
        # Execute
        message_id = ses.TemplatedEmailSender(ses_client).send(email)

        # Assert
        assert message_id == 'message-id-123'
        ses_client.send_templated_email.assert_called_once_with(
            Source='owner@example.com',
            Destination={'ToAddresses': ['ada@example.com']},
            ReplyToAddresses=['owner@example.com'],
            Template='PortfolioThankYou',
            TemplateData='{"name": "Ada"}'
        )

    def test_send_with_bcc(self, ses_client, email):
        email.bcc_addresses = ['owner@example.com']

        ses.TemplatedEmailSender(ses_client).send(email)

        destination = ses_client.send_templated_email.call_args[1]['Destination']
        assert destination == {
            'ToAddresses': ['ada@example.com'],
            'BccAddresses': ['owner@example.com']
        }

    def test_send_client_error(self, ses_client, email):
        """Test that SES rejections propagate to the caller."""
        ses_client.send_templated_email.side_effect = ClientError(
            {'Error': {'Code': 'MessageRejected', 'Message': 'Email address is not verified.'}},
            'SendTemplatedEmail'
        )

        with pytest.raises(ClientError):
            ses.TemplatedEmailSender(ses_client).send(email)

    def test_send_connection_error(self, ses_client, email):
        ses_client.send_templated_email.side_effect = EndpointConnectionError(
            endpoint_url='https://email.us-east-1.amazonaws.com'
        )

        with pytest.raises(EndpointConnectionError):
            ses.TemplatedEmailSender(ses_client).send(email)

    def test_send_without_recipients(self, ses_client, email):
        email.to_addresses = []

        with pytest.raises(ValueError, match="recipient"):
            ses.TemplatedEmailSender(ses_client).send(email)

        ses_client.send_templated_email.assert_not_called()

    def test_send_without_template(self, ses_client, email):
        email.template = ''

        with pytest.raises(ValueError, match="template"):
            ses.TemplatedEmailSender(ses_client).send(email)


class TestCreateSesClient:
    """Test SES client construction."""

    @patch('services.ses.boto3.client')
    def test_default_credentials(self, mock_client):
        ses.create_ses_client('eu-west-1')

        mock_client.assert_called_once_with('ses', region_name='eu-west-1', config=ses.ses_config)

    @patch('services.ses.boto3.client')
    def test_explicit_credentials(self, mock_client):
        ses.create_ses_client('eu-west-1', 'AKIAEXAMPLE', 'secret-key')

        kwargs = mock_client.call_args[1]
        assert kwargs['aws_access_key_id'] == 'AKIAEXAMPLE'
        assert kwargs['aws_secret_access_key'] == 'secret-key'

    @patch('services.ses.boto3.client')
    def test_from_settings(self, mock_client):
        settings = Settings(
            recaptcha_secret='secret',
            owner_email='owner@example.com',
            source_email='owner@example.com',
            region='us-west-2'
        )

        sender = ses.TemplatedEmailSender.from_settings(settings)

        assert sender.ses_client is mock_client.return_value
        assert mock_client.call_args[1]['region_name'] == 'us-west-2'

    def test_client_config_has_no_retries(self):
        assert ses.ses_config.retries == {'max_attempts': 1, 'mode': 'standard'}
