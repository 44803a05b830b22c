"""
Amazon SES templated email utilities.

This module sends templated emails through SES. Failures are raised as
botocore errors and converted to delivery outcomes by the caller.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from config import Settings
from domain.models import TemplatedEmail

logger = logging.getLogger(__name__)

# Configure SES client with timeouts to prevent infinite hangs
ses_config = Config(
    retries={
        'max_attempts': 1,  # 1 attempt total (no retries)
        'mode': 'standard'
    },
    connect_timeout=10,  # 10 seconds to establish connection
    read_timeout=30      # 30 seconds max for reading response
)


def create_ses_client(
    region: str,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None
):
    """
    Create an SES client.

    Explicit credentials are used when both are provided, otherwise the
    default credential chain (the Lambda execution role) applies.

    Returns:
        boto3.client: Configured SES client
    """
    kwargs = {'region_name': region, 'config': ses_config}
    if access_key_id and secret_access_key:
        kwargs['aws_access_key_id'] = access_key_id
        kwargs['aws_secret_access_key'] = secret_access_key

    client = boto3.client('ses', **kwargs)
    logger.info(
        f"SES client initialized: region={region}, "
        f"explicit_credentials={bool(access_key_id)}, connect=10s, read=30s, max_attempts=1"
    )
    return client


class TemplatedEmailSender:
    """Sends TemplatedEmail requests through one SES client."""

    def __init__(self, ses_client):
        self.ses_client = ses_client

    @classmethod
    def from_settings(cls, settings: Settings) -> 'TemplatedEmailSender':
        """Build a sender with an SES client for the configured region."""
        return cls(create_ses_client(
            settings.region,
            settings.access_key_id,
            settings.secret_access_key
        ))

    def send(self, email: TemplatedEmail) -> str:
        """
        Send a templated email.

        Args:
            email: The email request

        Returns:
            str: SES MessageId

        Raises:
            ValueError: If the request has no recipients or no template
            ClientError: If SES rejects the request
            BotoCoreError: If the call fails before reaching SES

        Example:
            >>> sender.send(TemplatedEmail(
            ...     source="owner@example.com",
            ...     to_addresses=["visitor@example.com"],
            ...     reply_to_addresses=["owner@example.com"],
            ...     template="PortfolioThankYou",
            ...     template_data='{"name": "Ada"}'
            ... ))
            "0100018c-example-message-id"
        """
        if not email.to_addresses:
            raise ValueError("Templated email needs at least one recipient")
        if not email.template:
            raise ValueError("Templated email needs a template name")

        destination = {'ToAddresses': list(email.to_addresses)}
        if email.bcc_addresses:
            destination['BccAddresses'] = list(email.bcc_addresses)

        try:
            response = self.ses_client.send_templated_email(
                Source=email.source,
                Destination=destination,
                ReplyToAddresses=list(email.reply_to_addresses),
                Template=email.template,
                TemplateData=email.template_data
            )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))

            logger.error(
                f"SES rejected templated email: template={email.template}, "
                f"error_code={error_code}, error_message={error_message}"
            )
            raise
        except BotoCoreError as e:
            logger.error(f"SES call failed: template={email.template}, error={e}")
            raise

        message_id = response.get('MessageId', '')
        logger.info(f"Sent templated email: template={email.template}, message_id={message_id}")
        return message_id
