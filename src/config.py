"""
Environment-backed configuration for the contact form Lambda.

Settings are read once at cold start and passed to the components that need
them. Required values that are missing raise ConfigurationError so the
handler can answer with a 500 instead of failing the invocation.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = 'https://www.google.com/recaptcha/api/siteverify'
DEFAULT_THANK_YOU_TEMPLATE = 'PortfolioThankYou'
DEFAULT_NOTIFICATION_TEMPLATE = 'PortfolioNotification'
DEFAULT_REGION = 'us-east-1'


class ConfigurationError(Exception):
    """Raised when module configuration is invalid or missing."""
    pass


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, '').strip()
    if not value:
        raise ConfigurationError(
            f"{name} environment variable is required but not set. "
            f"Please configure this in your SAM template or Lambda environment."
        )
    return value


def _flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Settings:
    """
    Contact form configuration.

    Attributes:
        recaptcha_secret: Shared secret for the verification provider
        owner_email: Site owner address (gets notified, signs the thank-you)
        source_email: Source address of the owner notification
        thank_you_template: SES template for the acknowledgment
        notification_template: SES template for the owner notification
        bcc_owner_on_thank_you: Blind-copy the owner on the acknowledgment
        region: SES region
        access_key_id: Explicit AWS access key (None = default chain)
        secret_access_key: Explicit AWS secret key (None = default chain)
        verify_url: Verification provider endpoint
        verify_timeout: Verification timeout in seconds
        allowed_origin: Value of Access-Control-Allow-Origin
        environment: Deployment environment name
    """
    recaptcha_secret: str
    owner_email: str
    source_email: str
    thank_you_template: str = DEFAULT_THANK_YOU_TEMPLATE
    notification_template: str = DEFAULT_NOTIFICATION_TEMPLATE
    bcc_owner_on_thank_you: bool = False
    region: str = DEFAULT_REGION
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    verify_url: str = DEFAULT_VERIFY_URL
    verify_timeout: float = 5.0
    allowed_origin: str = '*'
    environment: str = 'dev'

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Read settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings: The validated settings

        Raises:
            ConfigurationError: If a required variable is missing or invalid
        """
        if environ is None:
            environ = os.environ

        owner_email = _require(environ, 'OWNER_EMAIL')

        timeout_raw = environ.get('RECAPTCHA_TIMEOUT_SECONDS', '5')
        try:
            verify_timeout = float(timeout_raw)
        except ValueError:
            raise ConfigurationError(
                f"RECAPTCHA_TIMEOUT_SECONDS must be a number, got: '{timeout_raw}'"
            )
        if verify_timeout <= 0:
            raise ConfigurationError("RECAPTCHA_TIMEOUT_SECONDS must be positive")

        settings = cls(
            recaptcha_secret=_require(environ, 'RECAPTCHA_SECRET_KEY'),
            owner_email=owner_email,
            source_email=environ.get('SOURCE_EMAIL') or owner_email,
            thank_you_template=environ.get('THANK_YOU_TEMPLATE') or DEFAULT_THANK_YOU_TEMPLATE,
            notification_template=environ.get('NOTIFICATION_TEMPLATE') or DEFAULT_NOTIFICATION_TEMPLATE,
            bcc_owner_on_thank_you=_flag(environ, 'BCC_OWNER_ON_THANK_YOU'),
            region=(
                environ.get('REGION')
                or environ.get('AWS_REGION')
                or environ.get('AWS_DEFAULT_REGION')
                or DEFAULT_REGION
            ),
            access_key_id=environ.get('ACCESS_KEY_ID') or None,
            secret_access_key=environ.get('SECRET_ACCESS_KEY') or None,
            verify_url=environ.get('RECAPTCHA_VERIFY_URL') or DEFAULT_VERIFY_URL,
            verify_timeout=verify_timeout,
            allowed_origin=environ.get('ALLOWED_ORIGIN') or '*',
            environment=environ.get('ENVIRONMENT', 'dev'),
        )

        if bool(settings.access_key_id) != bool(settings.secret_access_key):
            raise ConfigurationError(
                "ACCESS_KEY_ID and SECRET_ACCESS_KEY must be set together"
            )

        logger.info(
            f"Settings loaded: environment={settings.environment}, region={settings.region}, "
            f"templates={settings.thank_you_template}/{settings.notification_template}"
        )
        return settings
