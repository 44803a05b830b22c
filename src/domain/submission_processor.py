"""
Contact form pipeline - core business logic.

This module handles the end-to-end processing of one form submission:
1. Parse and validate the request body
2. Verify the reCAPTCHA token (blocking gate)
3. Send the thank-you and notification emails concurrently
4. Merge delivery outcomes into one response

All errors are caught and translated to a response.
No exceptions propagate out of the public methods.
"""

import logging
import time
from typing import Any, Dict, Optional

from config import Settings
from integrations.recaptcha_verification import RecaptchaVerifier
from services import dispatch
from services import responses
from services.ses import TemplatedEmailSender
from .errors import SubmissionError, DeliveryFailed, VerificationRejected
from .models import DeliveryReport, Submission, TemplatedEmail
from .validation import parse_body, parse_submission

logger = logging.getLogger(__name__)

THANK_YOU = 'thank-you'
NOTIFICATION = 'notification'

REJECTED_MESSAGE = 'Your submission was flagged as automated and was not sent.'
INTERNAL_ERROR_MESSAGE = 'Something went wrong while sending your message. Please try again later.'


class SubmissionProcessor:
    """
    Handles the verify-then-send pipeline for contact form submissions.

    The verifier and sender are constructed once and injected, so warm
    invocations reuse their HTTP session and SES client.

    Attributes:
        settings: Loaded configuration
        verifier: Verification provider client
        sender: Email delivery provider client
        gating_delivery: Delivery whose outcome decides the response code
    """

    def __init__(
        self,
        settings: Settings,
        verifier: RecaptchaVerifier,
        sender: TemplatedEmailSender,
        gating_delivery: str = NOTIFICATION
    ):
        if gating_delivery not in (THANK_YOU, NOTIFICATION):
            raise ValueError(f"Unknown gating delivery: {gating_delivery}")
        self.settings = settings
        self.verifier = verifier
        self.sender = sender
        self.gating_delivery = gating_delivery

    @classmethod
    def from_settings(cls, settings: Settings) -> 'SubmissionProcessor':
        """Build a processor with real provider clients."""
        return cls(
            settings=settings,
            verifier=RecaptchaVerifier.from_settings(settings),
            sender=TemplatedEmailSender.from_settings(settings)
        )

    def process(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process one API Gateway proxy event.

        Args:
            event: Lambda proxy event with a JSON body

        Returns:
            Proxy response dict (statusCode, headers, body)
        """
        origin = self.settings.allowed_origin
        start_time = time.time()

        try:
            submission = parse_submission(parse_body(event))
            self._verify(submission, _source_ip(event))
            report = self._deliver(submission)
            self._check_report(report)

        except SubmissionError as e:
            logger.info(f"Submission ended with {e.status_code} {e.code}")
            return responses.error_response(e, origin)

        except Exception as e:
            logger.error(f"Unexpected error while processing submission: {e}", exc_info=True)
            return responses.build_response(
                500,
                responses.error_body('INTERNAL_ERROR', INTERNAL_ERROR_MESSAGE),
                origin
            )

        logger.info(f"Submission processed in {time.time() - start_time:.3f}s")
        return responses.success_response(origin)

    def _verify(self, submission: Submission, remote_ip: Optional[str]) -> None:
        """
        Gate on the verification provider.

        Raises:
            VerificationUnavailable: If the provider fails (from the verifier)
            VerificationRejected: If the provider rejects the token
        """
        outcome = self.verifier.verify(submission.verification_token, remote_ip=remote_ip)
        if not outcome.success:
            logger.info(f"Verification rejected: error_codes={outcome.error_codes}")
            raise VerificationRejected(REJECTED_MESSAGE)

    def _build_emails(self, submission: Submission) -> Dict[str, TemplatedEmail]:
        """Thank-you to the sender and notification to the owner."""
        settings = self.settings
        template_data = submission.to_template_data()

        thank_you = TemplatedEmail(
            source=settings.owner_email,
            to_addresses=[submission.email],
            reply_to_addresses=[settings.owner_email],
            template=settings.thank_you_template,
            template_data=template_data,
            bcc_addresses=[settings.owner_email] if settings.bcc_owner_on_thank_you else []
        )
        notification = TemplatedEmail(
            source=settings.source_email,
            to_addresses=[settings.owner_email],
            reply_to_addresses=[submission.email],
            template=settings.notification_template,
            template_data=template_data
        )
        return {THANK_YOU: thank_you, NOTIFICATION: notification}

    def _deliver(self, submission: Submission) -> DeliveryReport:
        """Send both emails and wait for both to settle."""
        emails = self._build_emails(submission)
        tasks = {
            name: (lambda email=email: self.sender.send(email))
            for name, email in emails.items()
        }

        outcomes = dispatch.settle_all(tasks)
        report = DeliveryReport(outcomes=outcomes, gating_delivery=self.gating_delivery)
        logger.info(f"Deliveries settled: {report.to_dict()}")
        return report

    def _check_report(self, report: DeliveryReport) -> None:
        """
        Merge delivery outcomes.

        Raises:
            DeliveryFailed: If the gating delivery failed
        """
        for outcome in report.failed:
            if outcome.name != report.gating_delivery:
                logger.warning(f"⚠ Best-effort delivery failed: {outcome!r}")

        gating = report.gating_outcome
        if not gating.delivered:
            logger.error(f"Gating delivery failed: {gating!r}")
            raise DeliveryFailed(gating.error or 'Delivery failed')


def _source_ip(event: Dict[str, Any]) -> Optional[str]:
    """Caller IP from a REST (v1) or HTTP (v2) API proxy event."""
    context = event.get('requestContext') or {}
    identity = context.get('identity') or {}
    http = context.get('http') or {}
    return identity.get('sourceIp') or http.get('sourceIp') or None
