"""
Data models for contact form processing domain.

These type-safe data structures define clear contracts between components.
"""

import json
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any


@dataclass
class Submission:
    """
    A validated contact form submission.

    Exists only for the duration of one invocation and is never persisted.

    Attributes:
        verification_token: Client-supplied reCAPTCHA token
        name: Sender's name
        email: Sender's email address
        subject: Message subject
        message: Message body
    """
    verification_token: str
    name: str
    email: str
    subject: str
    message: str

    def template_fields(self) -> Dict[str, str]:
        """Submission keyed by its wire field names, as exposed to the email templates."""
        return {
            'verificationToken': self.verification_token,
            'name': self.name,
            'email': self.email,
            'subject': self.subject,
            'message': self.message,
        }

    def to_template_data(self) -> str:
        """JSON string passed to SES as TemplateData."""
        return json.dumps(self.template_fields())


@dataclass
class VerificationOutcome:
    """
    Parsed response of the verification provider.

    Attributes:
        success: Whether the provider accepted the token
        error_codes: Provider error codes (e.g., "timeout-or-duplicate")
        hostname: Site hostname the token was solved on
        challenge_ts: Timestamp of the challenge
    """
    success: bool
    error_codes: List[str] = field(default_factory=list)
    hostname: Optional[str] = None
    challenge_ts: Optional[str] = None


@dataclass
class TemplatedEmail:
    """
    A single SES templated email request.

    Attributes:
        source: Sender address
        to_addresses: Recipient addresses
        reply_to_addresses: Reply-To addresses
        template: SES template name
        template_data: JSON-encoded template data
        bcc_addresses: Optional blind-copy recipients
    """
    source: str
    to_addresses: List[str]
    reply_to_addresses: List[str]
    template: str
    template_data: str
    bcc_addresses: List[str] = field(default_factory=list)


@dataclass
class DeliveryOutcome:
    """
    Settled result of one named delivery.

    Attributes:
        name: Delivery name (e.g., "thank-you", "notification")
        delivered: Whether the provider accepted the email
        message_id: Provider message id (on success)
        error: Failure reason (on failure)
    """
    name: str
    delivered: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.delivered:
            return f"DeliveryOutcome(name={self.name}, delivered=True, message_id={self.message_id})"
        else:
            return f"DeliveryOutcome(name={self.name}, delivered=False, error={self.error})"


@dataclass
class DeliveryReport:
    """
    All settled delivery outcomes of one submission.

    Only the gating delivery decides the response code; every other outcome
    is informational.

    Attributes:
        outcomes: Outcomes keyed by delivery name
        gating_delivery: Name of the delivery that decides the response
    """
    outcomes: Dict[str, DeliveryOutcome]
    gating_delivery: str

    @property
    def gating_outcome(self) -> DeliveryOutcome:
        """Outcome of the gating delivery."""
        return self.outcomes[self.gating_delivery]

    @property
    def failed(self) -> List[DeliveryOutcome]:
        """Outcomes that did not deliver, in name order."""
        return [self.outcomes[n] for n in sorted(self.outcomes) if not self.outcomes[n].delivered]

    def to_dict(self) -> Dict[str, Any]:
        """Summary for logging."""
        return {
            name: outcome.delivered
            for name, outcome in self.outcomes.items()
        }
