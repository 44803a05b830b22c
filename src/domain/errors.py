"""
Error taxonomy for contact form submissions.

Every error carries the HTTP status code and machine-readable code it is
translated to. The processor raises them internally and converts them to a
response at a single boundary, so none of them reach the Lambda runtime.
"""

from typing import Dict, Optional


class SubmissionError(Exception):
    """Base class for errors that terminate a submission with a response."""

    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class MalformedRequest(SubmissionError):
    """Raised when the body is missing, unparseable or missing fields."""

    status_code = 400
    code = 'MALFORMED_REQUEST'


class ValidationFailed(SubmissionError):
    """Raised when one or more fields break their rules."""

    status_code = 422
    code = 'VALIDATION_FAILED'

    def __init__(self, errors: Dict[str, str]):
        super().__init__('One or more fields are invalid.', details=errors)
        self.errors = errors


class VerificationUnavailable(SubmissionError):
    """Raised when the verification provider fails or returns no usable data."""

    status_code = 500
    code = 'VERIFICATION_UNAVAILABLE'


class VerificationRejected(SubmissionError):
    """Raised when the verification provider explicitly rejects the token."""

    status_code = 401
    code = 'VERIFICATION_REJECTED'


class DeliveryFailed(SubmissionError):
    """Raised when the owner notification could not be delivered."""

    status_code = 503
    code = 'DELIVERY_FAILED'
