"""
Declarative validation of contact form payloads.

Each field has a rule with length bounds and an optional required substring.
All rules are evaluated before reporting, so the caller sees every problem at
once instead of only the first.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import MalformedRequest, ValidationFailed
from .models import Submission

logger = logging.getLogger(__name__)

# Wire names accepted for the verification token, in order of preference
TOKEN_FIELDS = ('verificationToken', 'recaptcha')

MISSING_BODY_MESSAGE = 'No request body found.'
INVALID_BODY_MESSAGE = 'Request body must be a JSON object.'
MISSING_FIELDS_MESSAGE = 'Missing required fields: verificationToken, name, email, subject and message are required.'


@dataclass(frozen=True)
class FieldRule:
    """
    Constraints for one text field.

    Attributes:
        min_length: Minimum length in characters (inclusive)
        max_length: Maximum length in characters (inclusive)
        must_contain: Substring the value must contain, if any
        message: Error message reported when the rule is broken
    """
    min_length: int
    max_length: int
    message: str
    must_contain: Optional[str] = None

    def check(self, value: Any) -> Optional[str]:
        """Return the error message if value breaks the rule, else None."""
        if not isinstance(value, str):
            return 'Must be a string.'
        if not self.min_length <= len(value) <= self.max_length:
            return self.message
        if self.must_contain and self.must_contain not in value:
            return self.message
        return None


FIELD_RULES: Dict[str, FieldRule] = {
    'name': FieldRule(
        min_length=2, max_length=50,
        message='Name must be between 2 and 50 characters.'
    ),
    'email': FieldRule(
        min_length=3, max_length=254, must_contain='@',
        message='Email must be a valid address between 3 and 254 characters.'
    ),
    'subject': FieldRule(
        min_length=2, max_length=255,
        message='Subject must be between 2 and 255 characters.'
    ),
    'message': FieldRule(
        min_length=10, max_length=2000,
        message='Message must be between 10 and 2000 characters.'
    ),
}


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract and decode the JSON body of an API Gateway proxy event.

    Args:
        event: Lambda proxy event

    Returns:
        Decoded JSON object

    Raises:
        MalformedRequest: If the body is missing, not JSON, or not an object
    """
    if not isinstance(event, dict):
        raise MalformedRequest(MISSING_BODY_MESSAGE)

    raw = event.get('body')
    if raw is None or raw == '':
        raise MalformedRequest(MISSING_BODY_MESSAGE)

    if event.get('isBase64Encoded'):
        try:
            raw = base64.b64decode(raw, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError, TypeError, ValueError) as e:
            logger.info(f"Rejected body with invalid base64 encoding: {e}")
            raise MalformedRequest(INVALID_BODY_MESSAGE)

    # Some callers invoke the function directly with an already-decoded body
    if isinstance(raw, dict):
        return raw

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.info(f"Rejected body that is not valid JSON: {e}")
        raise MalformedRequest(INVALID_BODY_MESSAGE)

    if not isinstance(payload, dict):
        raise MalformedRequest(INVALID_BODY_MESSAGE)

    return payload


def _token_from(payload: Dict[str, Any]) -> Any:
    for key in TOKEN_FIELDS:
        if payload.get(key) is not None:
            return payload[key]
    return None


def validate_fields(payload: Dict[str, Any]) -> Dict[str, str]:
    """
    Apply FIELD_RULES to every field of the payload.

    Args:
        payload: Decoded request body

    Returns:
        Mapping of field name to error message (empty when valid)
    """
    errors = {}
    for name, rule in FIELD_RULES.items():
        problem = rule.check(payload.get(name))
        if problem:
            errors[name] = problem
    return errors


def parse_submission(payload: Dict[str, Any]) -> Submission:
    """
    Build a Submission from a decoded body.

    Args:
        payload: Decoded request body

    Returns:
        Submission with all fields validated

    Raises:
        MalformedRequest: If any required field is missing or null
        ValidationFailed: If any field breaks its rule (carries all violations)
    """
    token = _token_from(payload)
    if token is None or any(payload.get(name) is None for name in FIELD_RULES):
        raise MalformedRequest(MISSING_FIELDS_MESSAGE)

    errors = validate_fields(payload)
    if not isinstance(token, str) or not token:
        errors['verificationToken'] = 'Verification token must be a non-empty string.'
    if errors:
        logger.info(f"Submission failed validation: fields={sorted(errors)}")
        raise ValidationFailed(errors)

    return Submission(
        verification_token=token,
        name=payload['name'],
        email=payload['email'],
        subject=payload['subject'],
        message=payload['message'],
    )
