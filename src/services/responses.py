"""
API Gateway proxy responses.

All bodies are JSON strings. Errors share one envelope:
{"code": ..., "message": ..., "details": ...}, where details is present only
when there is something to report (e.g., per-field validation errors).
"""

import json
from typing import Any, Dict, Optional

from domain.errors import SubmissionError

SUCCESS_CODE = 'MESSAGE_SENT'
SUCCESS_MESSAGE = 'Thank you for your message! It has been sent successfully.'


def build_response(status_code: int, body: Dict[str, Any], allowed_origin: str = '*') -> Dict[str, Any]:
    """Create a proxy response with JSON and CORS headers."""
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': allowed_origin
        },
        'body': json.dumps(body)
    }


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body = {'code': code, 'message': message}
    if details:
        body['details'] = details
    return body


def error_response(error: SubmissionError, allowed_origin: str = '*') -> Dict[str, Any]:
    """Translate a SubmissionError into its response."""
    return build_response(
        error.status_code,
        error_body(error.code, error.message, error.details),
        allowed_origin
    )


def success_response(allowed_origin: str = '*') -> Dict[str, Any]:
    return build_response(
        200,
        {'code': SUCCESS_CODE, 'message': SUCCESS_MESSAGE},
        allowed_origin
    )
