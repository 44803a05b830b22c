"""
AWS Lambda handler for contact form submissions from API Gateway.

Thin orchestration layer that delegates to SubmissionProcessor.
Policy: every invocation gets a response; nothing is raised to the runtime.
"""

import logging
import os
import threading
from typing import Dict, Any, Optional

from config import ConfigurationError, Settings
from domain.submission_processor import SubmissionProcessor
from services import responses

# Configure logging
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)


def _console_handler(level: str) -> logging.Handler:
    """Console handler for local runs, at the same level as the root logger."""
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    return console_handler


# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    logger.addHandler(_console_handler(LOG_LEVEL))

# Created on the first invocation (cold start) and reused across warm invocations
_processor: Optional[SubmissionProcessor] = None
_processor_lock = threading.Lock()

CONFIGURATION_ERROR_MESSAGE = 'The contact form is not configured. Please try again later.'


def get_processor() -> SubmissionProcessor:
    """
    Return the process-wide processor, creating it exactly once.

    Raises:
        ConfigurationError: If required settings are missing
    """
    global _processor
    if _processor is None:
        with _processor_lock:
            if _processor is None:
                _processor = SubmissionProcessor.from_settings(Settings.from_environ())
                logger.info("Submission processor initialized")
    return _processor


def set_processor(processor: Optional[SubmissionProcessor]) -> None:
    """Install a processor (or None to force re-initialization on next use)."""
    global _processor
    with _processor_lock:
        _processor = processor


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Handle one contact form submission.

    Args:
        event: API Gateway proxy event with a JSON body
        context: Lambda context

    Returns:
        Dict with statusCode, headers and body
    """
    request_id = getattr(context, 'aws_request_id', None) or getattr(context, 'request_id', 'UNKNOWN')
    logger.info(f"Contact form submission received: request_id={request_id}")

    try:
        processor = get_processor()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return responses.build_response(
            500,
            responses.error_body('CONFIGURATION_ERROR', CONFIGURATION_ERROR_MESSAGE),
            os.environ.get('ALLOWED_ORIGIN') or '*'
        )
    except Exception as e:
        logger.error(f"Failed to initialize submission processor: {e}", exc_info=True)
        return responses.build_response(
            500,
            responses.error_body('INTERNAL_ERROR', CONFIGURATION_ERROR_MESSAGE),
            os.environ.get('ALLOWED_ORIGIN') or '*'
        )

    response = processor.process(event)

    if response['statusCode'] == 200:
        logger.info(f"✓ Submission {request_id} delivered")
    else:
        logger.info(f"Submission {request_id} answered with {response['statusCode']}")
    return response


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.

    Reports whether configuration loads; never calls external providers.
    """
    try:
        settings = Settings.from_environ()
        configured = True
        environment = settings.environment
        allowed_origin = settings.allowed_origin
    except ConfigurationError:
        configured = False
        environment = os.environ.get('ENVIRONMENT', 'dev')
        allowed_origin = os.environ.get('ALLOWED_ORIGIN') or '*'

    return responses.build_response(200, {
        'status': 'healthy',
        'environment': environment,
        'configured': configured
    }, allowed_origin)
