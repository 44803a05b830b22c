"""
Pytest configuration and fixtures for all tests.
"""

import json
import os
import sys
import pytest
from unittest.mock import Mock

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('RECAPTCHA_SECRET_KEY', 'test-recaptcha-secret')
os.environ.setdefault('OWNER_EMAIL', 'owner@example.com')
os.environ.setdefault('SOURCE_EMAIL', 'portfolio@example.com')
os.environ.setdefault('REGION', 'us-east-1')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')


@pytest.fixture
def valid_payload():
    """A submission body that passes every field rule."""
    return {
        'verificationToken': 'test-token',
        'name': 'Ada Lovelace',
        'email': 'ada@example.com',
        'subject': 'Hello there',
        'message': 'I would like to talk about your portfolio.'
    }


@pytest.fixture
def make_event(valid_payload):
    """Build an API Gateway proxy event around a body."""
    def _make_event(payload=None, **overrides):
        body = valid_payload if payload is None else payload
        event = {
            'httpMethod': 'POST',
            'body': body if isinstance(body, str) else json.dumps(body),
            'isBase64Encoded': False,
            'requestContext': {'identity': {'sourceIp': '203.0.113.7'}}
        }
        event.update(overrides)
        return event
    return _make_event


@pytest.fixture
def lambda_context():
    """Mock Lambda context."""
    context = Mock()
    context.aws_request_id = "test-request-id"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:contact-form-test"
    context.function_name = "contact-form-test"
    return context
