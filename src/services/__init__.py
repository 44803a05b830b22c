"""
Utility functions for Lambda handler operations.

This package contains reusable service functions for sending templated
email, settling concurrent deliveries and building proxy responses.
"""

__all__ = ['ses', 'dispatch', 'responses']
