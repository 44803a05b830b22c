"""
Clients for third-party services consumed by the Lambda handler.
"""
