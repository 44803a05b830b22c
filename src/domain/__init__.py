"""
Domain layer for contact form processing business logic.

This layer contains:
- Data models (submission, verification and delivery outcomes)
- Validation schema (declarative field rules)
- Error taxonomy (each error maps to one HTTP status)
- Business logic (verify-then-send pipeline)
"""
