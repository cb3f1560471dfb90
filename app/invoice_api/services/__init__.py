"""
Services package for the invoice API.

Contains:
- ai: Model client plus parsing, reminder and insight pipelines
- auth_service: Password hashing, JWT tokens, current-user dependency
- email_service: SMTP reminder dispatch
- invoice_service: Invoice totals and serialization
"""

from .ai import AIService
from .email_service import EmailService

__all__ = ["AIService", "EmailService"]
