"""
Routers package for FastAPI endpoints.

Organized by domain:
- auth: Registration, login and profile
- invoices: Invoice CRUD
- ai: Text parsing, reminder drafting and dashboard insights
- email: Reminder email dispatch
"""

from . import ai, auth, email, invoices

__all__ = ["ai", "auth", "email", "invoices"]
