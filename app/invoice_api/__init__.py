"""
AI Invoice Backend Application.

A FastAPI service for managing invoices, with AI-assisted parsing of
free-text invoice requests, reminder email drafting and dashboard insights
(OpenAI), each backed by a deterministic fallback.
"""

__version__ = "1.0.0"
