"""
AI service package for invoice text parsing, reminder drafting and
dashboard insights.

This package provides modular AI functionality split into:
- response_text: Normalizing model responses into plain text
- parsing: Invoice extraction from free text with JSON normalization
- fallback: Deterministic regex-based invoice parser
- validation: Coercion of model JSON into the canonical draft
- reminder: Reminder email drafting with a template fallback
- insights: Dashboard insight summaries

The AIService class owns the model client and delegates to these modules.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from ...models import DashboardSummaryResponse, ParseTextResponse, ReminderDraft
from ...models_db import Invoice
from .exceptions import AIResponseFormatError, AIServiceError
from .fallback import simple_fallback_parse
from .insights import generate_insights as _generate_insights
from .parsing import parse_invoice_text as _parse_invoice_text
from .parsing import parse_json_response, strip_code_fences
from .reminder import generate_reminder as _generate_reminder
from .response_text import ResponseShape, classify_response, extract_response_text

logger = logging.getLogger(__name__)

__all__ = [
    "AIService",
    "AIServiceError",
    "AIResponseFormatError",
    "ResponseShape",
    "classify_response",
    "extract_response_text",
    "parse_json_response",
    "simple_fallback_parse",
    "strip_code_fences",
    "get_ai_service",
]


# =============================================================================
# AIService Class
# =============================================================================


class AIService:
    """
    Service for AI-assisted invoice operations.

    Wraps a single OpenAI client for the lifetime of the process. Every
    operation has a deterministic fallback, so the service also runs in
    MOCK MODE (no API key): model calls raise AIServiceError and callers
    degrade to their fallbacks.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        use_mock: bool = False,
        client: Any = None,
    ):
        """
        Initialize the AI service.

        Args:
            api_key: OpenAI API key. If None, reads from config/environment.
            model: Model name. If None, reads from config/environment.
            use_mock: If True, never call the model.
            client: Pre-built client exposing ``responses.create``.
        """
        if api_key is None or model is None:
            from ...config import get_settings

            settings = get_settings()
            if api_key is None:
                api_key = settings.openai_api_key
            if model is None:
                model = settings.ai_model

        self.api_key = api_key
        self.model = model
        self._client = client
        self.use_mock = use_mock or (client is None and not self.api_key)

        if self.use_mock:
            logger.warning(
                "AI Service running in MOCK MODE. Set OPENAI_API_KEY in .env for AI features; "
                "deterministic fallbacks will be used."
            )

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise AIServiceError(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            try:
                from openai import OpenAI

                self._client = OpenAI(api_key=self.api_key)
            except ImportError as e:
                raise AIServiceError(
                    "openai library not installed. Run: pip install openai"
                ) from e
        return self._client

    def generate(self, prompt: str, model: str | None = None) -> Any:
        """
        Run one blocking model round-trip.

        Args:
            prompt: Full prompt text.
            model: Model override; defaults to the configured model.

        Returns:
            The raw SDK response (shape varies, see response_text).

        Raises:
            AIServiceError: In mock mode or if the call fails for any reason.
        """
        if self.use_mock:
            raise AIServiceError("AI service is running in mock mode (no API key configured)")

        model_name = model or self.model
        logger.info("Calling model %s (%d prompt chars)", model_name, len(prompt))
        try:
            return self.client.responses.create(model=model_name, input=prompt)
        except AIServiceError:
            raise
        except Exception as e:
            raise AIServiceError(f"AI generation failed: {e}") from e

    async def generate_async(self, prompt: str, model: str | None = None) -> Any:
        """Run ``generate`` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.generate, prompt, model)

    async def parse_invoice_text(self, text: str) -> ParseTextResponse:
        """
        Extract an invoice draft from free text.

        Delegates to the parsing module.
        """
        return await _parse_invoice_text(text, self)

    async def generate_reminder(self, invoice: Invoice) -> ReminderDraft:
        """
        Draft a payment reminder for an invoice.

        Delegates to the reminder module.
        """
        return await _generate_reminder(invoice, self)

    async def generate_insights(self, invoices: Sequence[Invoice]) -> DashboardSummaryResponse:
        """
        Summarize invoices into dashboard insights.

        Delegates to the insights module.
        """
        return await _generate_insights(invoices, self)


# =============================================================================
# Singleton Factory
# =============================================================================

_ai_service: AIService | None = None


def get_ai_service() -> AIService:
    """Get or create the AI service singleton."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
