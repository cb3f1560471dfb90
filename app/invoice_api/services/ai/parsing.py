"""
Invoice parsing from free text.

The model is asked for a JSON invoice draft. Its answer is reduced to text,
stripped of Markdown code fences and decoded exactly once; when the call
fails or the answer is not a usable invoice object, the deterministic
fallback parser runs on the caller's original text instead.
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from ...models import ParsedInvoiceDraft, ParseTextResponse
from .exceptions import AIResponseFormatError, AIServiceError
from .fallback import simple_fallback_parse
from .response_text import extract_response_text
from .validation import normalize_invoice_draft

if TYPE_CHECKING:
    from . import AIService

logger = logging.getLogger(__name__)


# =============================================================================
# Parse Prompt
# =============================================================================

PARSE_PROMPT_TEMPLATE = """You are an expert invoice data extraction AI. Analyze the following text and extract the relevant information to create an invoice.
The output MUST be a valid JSON object.

The JSON object should have the following structure:
{{
  "clientName": "string",
  "email": "string (if available)",
  "address": "string (if available)",
  "items": [
    {{
      "name": "string",
      "quantity": "number",
      "unitPrice": "number"
    }}
  ]
}}

Here is the text to parse:
--- TEXT START ---
{text}
--- TEXT END ---

Extract the data and provide only the JSON object."""


def build_parse_prompt(text: str) -> str:
    """Build the invoice extraction prompt for the given text."""
    return PARSE_PROMPT_TEMPLATE.format(text=text)


# =============================================================================
# JSON Normalization
# =============================================================================


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markers and surrounding whitespace."""
    return text.replace("```json", "").replace("```", "").strip()


def parse_json_response(text: str) -> Any:
    """
    Decode a model answer as JSON after stripping code fences.

    Exactly one decode attempt is made; there is no repair step.

    Raises:
        AIResponseFormatError: If the text is not valid JSON.
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        raise AIResponseFormatError(f"Invalid JSON in model response: {e}") from e


# =============================================================================
# Orchestration
# =============================================================================


def _fallback_response(text: str, ai_error: str) -> ParseTextResponse:
    draft = simple_fallback_parse(text)
    return ParseTextResponse(**draft.model_dump(), ai_error=ai_error)


async def parse_invoice_text(text: str, ai_service: "AIService") -> ParseTextResponse:
    """
    Turn free text into a canonical invoice draft.

    Model failures never propagate: the fallback draft is returned with
    ``ai_error`` describing why the AI path was abandoned.

    Args:
        text: User-supplied invoice description, email or note.
        ai_service: Injected model client.

    Returns:
        ParseTextResponse with the draft and an optional ai_error.
    """
    try:
        response = await ai_service.generate_async(build_parse_prompt(text))
    except AIServiceError as e:
        logger.error("AI parse-text call failed: %s", e)
        return _fallback_response(text, str(e) or "AI generation failed")

    response_text = extract_response_text(response)
    try:
        draft: ParsedInvoiceDraft = normalize_invoice_draft(parse_json_response(response_text))
    except AIResponseFormatError as e:
        logger.warning(
            "AI returned unusable JSON for invoice parsing (%s), using fallback parser. AI output: %s",
            e,
            response_text[:500],
        )
        return _fallback_response(text, "AI returned invalid JSON")

    logger.info(
        "AI parsed invoice draft: client=%r, %d item(s)",
        draft.client_name,
        len(draft.items),
    )
    return ParseTextResponse(**draft.model_dump())
