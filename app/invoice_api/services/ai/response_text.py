"""
Normalization of generative-model responses into plain text.

Model SDKs hand back very different objects: plain strings, objects with a
``text`` attribute or method, or Responses-API objects carrying an
``output[].content[].text`` tree. Each response is first classified into a
closed set of shapes, then the matching handler pulls the text out.
"""

import json
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ResponseShape(str, Enum):
    """Response shapes the extractor knows how to read."""

    STRING = "string"
    TEXT_FIELD = "text_field"
    TEXT_CALLABLE = "text_callable"
    STRUCTURED_OUTPUT = "structured_output"
    UNKNOWN = "unknown"


def _field(value: Any, name: str) -> Any:
    """Read ``name`` from a mapping key or an attribute."""
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _content_parts(response: Any) -> list[Any]:
    """Collect ``text`` members of every ``output[].content[]`` element."""
    output = _field(response, "output")
    if not isinstance(output, (list, tuple)):
        return []

    parts = []
    for out in output:
        content = _field(out, "content")
        if not isinstance(content, (list, tuple)):
            continue
        for element in content:
            text = _field(element, "text")
            if isinstance(text, str) or callable(text):
                parts.append(text)
    return parts


def classify_response(response: Any) -> ResponseShape:
    """
    Classify a model response by probing its capabilities in a fixed order.

    Args:
        response: Opaque value returned by the model call.

    Returns:
        The first matching ResponseShape, UNKNOWN if none applies.
    """
    if isinstance(response, str):
        return ResponseShape.STRING

    text = _field(response, "text")
    if isinstance(text, str):
        return ResponseShape.TEXT_FIELD
    if callable(text):
        return ResponseShape.TEXT_CALLABLE

    if _content_parts(response):
        return ResponseShape.STRUCTURED_OUTPUT

    return ResponseShape.UNKNOWN


def _read_string(response: Any) -> str:
    return response


def _read_text_field(response: Any) -> str:
    return _field(response, "text")


def _read_text_callable(response: Any) -> str:
    return _as_text(_field(response, "text")())


def _read_structured_output(response: Any) -> str:
    texts = [part if isinstance(part, str) else _as_text(part()) for part in _content_parts(response)]
    return "\n\n".join(texts)


def _read_unknown(response: Any) -> str:
    # Last resort: hand back a serialized view of the whole value
    if hasattr(response, "model_dump_json"):
        return response.model_dump_json()
    return json.dumps(response, default=str)


_READERS: dict[ResponseShape, Callable[[Any], str]] = {
    ResponseShape.STRING: _read_string,
    ResponseShape.TEXT_FIELD: _read_text_field,
    ResponseShape.TEXT_CALLABLE: _read_text_callable,
    ResponseShape.STRUCTURED_OUTPUT: _read_structured_output,
    ResponseShape.UNKNOWN: _read_unknown,
}


def extract_response_text(response: Any) -> str:
    """
    Extract a single text string from a model response.

    Never raises: any failure while reading the response is logged and
    results in an empty string.

    Args:
        response: Opaque value returned by the model call.

    Returns:
        The response text, or "" when nothing could be extracted.
    """
    if response is None:
        return ""

    try:
        shape = classify_response(response)
        text = _READERS[shape](response)
        logger.debug("Extracted %d chars from %s response", len(text), shape.value)
        return text
    except Exception:
        logger.warning("Could not extract text from model response", exc_info=True)
        return ""
