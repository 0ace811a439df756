"""
Tolerant JSON decoding for structured LLM output.

Models asked for "JSON only" still wrap it in ```json fences, add a sentence
before or after, or get cut off mid-object. Decoding is split in two:

1. extract_json_document() - fence strip + brace bounds -> plain dict
2. decode_structured()     - strict pydantic validation with field defaults

A failed decode is returned as DecodeResult(used_fallback=True), never raised.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from omniforge.providers.exceptions import MalformedOutputError

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

T = TypeVar("T", bound=BaseModel)


def strip_code_fences(content: str) -> str:
    """Remove markdown code fence markers. Non-string input reads as empty."""
    if not isinstance(content, str):
        return ""
    return CODE_FENCE.sub("", content).strip()


def extract_json_document(content: str) -> Dict[str, Any]:
    """
    Extract the outermost JSON object from free-form model output.

    Raises:
        MalformedOutputError: no parsable object between the first '{' and last '}'
    """
    cleaned = strip_code_fences(content)
    if not cleaned:
        raise MalformedOutputError("Empty model output", raw=content or "")

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise MalformedOutputError("No JSON object in model output", raw=content)

    try:
        document = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Invalid JSON: {e.msg} at char {e.pos}", raw=content) from e

    if not isinstance(document, dict):
        raise MalformedOutputError("Top-level JSON value is not an object", raw=content)

    return document


@dataclass
class DecodeResult(Generic[T]):
    """Outcome of a structured decode: either the parsed value or a fallback."""
    value: T
    used_fallback: bool = False
    reason: Optional[str] = None


def decode_structured(
    content: str,
    schema: Type[T],
    fallback: Optional[Callable[[], T]] = None,
    label: str = "output",
) -> DecodeResult[T]:
    """
    Decode model output into `schema`, substituting `fallback()` on any failure.

    Args:
        content: Raw model output
        schema: Pydantic model describing the expected document
        fallback: Zero-argument factory for the deterministic replacement
                  (value is None when omitted)
        label: Name used in log lines

    Returns:
        DecodeResult with used_fallback set when the fallback was substituted
    """
    try:
        document = extract_json_document(content)
        value = schema.model_validate(document)
    except MalformedOutputError as e:
        logger.warning(f"[DECODE] {label}: {e.message} - using fallback")
        return DecodeResult(value=fallback() if fallback else None, used_fallback=True, reason=e.message)
    except ValidationError as e:
        reason = f"Schema mismatch ({e.error_count()} error(s))"
        logger.warning(f"[DECODE] {label}: {reason} - using fallback")
        return DecodeResult(value=fallback() if fallback else None, used_fallback=True, reason=reason)

    return DecodeResult(value=value)
