"""
Provider Output Parsing

Turns raw provider text into a decoded JSON value or a caller-supplied
fallback. Provider output is unreliable, so decoding never raises: a
failure is reported through logging and the parse-fallback counter, and
the caller receives its fallback object unchanged.

Usage:
    parsed = parse_json(raw, {"resolved_name": None}, context="resolver")

    # Or keep the distinction between decoded and substituted values
    result = try_parse_json(raw, {})
    if isinstance(result, Fallback):
        ...
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from src.common.telemetry import get_access_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)
_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Raw text decoded to a value of the expected shape."""

    value: T

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Fallback(Generic[T]):
    """Raw text could not be used; `value` is the caller's fallback."""

    value: T
    reason: str

    @property
    def is_fallback(self) -> bool:
        return True


ParseResult = Union[Ok[T], Fallback[T]]


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1)
    return text


def _default_expected_type(fallback: Any) -> type | None:
    if isinstance(fallback, dict):
        return dict
    if isinstance(fallback, list):
        return list
    return None


def try_parse_json(
    raw: Any,
    fallback: T,
    *,
    expected_type: type | None = None,
) -> ParseResult[T]:
    """
    Decode `raw` as JSON without side effects.

    Args:
        raw: Provider text (None and non-strings fall back)
        fallback: Value to hand back when decoding fails
        expected_type: Required type of the decoded value; defaults to the
            fallback's type when the fallback is a dict or list

    Returns:
        Ok(decoded) or Fallback(fallback, reason)
    """
    if raw is None:
        return Fallback(fallback, "no content")
    if not isinstance(raw, str):
        return Fallback(fallback, f"expected text, got {type(raw).__name__}")

    text = _strip_code_fence(raw.strip())
    if not text:
        return Fallback(fallback, "empty content")

    try:
        decoded = json.loads(text)
    except (ValueError, RecursionError) as e:
        return Fallback(fallback, f"invalid JSON: {e}")

    required = expected_type or _default_expected_type(fallback)
    if required is not None and not isinstance(decoded, required):
        return Fallback(
            fallback,
            f"expected {required.__name__}, got {type(decoded).__name__}",
        )

    return Ok(decoded)


def parse_json(
    raw: Any,
    fallback: T,
    *,
    expected_type: type | None = None,
    context: str = "",
) -> T:
    """
    Decode `raw` as JSON, returning `fallback` on any failure.

    A syntactically valid but empty object ("{}") is returned as decoded;
    only a failed decode or a wrong top-level type triggers the fallback.

    Args:
        raw: Provider text
        fallback: Value returned unchanged when decoding fails
        expected_type: Required type of the decoded value
        context: Label for logs and metrics ("resolver", "enrichment")
    """
    result = try_parse_json(raw, fallback, expected_type=expected_type)
    if isinstance(result, Fallback):
        preview = raw[:_PREVIEW_CHARS] if isinstance(raw, str) else repr(raw)
        logger.warning(
            f"Failed to parse {context or 'provider'} output ({result.reason}): {preview!r}"
        )
        get_access_metrics().record_parse_fallback(context)
    return result.value
