"""
parsing.py - Defensive parsing of model output into a Generation Result

The model is asked for bare JSON but may wrap it in a code fence or prose.
Parsing trims the text, strips a leading/trailing fence, then tries an ordered
list of strategies and stops at the first one that yields a JSON object:

1. direct          - the whole cleaned text is the object
2. brace_extraction - the greedy `{...}` span (first `{` to last `}`)

Nothing else is repaired. If every strategy fails, `ResponseParseError` is
raised with the first 200 characters of the raw text for server-side logs.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .utils import truncate

_logger = logging.getLogger(__name__)

DIAGNOSTIC_PREFIX_CHARS = 200

_LEADING_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```$")
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class ResponseParseError(ValueError):
    """Model output could not be recovered as a JSON object."""

    def __init__(self, raw_text: Optional[str]):
        self.raw_prefix = truncate(raw_text, DIAGNOSTIC_PREFIX_CHARS)
        super().__init__(f"Could not parse model output as JSON: {self.raw_prefix}")


def strip_code_fence(text: str) -> str:
    """Trim whitespace and remove a surrounding ``` / ```json fence if the text starts with one."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE_RE.sub("", cleaned, count=1)
        cleaned = cleaned.strip()
    return cleaned


def _as_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def _parse_direct(text: str) -> Optional[Dict[str, Any]]:
    return _as_object(text)


def _parse_brace_extraction(text: str) -> Optional[Dict[str, Any]]:
    match = _OBJECT_RE.search(text)
    if not match:
        return None
    return _as_object(match.group(0))


PARSE_STRATEGIES: List[Tuple[str, Callable[[str], Optional[Dict[str, Any]]]]] = [
    ("direct", _parse_direct),
    ("brace_extraction", _parse_brace_extraction),
]


def parse_with_strategy(raw_text: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """
    Parse raw model text and report which strategy succeeded.

    Returns:
        (strategy_name, parsed_object)

    Raises:
        ResponseParseError: if no strategy produces a JSON object.
    """
    cleaned = strip_code_fence(raw_text or "")
    for name, strategy in PARSE_STRATEGIES:
        parsed = strategy(cleaned)
        if parsed is not None:
            if name != "direct":
                _logger.debug("Model output parsed via %s", name)
            return name, parsed
    raise ResponseParseError(raw_text)


def parse_generation_result(raw_text: Optional[str]) -> Dict[str, Any]:
    """Parse raw model text into the `{goals, mood, insight}` dict."""
    _, parsed = parse_with_strategy(raw_text)
    return parsed
