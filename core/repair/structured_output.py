"""
Structured Output Loader

Caller-facing wrapper around the Truncation Repairer for JSON the generator
returns (chapter outlines, book structures). Strips markdown fences, repairs
up front when the generator reported a max-tokens stop, and otherwise falls
back to repair only when a plain parse fails.

Example usage:
    >>> outline = load_structured_output(response_text, truncated=stop_reason == 'max_tokens')
    >>> for chapter in outline['chapters']:
    ...     print(chapter['title'])
"""

import json
import re
from typing import Any, Iterable, Optional

from config.logging_config import get_logger
from core.repair.truncation import find_value_start, repair_truncated_json

logger = get_logger(__name__)


JSON_FENCE_PATTERN = re.compile(r'^```(?:json)?\s*|\s*```$', re.MULTILINE)


class StructuredOutputError(ValueError):
    """Raised when a response holds no JSON, or repaired JSON still fails to parse."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` fence lines around a response."""
    return JSON_FENCE_PATTERN.sub('', text.strip()).strip()


def extract_json_block(text: str) -> Optional[str]:
    """
    Slice the outermost JSON value out of surrounding prose.

    Returns:
        Text from the first '{' / '[' to the last '}' / ']' after it, the
        whole tail when no closer follows (truncated output), or None when
        there is no start marker at all.
    """
    start = find_value_start(text)
    if start == -1:
        return None
    end = max(text.rfind('}'), text.rfind(']'))
    if end < start:
        return text[start:]
    return text[start:end + 1]


def load_structured_output(
    text: str,
    truncated: bool = False,
    context: str = 'structure',
    expected_keys: Optional[Iterable[str]] = None,
) -> Any:
    """
    Parse generator JSON, repairing truncation when needed.

    Args:
        text: Raw response text
        truncated: The generator stopped on its token limit
        context: Short label used in log and error messages
        expected_keys: Keys a top-level object must carry

    Returns:
        The parsed JSON value

    Raises:
        StructuredOutputError: No JSON in the response, the repaired text
            still does not parse, or an expected key is missing
    """
    cleaned = strip_code_fences(text)

    if truncated:
        logger.warning(f"{context}: response truncated (token limit), repairing before parse")
        cleaned = repair_truncated_json(cleaned)

    block = extract_json_block(cleaned)
    if block is None:
        raise StructuredOutputError(f"No JSON found in {context} response", raw_text=text)

    try:
        value = json.loads(block)
    except json.JSONDecodeError as exc:
        logger.warning(f"{context}: JSON parse failed ({exc.msg}), attempting repair")
        try:
            value = json.loads(repair_truncated_json(block))
        except json.JSONDecodeError as repair_exc:
            logger.error(f"{context}: JSON repair failed: {repair_exc.msg}")
            raise StructuredOutputError(
                f"Invalid JSON in {context} response: {exc.msg}", raw_text=text
            ) from repair_exc
        logger.info(f"{context}: JSON repair successful")

    if expected_keys:
        if not isinstance(value, dict):
            raise StructuredOutputError(
                f"Expected a JSON object in {context} response, got {type(value).__name__}",
                raw_text=text,
            )
        missing = [key for key in expected_keys if key not in value]
        if missing:
            raise StructuredOutputError(
                f"Missing keys in {context} response: {', '.join(missing)}", raw_text=text
            )

    return value
