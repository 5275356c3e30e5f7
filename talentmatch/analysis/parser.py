"""Lenient parsing of the chat provider's résumé analysis.

Provider output is not guaranteed to be bare JSON: it may be wrapped in a
```json fence or surrounded by prose. The outermost {...} span is parsed,
and anything unusable degrades to a fixed-shape result instead of raising.
"""

import json
import logging
import re

from pydantic import ValidationError

from talentmatch.config import RAW_RESPONSE_PREVIEW_CHARS
from talentmatch.errors import MalformedProviderResponseError
from talentmatch.schemas.analysis import CVAnalysis, LLMAnalysisOutput

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def extract_json_object(text: str) -> dict:
    """Pull the JSON object out of free-form provider text.

    Strips a leading ```json / trailing ``` fence, then parses the span
    from the first `{` to the last `}`.

    Raises:
        MalformedProviderResponseError: If no JSON object can be parsed.
    """
    cleaned = _TRAILING_FENCE.sub("", _LEADING_FENCE.sub("", text.strip()))

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedProviderResponseError(f"Response is not valid JSON: {e}", text) from e

    if not isinstance(parsed, dict):
        raise MalformedProviderResponseError("Response JSON is not an object", text)

    return parsed


def parse_analysis_strict(text: str) -> CVAnalysis:
    """Parse provider text into a CVAnalysis.

    Raises:
        MalformedProviderResponseError: If the text is not a JSON object with
            string-array `strengths`, `weakness` and `suggests` fields.
    """
    data = extract_json_object(text)
    try:
        output = LLMAnalysisOutput.model_validate(data)
    except ValidationError as e:
        raise MalformedProviderResponseError(f"Response has the wrong shape: {e}", text) from e
    return output.to_analysis()


def degraded_analysis(raw_text: str) -> CVAnalysis:
    """Fixed-shape result carrying a bounded preview of the raw response."""
    return CVAnalysis(
        strengths=[],
        weaknesses=[],
        suggestions=[raw_text[:RAW_RESPONSE_PREVIEW_CHARS]],
    )


def parse_analysis_response(text: str) -> tuple[CVAnalysis, bool]:
    """Parse provider text, degrading instead of raising.

    Returns:
        Tuple of (analysis, degraded) where degraded is True when the text
        could not be parsed and the analysis is the fallback shape.
    """
    try:
        return parse_analysis_strict(text), False
    except MalformedProviderResponseError as e:
        logger.warning(f"Failed to parse analysis result: {e}")
        logger.warning(f"Raw result: {text[:RAW_RESPONSE_PREVIEW_CHARS]!r}")
        return degraded_analysis(text), True
