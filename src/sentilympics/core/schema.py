"""Output contract for analysis calls.

``ANALYSIS_SCHEMA`` is handed to providers that support structured output;
``parse_analysis`` validates whatever text comes back, whether or not the
provider enforced the schema itself.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .constants import ErrorConstants, PromptConstants
from .errors import MalformedResponseError
from .models import AnalysisResult
from ..utils.text import strip_code_fences

logger = logging.getLogger(__name__)


def _object(properties: Dict[str, Any], description: Optional[str] = None) -> Dict[str, Any]:
    schema = {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }
    if description:
        schema["description"] = description
    return schema


def _array(items: Dict[str, Any], description: Optional[str] = None) -> Dict[str, Any]:
    schema = {"type": "array", "items": items}
    if description:
        schema["description"] = description
    return schema


ANALYSIS_SCHEMA: Dict[str, Any] = _object({
    "sentimentTrend": _array(
        _object({
            "date": {"type": "string", "description": "ISO Date string (YYYY-MM-DD)"},
            "sentiment": {"type": "integer", "description": "Sentiment score from -100 (Negative) to 100 (Positive)"},
            "snippet": {
                "type": "string",
                "description": f"A very short excerpt (max {PromptConstants.MAX_SNIPPET_WORDS} words) justifying the score",
            },
        }),
        "A list of data points extracted or inferred from the reviews representing sentiment over time.",
    ),
    "wordCloud": _array(
        _object({
            "text": {"type": "string"},
            "value": {"type": "integer", "description": "Frequency count (1-50)"},
            "type": {"type": "string", "enum": ["complaint", "praise"]},
        }),
        "List of most frequent keywords or phrases categorized as complaint or praise.",
    ),
    "summary": _object({
        "overview": {"type": "string", "description": "A concise executive summary paragraph."},
        "actionableAreas": _array(
            _object({
                "title": {"type": "string"},
                "description": {"type": "string"},
                "priority": {"type": "string", "enum": ["High", "Medium", "Low"]},
            })
        ),
    }),
})


def _preview(raw: str) -> str:
    return raw[:ErrorConstants.RAW_PREVIEW_LENGTH]


def parse_analysis(raw: Optional[str]) -> AnalysisResult:
    """Parse provider output into an ``AnalysisResult``.

    Raises ``MalformedResponseError`` for empty output, invalid JSON, a JSON
    value that is not an object, or an object that fails validation. Extra
    fields are ignored.
    """
    if raw is None or not raw.strip():
        raise MalformedResponseError("Empty response from provider", raw=raw)

    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        logger.error(f"Analysis response is not valid JSON: {e}. Raw: {_preview(raw)}")
        raise MalformedResponseError("Analysis response is not valid JSON", raw=raw, cause=e) from e

    if not isinstance(data, dict):
        logger.error(f"Analysis response is not a JSON object. Raw: {_preview(raw)}")
        raise MalformedResponseError("Analysis response is not a JSON object", raw=raw)

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        logger.error(f"Analysis response failed validation ({e.error_count()} errors): {e}. Raw: {_preview(raw)}")
        raise MalformedResponseError("Analysis response does not match the expected schema", raw=raw, cause=e) from e


def build_context_digest(result: AnalysisResult) -> str:
    """Compact text digest of an analysis used as chat context."""
    complaints = [w.text for w in result.complaints()][:PromptConstants.MAX_DIGEST_COMPLAINTS]
    lines = [f"Summary: {result.summary.overview}"]
    if result.summary.actionable_areas:
        areas = "; ".join(f"{a.title} ({a.priority})" for a in result.summary.actionable_areas)
        lines.append(f"Actionable areas: {areas}")
    lines.append(f"Top complaints: {', '.join(complaints) if complaints else 'none'}")
    return "\n".join(lines)
