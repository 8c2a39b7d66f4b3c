"""
Normalize free-form vision model output into an AnalysisResult

The model is asked for a JSON object but frequently wraps it in prose or a
markdown fence, so extraction tries progressively looser strategies:

1. the whole text as JSON
2. the body of a ```json fenced block
3. the greedy span from the first "{" to the last "}"
"""

import json
import re
from typing import Any, List, Optional

from worksafe.core.errors import INVALID_FORMAT, PARSE_FAILED, InvalidModelResponse
from worksafe.core.logger import get_logger
from worksafe.schemas.safety import AnalysisResult, Risk

logger = get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_BRACED_SPAN = re.compile(r"\{[\s\S]*\}")

VALID_LEVELS = ("low", "medium", "high")

# Raw output is truncated in warning logs
_LOG_PREVIEW_CHARS = 500


def _try_json(candidate: Optional[str]) -> Any:
    if candidate is None:
        return None
    try:
        return json.loads(candidate)
    except (TypeError, ValueError):
        return None


def extract_json_payload(text: str) -> Any:
    """
    Extract the JSON value embedded in model text

    Raises InvalidModelResponse when no strategy yields valid JSON.
    """
    stripped = text.strip()

    parsed = _try_json(stripped)
    if parsed is not None:
        return parsed

    fenced = _FENCED_BLOCK.search(stripped)
    if fenced:
        parsed = _try_json(fenced.group(1).strip())
        if parsed is not None:
            logger.debug("Model output parsed from fenced block")
            return parsed

    braced = _BRACED_SPAN.search(stripped)
    if braced:
        parsed = _try_json(braced.group(0))
        if parsed is not None:
            logger.debug("Model output parsed from braced span")
            return parsed

    logger.warning(
        "Failed to parse AI response: %r", stripped[:_LOG_PREVIEW_CHARS]
    )
    raise InvalidModelResponse(PARSE_FAILED)


def _clean_text(value: Any) -> str:
    return str(value).strip()


def validate_risks(raw_risks: List[Any]) -> List[Risk]:
    """
    Keep only well-formed risk entries, in order

    An entry needs truthy title, level and recommendation, a level of
    low/medium/high, and non-blank text after trimming. Anything else is
    dropped without error.
    """
    risks = []
    for index, entry in enumerate(raw_risks):
        if not isinstance(entry, dict):
            logger.debug("Dropping risk #%d: not an object", index)
            continue

        title = entry.get("title")
        level = entry.get("level")
        recommendation = entry.get("recommendation")

        if not (title and level and recommendation):
            logger.debug("Dropping risk #%d: missing field", index)
            continue
        if not isinstance(level, str) or level not in VALID_LEVELS:
            logger.debug("Dropping risk #%d: invalid level %r", index, level)
            continue

        title = _clean_text(title)
        recommendation = _clean_text(recommendation)
        if not title or not recommendation:
            logger.debug("Dropping risk #%d: blank text", index)
            continue

        risks.append(Risk(title=title, level=level, recommendation=recommendation))

    return risks


def normalize_model_output(text: str) -> AnalysisResult:
    """Turn raw model text into a validated AnalysisResult"""
    logger.debug("Raw model output: %s", text)

    payload = extract_json_payload(text)

    if not isinstance(payload, dict) or not isinstance(payload.get("risks"), list):
        logger.warning("Invalid response format from AI: %s", type(payload).__name__)
        raise InvalidModelResponse(INVALID_FORMAT)

    raw_risks = payload["risks"]
    risks = validate_risks(raw_risks)
    if len(risks) != len(raw_risks):
        logger.info("Kept %d of %d risks proposed by model", len(risks), len(raw_risks))

    return AnalysisResult(risks=risks)
