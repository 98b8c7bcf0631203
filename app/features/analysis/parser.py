"""
Parsing of model output into the analysis contract.

The generative endpoint returns free text that is not schema-enforced, so
everything here is defensive: fences are stripped, JSON is decoded and the
result is validated. Anything that does not fit raises AnalysisParseError;
no partially-guessed result is ever returned.
"""

import json
import logging
import re

from pydantic import ValidationError

from app.core.logging_utils import sanitize_log_message
from app.features.analysis.models import HealthAnalysis
from app.shared.errors import AnalysisParseError

logger = logging.getLogger("Plusnote.Analysis.Parser")

_LEADING_FENCE = re.compile(r"^```[ \t]*[A-Za-z0-9_-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```\s*$")

# Model output often quotes journal text back; only a short head is logged.
LOG_SNIPPET_CHARS = 80


def strip_code_fences(text: str) -> str:
    """
    Remove a leading ```/```json fence and a trailing ``` fence.

    Idempotent: bare text passes through unchanged apart from surrounding
    whitespace.
    """
    cleaned = text.strip()
    while True:
        stripped = _TRAILING_FENCE.sub("", _LEADING_FENCE.sub("", cleaned)).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def parse_analysis(text: str) -> HealthAnalysis:
    """Decode model text into a validated HealthAnalysis."""
    cleaned = strip_code_fences(text or "")

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error(
            "Failed to parse AI response (%d chars): %s",
            len(cleaned), sanitize_log_message(cleaned, max_len=LOG_SNIPPET_CHARS),
        )
        raise AnalysisParseError(f"Model output is not valid JSON: {exc.msg}") from exc

    if not isinstance(payload, dict):
        logger.error(
            "AI response is not a JSON object (%d chars): %s",
            len(cleaned), sanitize_log_message(cleaned, max_len=LOG_SNIPPET_CHARS),
        )
        raise AnalysisParseError("Model output is not a JSON object")

    try:
        return HealthAnalysis.model_validate(payload)
    except ValidationError as exc:
        problems = [
            {"field": ".".join(str(part) for part in error["loc"]), "problem": error["msg"]}
            for error in exc.errors()
        ]
        logger.error("AI response violates the analysis contract: %s", problems)
        raise AnalysisParseError(
            "Model output does not match the analysis contract",
            details={"problems": problems},
        ) from exc
