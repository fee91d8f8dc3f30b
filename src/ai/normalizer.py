"""
GRC AI Assist - Response Normalizer
Turns raw model output into predictable shapes: cleaned plain text, parsed JSON,
or a shape-guessed fallback when the model's JSON cannot be parsed.
"""

import json
import re
from typing import Any, Dict, Optional, Tuple

from util.logging import logger
from .types import (
    Failure,
    FailureReason,
    FallbackGuessed,
    InferenceResult,
    PlainText,
    Structured,
    TaskKind,
)

# Placeholder score used by fallback shapes. It means "unknown, assume nominal"
# and must never be read as a model-computed value.
FALLBACK_SCORE = 75
FALLBACK_TREND = "Stable"
PARSE_ERROR_MESSAGE = "Failed to parse JSON response"

# Leftmost '{' or '[' through the last matching closer, across newlines
_JSON_PAYLOAD = re.compile(r"\{.*\}|\[.*\]", re.DOTALL)

# Ordered substitutions applied by clean_text
_CLEAN_STEPS = (
    (re.compile(r"\*\*\*"), ""),
    (re.compile(r"\*\*"), ""),
    (re.compile(r"###\s?"), ""),
    (re.compile(r"##\s?"), ""),
    (re.compile(r"#\s?"), ""),
    (re.compile(r"^- ", re.MULTILINE), "• "),
    (re.compile(r"^\* ", re.MULTILINE), "• "),
    (re.compile(r"\|"), "  "),
    (re.compile(r"---"), ""),
    (re.compile(r"\[(.*?)\]"), r"\1"),
)


def clean_text(text: Optional[str]) -> str:
    """
    Strip markdown-like decoration from chat output.

    Best-effort cosmetic filter, not a markdown parser: bold markers and heading
    hashes are removed, leading list markers become bullets, table pipes are
    blanked, rules dropped and bracketed references unwrapped.

    A second pass is a no-op except when the final strip exposes a list marker
    (" - item") or brackets are nested ("[[a]]"); one layer is removed per pass.
    """
    if not text:
        return ""

    for pattern, replacement in _CLEAN_STEPS:
        text = pattern.sub(replacement, text)

    return text.strip()


def extract_json_payload(text: str) -> str:
    """Return the embedded JSON object/array substring, or the whole text if none."""
    match = _JSON_PAYLOAD.search(text)
    return match.group(0) if match else text


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def guess_fallback(text: str) -> Tuple[str, Dict[str, Any]]:
    """
    Manufacture a placeholder value whose shape matches what the caller most
    likely asked for. Returns ``(shape_name, value)``.
    """
    if "healthScore" in text or "score" in text:
        return "health", {
            "healthScore": FALLBACK_SCORE,
            "summary": text,
            "recommendations": [text],
            "criticalReplacements": [],
        }

    if "maturityScore" in text:
        return "maturity", {
            "maturityScore": FALLBACK_SCORE,
            "maturityTrend": FALLBACK_TREND,
            "topRisks": [{"title": text, "description": text}],
        }

    return "generic", {"result": text, "error": PARSE_ERROR_MESSAGE}


def parse_structured(text: Optional[str]) -> InferenceResult:
    """
    Parse model output expected to contain JSON.

    Never raises: output that cannot be parsed degrades to a FallbackGuessed
    record so the caller can tell a real value from a placeholder.
    """
    text = text if isinstance(text, str) else ""

    try:
        return Structured(json.loads(extract_json_payload(text), parse_constant=_reject_constant))
    except (ValueError, RecursionError):
        shape, value = guess_fallback(text)
        logger.log_parse_fallback(shape, text)
        return FallbackGuessed(value=value, raw_text=text)


def safe_json_parse(text: Optional[str]) -> Any:
    """Parse embedded JSON from model output, returning a fallback value on failure."""
    return parse_structured(text).value


def normalize(raw: Optional[str], task: TaskKind) -> InferenceResult:
    """Apply the normalization policy for ``task`` to raw model output."""
    if task.expects_structured:
        return parse_structured(raw)
    return PlainText(clean_text(raw))


def failure_result(error: Exception, label: str) -> Failure:
    """Convert a dispatch error into the degraded message shown in place of AI output."""
    reason = getattr(error, "reason", FailureReason.TRANSPORT_ERROR)
    detail = getattr(error, "detail", None) or str(error)
    return Failure(
        reason=reason,
        raw_text=detail,
        message=f"{label} unavailable: {error}",
    )
