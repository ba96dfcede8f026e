"""
Parsing of the structured feedback returned by the answer-analysis service.

The scoring model is not trusted to return well-formed JSON. Instead of raising,
``parse_feedback`` returns a tagged result: either the validated feedback or a
fallback with safe defaults (score 0, no strengths or improvements, empty text).
"""
import json
import logging
import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class Feedback(BaseModel):
    """Structured feedback for one answer."""
    score: int = Field(0, ge=0, le=100, description="Score 0-100")
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    feedback: str = Field("", description="Narrative feedback")

    @field_validator("score", mode="before")
    @classmethod
    def coerce_score(cls, v: Any) -> int:
        """Out-of-range scores are clamped; anything non-numeric becomes 0."""
        if isinstance(v, bool):
            return 0
        try:
            score = int(round(float(v)))
        except (TypeError, ValueError, OverflowError):
            return 0
        return max(0, min(100, score))

    @field_validator("strengths", "improvements", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v if item is not None and str(item).strip()]
        raise ValueError("expected a list of strings")

    @field_validator("feedback", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)


class FeedbackParseResult(BaseModel):
    """Tagged parse result: ``ok`` is False when defaults were substituted."""
    ok: bool
    feedback: Feedback
    error: Optional[str] = None


def _fallback(error: str) -> FeedbackParseResult:
    logger.warning(f"Malformed answer feedback, using defaults: {error}")
    return FeedbackParseResult(ok=False, feedback=Feedback(), error=error)


def _decode(raw: str) -> Any:
    text = raw.strip()
    match = _CODE_FENCE.search(text)
    if match:
        text = match.group(1)
    return json.loads(text)


def parse_feedback(raw: Any) -> FeedbackParseResult:
    """
    Validate feedback from a dict, a JSON string, or JSON wrapped in a
    markdown code fence.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            raw = _decode(raw)
        except json.JSONDecodeError as e:
            return _fallback(f"invalid JSON: {e.msg}")

    if not isinstance(raw, dict):
        return _fallback(f"expected an object, got {type(raw).__name__}")

    try:
        return FeedbackParseResult(ok=True, feedback=Feedback.model_validate(raw))
    except ValidationError as e:
        return _fallback(f"schema validation failed: {e.error_count()} error(s)")


def serialize_feedback(feedback: Feedback) -> str:
    """Serialize feedback for the ai_feedback column."""
    return feedback.model_dump_json()
