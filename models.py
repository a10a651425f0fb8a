from pydantic import BaseModel, field_validator
from typing import List, Optional

# --- Request / response models for /api/pronunciation ---

FALLBACK_SCORE = 50


class AssessmentRequest(BaseModel):
    """Inbound scoring request. Audio is base64 on the wire."""
    audio: Optional[str] = None
    transcript: Optional[str] = None
    language: str = "es-ES"
    level: str = "A2"

    @field_validator("language", "level", mode="before")
    @classmethod
    def _none_to_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class WordScore(BaseModel):
    word: str
    accuracy_score: int
    error_type: str


class AssessmentResult(BaseModel):
    pronunciation_score: int
    accuracy_score: int
    fluency_score: int
    completeness_score: int
    word_scores: List[WordScore] = []

    @classmethod
    def fallback(cls) -> "AssessmentResult":
        """Fixed low-confidence result returned whenever real scoring is unavailable."""
        return cls(
            pronunciation_score=FALLBACK_SCORE,
            accuracy_score=FALLBACK_SCORE,
            fluency_score=FALLBACK_SCORE,
            completeness_score=FALLBACK_SCORE,
            word_scores=[],
        )


class AssessmentOutcome(BaseModel):
    """Either a mapped provider result or the uniform fallback.

    Callers only ever serialise ``result``; ``is_fallback`` and ``reason``
    stay server-side for logging and tests.
    """
    result: AssessmentResult
    is_fallback: bool = False
    reason: Optional[str] = None

    @classmethod
    def success(cls, result: AssessmentResult) -> "AssessmentOutcome":
        return cls(result=result)

    @classmethod
    def fallback(cls, reason: str) -> "AssessmentOutcome":
        return cls(result=AssessmentResult.fallback(), is_fallback=True, reason=reason)


class ErrorResponse(BaseModel):
    error: str
