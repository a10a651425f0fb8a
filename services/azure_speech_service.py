"""
Azure Speech pronunciation-assessment adapter
=============================================
Forwards reference text plus raw WAV audio to the Azure short-audio REST
endpoint and maps the reply into an AssessmentResult. Every failure
(configuration, input, transport, recognition) resolves to the fallback
outcome; nothing here raises to the HTTP layer.
"""

import asyncio
import base64
import binascii
import json
import logging
import math
from typing import Any, Dict, Optional

import httpx

from config import Settings
from models import AssessmentOutcome, AssessmentRequest, AssessmentResult, WordScore, FALLBACK_SCORE
from services.transcript_service import normalize_transcript

AUDIO_CONTENT_TYPE = "audio/wav; codecs=audio/pcm; samplerate=16000"
MAX_LOGGED_BODY = 500


def decode_audio(audio: str) -> Optional[bytes]:
    """Strict base64 decode. Returns None for malformed or empty payloads."""
    compact = "".join(audio.split())
    try:
        audio_bytes = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        return None
    return audio_bytes or None


def assessment_config(reference_text: str) -> Dict[str, str]:
    return {
        "referenceText": reference_text,
        "gradingSystem": "HundredMark",
        "granularity": "Word",
        "dimension": "Comprehensive",
    }


def _round_score(value: Any) -> int:
    # Zero is a legitimate score; only absent or non-numeric values default.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return FALLBACK_SCORE
    if math.isnan(value) or math.isinf(value):
        return FALLBACK_SCORE
    rounded = math.floor(value + 0.5)
    return max(0, min(100, int(rounded)))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def first_candidate(payload: Any) -> Optional[Dict[str, Any]]:
    """Return NBest[0] when recognition succeeded, else None."""
    if not isinstance(payload, dict):
        return None
    if payload.get("RecognitionStatus") != "Success":
        return None
    nbest = payload.get("NBest")
    if not isinstance(nbest, list) or not nbest:
        return None
    candidate = nbest[0]
    return candidate if isinstance(candidate, dict) else None


def map_candidate(candidate: Dict[str, Any]) -> AssessmentResult:
    assessment = _as_dict(candidate.get("PronunciationAssessment"))
    words = candidate.get("Words")
    if not isinstance(words, list):
        words = []

    word_scores = []
    for entry in words:
        entry = _as_dict(entry)
        word_assessment = _as_dict(entry.get("PronunciationAssessment"))
        error_type = word_assessment.get("ErrorType")
        word_scores.append(WordScore(
            word=str(entry.get("Word") or ""),
            accuracy_score=_round_score(word_assessment.get("AccuracyScore")),
            error_type=str(error_type) if error_type else "None",
        ))

    return AssessmentResult(
        pronunciation_score=_round_score(assessment.get("PronScore")),
        accuracy_score=_round_score(assessment.get("AccuracyScore")),
        fluency_score=_round_score(assessment.get("FluencyScore")),
        completeness_score=_round_score(assessment.get("CompletenessScore")),
        word_scores=word_scores,
    )


def map_provider_response(payload: Any) -> Optional[AssessmentResult]:
    """Map a full provider payload; None when it carries no usable candidate."""
    candidate = first_candidate(payload)
    if candidate is None:
        return None
    return map_candidate(candidate)


class AzureSpeechService:
    """Pronunciation assessment through the Azure Speech REST API"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport
        self.logger = logging.getLogger("api_logger.azure_speech")

    def build_headers(self, reference_text: str) -> Dict[str, str]:
        # json.dumps escapes non-ASCII, which header values require.
        return {
            "Ocp-Apim-Subscription-Key": self.settings.speech_key or "",
            "Content-Type": AUDIO_CONTENT_TYPE,
            "Accept": "application/json",
            "Connection": "keep-alive",
            "Pronunciation-Assessment": json.dumps(assessment_config(reference_text)),
        }

    async def assess(self, request: AssessmentRequest) -> AssessmentOutcome:
        try:
            return await self._assess(request)
        except Exception as e:
            self.logger.exception(f"Unexpected error during assessment: {e}")
            return AssessmentOutcome.fallback("unexpected error")

    async def _assess(self, request: AssessmentRequest) -> AssessmentOutcome:
        if not request.audio or not request.transcript:
            self.logger.error("Missing required fields: audio or transcript")
            return AssessmentOutcome.fallback("missing audio or transcript")

        if not self.settings.speech_key:
            self.logger.error("AZURE_SPEECH_KEY not configured")
            return AssessmentOutcome.fallback("missing speech key")

        reference_text = normalize_transcript(request.transcript)
        self.logger.info(
            f"Normalized transcript: '{reference_text}' (language={request.language}, level={request.level})"
        )

        audio_bytes = decode_audio(request.audio)
        if audio_bytes is None:
            self.logger.error("Failed to decode base64 audio")
            return AssessmentOutcome.fallback("invalid audio encoding")

        try:
            response = await asyncio.wait_for(
                self._send(request.language, reference_text, audio_bytes),
                timeout=self.settings.request_timeout,
            )
        except asyncio.TimeoutError:
            self.logger.error(f"Azure API timeout after {self.settings.request_timeout:g} seconds")
            return AssessmentOutcome.fallback("provider timeout")
        except httpx.HTTPError as e:
            self.logger.error(f"Azure API request error: {type(e).__name__}: {e}")
            return AssessmentOutcome.fallback("provider transport error")

        if not response.is_success:
            self.logger.error(f"Azure API error: {response.status_code} {response.text[:MAX_LOGGED_BODY]}")
            return AssessmentOutcome.fallback(f"provider status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            self.logger.error(f"Azure API returned invalid JSON: {e}")
            return AssessmentOutcome.fallback("invalid provider payload")
        self.logger.debug(f"Azure response: {json.dumps(payload, ensure_ascii=False)}")

        result = map_provider_response(payload)
        if result is None:
            status = payload.get("RecognitionStatus") if isinstance(payload, dict) else None
            self.logger.error(f"Azure recognition failed: {status}")
            return AssessmentOutcome.fallback(f"recognition status {status}")

        self.logger.info(f"Returning result: {result.model_dump()}")
        return AssessmentOutcome.success(result)

    async def _send(self, language: str, reference_text: str, audio_bytes: bytes) -> httpx.Response:
        # wait_for in _assess is the only deadline; cancelling it closes the client.
        async with httpx.AsyncClient(transport=self.transport, timeout=None) as client:
            return await client.post(
                self.settings.endpoint,
                params={"language": language},
                headers=self.build_headers(reference_text),
                content=audio_bytes,
            )
