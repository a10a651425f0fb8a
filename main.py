import uvicorn
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, load_settings
from models import AssessmentOutcome, AssessmentRequest, AssessmentResult, ErrorResponse
from services.azure_speech_service import AzureSpeechService

# --- Logging configuration ---
logger = logging.getLogger("api_logger")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_file: str) -> None:
    if logger.handlers:
        return
    logger.setLevel(logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5, encoding="utf-8", delay=True)
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)


PRONUNCIATION_PATH = "/api/pronunciation"
PRONUNCIATION_METHODS = "POST, OPTIONS"

# --- CORS headers: fully open, applied by hand so plain OPTIONS also gets them ---
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": PRONUNCIATION_METHODS,
    "Access-Control-Allow-Headers": "Content-Type",
}


def _result_response(outcome: AssessmentOutcome) -> JSONResponse:
    return JSONResponse(content=outcome.result.model_dump(), headers=CORS_HEADERS)


def create_app(settings: Optional[Settings] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """Build the relay app. ``transport`` replaces the outbound HTTP transport (tests)."""
    settings = settings or load_settings()
    configure_logging(settings.log_file)

    app = FastAPI(
        title="Pronunciation Assessment Relay",
        description="Relays pronunciation-assessment requests to Azure Speech",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.assessment_service = AzureSpeechService(settings, transport=transport)

    if settings.speech_key:
        logger.info(f"Relay configured for Azure region '{settings.speech_region}'")
    else:
        logger.warning("AZURE_SPEECH_KEY not set - every assessment will return fallback scores")

    @app.get("/")
    async def root():
        return {"message": "Pronunciation Assessment Relay is running."}

    @app.options(PRONUNCIATION_PATH)
    async def pronunciation_preflight():
        return Response(status_code=200, headers=PREFLIGHT_HEADERS)

    @app.post(PRONUNCIATION_PATH, response_model=AssessmentResult)
    async def assess_pronunciation(request: Request):
        try:
            body = await request.json()
        except ValueError as e:
            logger.error(f"Request body is not valid JSON: {e}")
            return _result_response(AssessmentOutcome.fallback("invalid json body"))

        try:
            assessment_request = AssessmentRequest.model_validate(body)
        except ValidationError as e:
            logger.error(f"Invalid assessment request: {e.errors()}")
            return _result_response(AssessmentOutcome.fallback("invalid request body"))

        outcome = await request.app.state.assessment_service.assess(assessment_request)
        if outcome.is_fallback:
            logger.warning(f"Returning fallback scores ({outcome.reason})")
        return _result_response(outcome)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
        # Router-level 405s for any method, including HEAD, TRACE and extension methods.
        if exc.status_code != 405:
            return await http_exception_handler(request, exc)
        headers = dict(CORS_HEADERS)
        if request.url.path == PRONUNCIATION_PATH:
            headers["Allow"] = PRONUNCIATION_METHODS
        elif exc.headers and "Allow" in exc.headers:
            headers["Allow"] = exc.headers["Allow"]
        logger.warning(f"Rejected {request.method} {request.url.path}: method not allowed")
        return JSONResponse(
            status_code=405,
            content=ErrorResponse(error="Method not allowed").model_dump(),
            headers=headers,
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
