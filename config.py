import os
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger("api_logger.config")

DEFAULT_REGION = "westeurope"
DEFAULT_TIMEOUT_SECONDS = 8.0
ENDPOINT_TEMPLATE = (
    "https://{region}.stt.speech.microsoft.com"
    "/speech/recognition/conversation/cognitiveservices/v1"
)


class Settings(BaseModel):
    """Runtime configuration for the relay, resolved once at startup."""
    speech_key: Optional[str] = None
    speech_region: str = DEFAULT_REGION
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_file: str = "app.log"

    @property
    def endpoint(self) -> str:
        return ENDPOINT_TEMPLATE.format(region=self.speech_region)


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(f"Invalid AZURE_SPEECH_TIMEOUT '{raw}', using {DEFAULT_TIMEOUT_SECONDS}s")
        return DEFAULT_TIMEOUT_SECONDS
    if timeout <= 0:
        logger.warning(f"Non-positive AZURE_SPEECH_TIMEOUT '{raw}', using {DEFAULT_TIMEOUT_SECONDS}s")
        return DEFAULT_TIMEOUT_SECONDS
    return timeout


def load_settings() -> Settings:
    """Build Settings from a local .env (if present) and the process environment."""
    # Already-exported variables win over .env entries.
    load_dotenv(override=False)

    return Settings(
        speech_key=_env("AZURE_SPEECH_KEY"),
        speech_region=_env("AZURE_SPEECH_REGION") or DEFAULT_REGION,
        request_timeout=_parse_timeout(_env("AZURE_SPEECH_TIMEOUT")),
        log_file=_env("LOG_FILE") or "app.log",
    )
