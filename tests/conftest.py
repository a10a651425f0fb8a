import os
import tempfile

import pytest

# Keep test log output out of the working tree; must be set before main is imported.
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "pronunciation-relay-tests.log"))

from config import Settings  # noqa: E402
from tests.fixtures import TEST_SPEECH_KEY, RecordingProvider  # noqa: E402


@pytest.fixture
def settings():
    return Settings(speech_key=TEST_SPEECH_KEY, speech_region="westeurope", log_file=os.environ["LOG_FILE"])


@pytest.fixture
def provider():
    return RecordingProvider()
