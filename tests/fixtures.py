import base64

import httpx

TEST_SPEECH_KEY = "test-speech-key-123"
WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt \x10\x00\x00\x00\x01\x00\x01\x00\x80>\x00\x00fake-pcm-data"
WAV_BASE64 = base64.b64encode(WAV_BYTES).decode("ascii")

# Provider reply used throughout; mirrors the Azure short-audio REST format.
SUCCESS_PAYLOAD = {
    "RecognitionStatus": "Success",
    "Offset": 500000,
    "Duration": 12300000,
    "DisplayText": "Hola, ¿cómo estás?",
    "NBest": [
        {
            "Confidence": 0.91,
            "Lexical": "hola cómo estás",
            "Display": "Hola, ¿cómo estás?",
            "PronunciationAssessment": {
                "PronScore": 87,
                "AccuracyScore": 92,
                "FluencyScore": 78,
                "CompletenessScore": 95,
            },
            "Words": [
                {
                    "Word": "hola",
                    "Offset": 500000,
                    "Duration": 4100000,
                    "PronunciationAssessment": {"AccuracyScore": 95, "ErrorType": "None"},
                },
            ],
        }
    ],
}

EXPECTED_RESULT = {
    "pronunciation_score": 87,
    "accuracy_score": 92,
    "fluency_score": 78,
    "completeness_score": 95,
    "word_scores": [{"word": "hola", "accuracy_score": 95, "error_type": "None"}],
}

FALLBACK_RESULT = {
    "pronunciation_score": 50,
    "accuracy_score": 50,
    "fluency_score": 50,
    "completeness_score": 50,
    "word_scores": [],
}


class RecordingProvider:
    """httpx handler that records requests and answers with a fixed response."""

    def __init__(self, status_code=200, json_body=None, text=None):
        self.status_code = status_code
        self.json_body = SUCCESS_PAYLOAD if json_body is None and text is None else json_body
        self.text = text
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
