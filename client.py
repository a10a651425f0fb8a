# Pronunciation Assessment Relay - smoke test client

import argparse
import base64
import sys
from pathlib import Path

import requests

DEFAULT_URL = "http://localhost:8000/api/pronunciation"


def build_payload(audio_file_path, transcript, language="es-ES", level="A2"):
    """Read a WAV file and build the JSON body the relay expects"""
    audio_base64 = base64.b64encode(Path(audio_file_path).read_bytes()).decode("utf-8")
    return {
        "audio": audio_base64,
        "transcript": transcript,
        "language": language,
        "level": level,
    }


def print_result(result):
    print(" SCORES:")
    print(f"    Pronunciation: {result['pronunciation_score']}/100")
    print(f"    Accuracy:      {result['accuracy_score']}/100")
    print(f"    Fluency:       {result['fluency_score']}/100")
    print(f"    Completeness:  {result['completeness_score']}/100")

    word_scores = result["word_scores"]
    if word_scores:
        print(f"\n WORDS ({len(word_scores)}):")
        for i, word in enumerate(word_scores, 1):
            print(f"   {i}. '{word['word']}': {word['accuracy_score']}/100 ({word['error_type']})")
    else:
        # Empty word list with all-50 scores is the relay's fallback answer.
        print("\n No word scores returned (fallback result?)")


def assess_pronunciation(url, audio_file_path, transcript, language="es-ES", level="A2"):
    print(f" Audio file: {audio_file_path}")
    print(f" Reference:  '{transcript}' [{language}, {level}]")

    if not Path(audio_file_path).exists():
        print(f" Audio file not found: {audio_file_path}")
        return False

    try:
        response = requests.post(
            url,
            json=build_payload(audio_file_path, transcript, language, level),
            headers={"Content-Type": "application/json"},
            timeout=30,
        )
    except requests.RequestException as e:
        print(f" Request failed: {e}")
        return False

    if response.status_code != 200:
        print(f" Error {response.status_code}: {response.text}")
        return False

    print_result(response.json())
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Send a WAV file to the pronunciation relay")
    parser.add_argument("audio_file", help="16kHz mono PCM WAV file")
    parser.add_argument("transcript", help="Expected (reference) text")
    parser.add_argument("--language", default="es-ES")
    parser.add_argument("--level", default="A2")
    parser.add_argument("--url", default=DEFAULT_URL)
    args = parser.parse_args(argv)

    ok = assess_pronunciation(args.url, args.audio_file, args.transcript, args.language, args.level)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
