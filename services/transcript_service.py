import re

# Punctuation the provider treats as noise when scoring against a reference.
STRIPPED_PUNCTUATION = "¿?¡!.,;:\"'"

_PUNCTUATION_RE = re.compile("[" + re.escape(STRIPPED_PUNCTUATION) + "]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_transcript(text: str) -> str:
    """
    Lowercase, drop punctuation, collapse whitespace and trim.

    >>> normalize_transcript("¡Hola, Cómo Estás?")
    'hola cómo estás'
    """
    text = text.lower()
    text = _PUNCTUATION_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()
