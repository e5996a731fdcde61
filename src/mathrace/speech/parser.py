"""Transcript to number conversion."""

import re

from .vocabulary import FRENCH_VOCABULARY, NumberVocabulary

_TOKEN_SPLIT = re.compile(r"[\s\-]+")
_DIGITS = re.compile(r"\d+")
_EDGE_PUNCTUATION = " \t.,;:!?\"'"


def _strip_fillers(text: str, vocabulary: NumberVocabulary) -> str:
    while True:
        head, _, rest = text.partition(" ")
        if not rest or head not in vocabulary.fillers:
            return text
        text = rest.lstrip()


def parse_number(text: str, vocabulary: NumberVocabulary = FRENCH_VOCABULARY) -> int | None:
    """Parse a spoken answer into an integer.

    Handles engines that transcribe digits directly ("23"), single words
    and homophones ("six", "sis", "sang"), and compound numbers formed by
    summing their parts ("vingt-trois", "soixante et onze",
    "quatre-vingt-dix"). Unrecognised words are ignored.

    Args:
        text: Raw transcript
        vocabulary: Language word table

    Returns:
        The number, or None when nothing in the accepted answer range was said
    """
    text = _strip_fillers(text.strip(_EDGE_PUNCTUATION).lower(), vocabulary)
    if not text:
        return None

    if _DIGITS.fullmatch(text):
        value = int(text)
        return value if vocabulary.in_range(value) else None

    exact = vocabulary.words.get(text)
    if exact is not None:
        return exact if vocabulary.in_range(exact) else None

    tokens = [token for token in _TOKEN_SPLIT.split(text) if token]
    longest = vocabulary.longest_phrase
    total = 0
    i = 0
    while i < len(tokens):
        if tokens[i] in vocabulary.connectors:
            i += 1
            continue
        # Greedy: "quatre vingt" must win over "quatre" + "vingt"
        for size in range(min(longest, len(tokens) - i), 0, -1):
            value = vocabulary.words.get(" ".join(tokens[i : i + size]))
            if value is not None:
                total += value
                i += size
                break
        else:
            i += 1

    return total if vocabulary.in_range(total) else None
