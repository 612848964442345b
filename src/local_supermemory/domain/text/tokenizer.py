"""Text normalisation shared by relevance scoring and fact extraction."""

import re
from collections.abc import Iterator

# Runs of letters, digits and underscores; everything else separates terms
_TERM_PATTERN = re.compile(r"\w+")
_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")

MIN_TERM_LENGTH = 3


def tokenize(text: str) -> Iterator[str]:
    """Yield the comparable terms of ``text``.

    Text is lowercased, split on anything that is not a word character, and
    terms shorter than three characters are dropped. Each call returns a
    fresh iterator, so callers restart by calling again.
    """
    for match in _TERM_PATTERN.finditer(text.lower()):
        term = match.group()
        if len(term) >= MIN_TERM_LENGTH:
            yield term


def split_sentences(text: str) -> list[str]:
    """Coarse sentence split on runs of ``.``, ``!`` and ``?``.

    Segments are returned untrimmed and may be empty.
    """
    return _SENTENCE_BOUNDARY.split(text)
