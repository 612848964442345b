"""Heuristic extraction of profile statements from ingested text."""

import re
from collections.abc import Sequence

from .tokenizer import split_sentences

MIN_SENTENCE_LENGTH = 11

# Checked in order; a sentence contributes at most one fact
PREFERENCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"i (?:prefer|like|love|want|need|use)", re.IGNORECASE),
    re.compile(r"my (?:favorite|preferred|default)", re.IGNORECASE),
    re.compile(r"i (?:always|never|usually|often)", re.IGNORECASE),
    re.compile(r"remember (?:that|to)", re.IGNORECASE),
)


def extract_facts(content: str, patterns: Sequence[re.Pattern[str]] = PREFERENCE_PATTERNS) -> list[str]:
    """Return the sentences of ``content`` that state a preference or intent.

    Sentences are emitted verbatim (trimmed) in source order. Only sentences
    containing an explicit trigger phrase such as "I prefer" or "my favorite"
    qualify, so many true statements are missed on purpose.
    """
    facts: list[str] = []
    for segment in split_sentences(content):
        sentence = segment.strip()
        if len(sentence) < MIN_SENTENCE_LENGTH:
            continue
        if any(pattern.search(sentence) for pattern in patterns):
            facts.append(sentence)
    return facts


class FactExtractor:
    """Extracts candidate profile facts from memory content.

    Services receive one at construction time so tests can substitute it.
    """

    def __init__(self, patterns: Sequence[re.Pattern[str]] = PREFERENCE_PATTERNS) -> None:
        self.patterns = tuple(patterns)

    def extract(self, content: str) -> list[str]:
        """Candidate facts from ``content``, in sentence order."""
        return extract_facts(content, self.patterns)
