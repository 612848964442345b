"""Lexical text processing: tokenizing, relevance scoring, fact extraction."""

from .facts import PREFERENCE_PATTERNS, FactExtractor, extract_facts
from .relevance import score
from .tokenizer import split_sentences, tokenize

__all__ = [
    "PREFERENCE_PATTERNS",
    "FactExtractor",
    "extract_facts",
    "score",
    "split_sentences",
    "tokenize",
]
