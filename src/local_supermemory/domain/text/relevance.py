"""Lexical relevance between a query and a stored memory."""

import math

from .tokenizer import tokenize

EXACT_MATCH_BOOST = 0.3


def score(query: str, content: str) -> float:
    """Similarity of ``content`` to ``query`` in [0, 1].

    The base score counts every content term that also appears in the query,
    normalised by ``sqrt(|distinct query terms| * |content terms|)``. Long
    content is penalised unless it keeps repeating query terms. Content that
    contains the whole query verbatim (case-insensitive) gets a flat boost.
    """
    query_terms = set(tokenize(query))
    content_terms = list(tokenize(content))

    if not query_terms or not content_terms:
        return 0.0

    matches = sum(1 for term in content_terms if term in query_terms)
    base = matches / math.sqrt(len(query_terms) * len(content_terms))
    boost = EXACT_MATCH_BOOST if query.lower() in content.lower() else 0.0

    return min(1.0, base + boost)
