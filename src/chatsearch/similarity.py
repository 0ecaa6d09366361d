from __future__ import annotations
import re
from typing import AbstractSet, Pattern


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """|a & b| / |a | b|; 0.0 when either side is empty."""
    if not a or not b:
        return 0.0
    inter = len(a & b)
    return inter / (len(a) + len(b) - inter)


def query_pattern(query: str) -> Pattern[str]:
    """Literal, case-insensitive pattern for the raw query.

    Shared by the exact-match check and the highlighter so both fold case the
    same way ("σ" matches "ς" in each).
    """
    return re.compile(re.escape(query), re.IGNORECASE)


def contains_substring(text: str, query: str) -> bool:
    """Case-insensitive containment of the raw query."""
    return query_pattern(query).search(text) is not None
