from __future__ import annotations
from typing import List, Union

from markupsafe import Markup, escape

from .config import MARK_TAG
from .similarity import query_pattern

_OPEN = Markup(f"<{MARK_TAG}>")
_CLOSE = Markup(f"</{MARK_TAG}>")


def find_matches(text: str, query: str) -> List[int]:
    """
    Every start offset where query occurs in text, case-insensitively.

    The scan moves one character past each hit, so overlapping occurrences
    are all reported ("aaa" / "aa" -> [0, 1]).
    """
    if not query:
        return []
    rx = query_pattern(query)
    hits: List[int] = []
    pos = 0
    while True:
        m = rx.search(text, pos)
        if m is None:
            return hits
        hits.append(m.start())
        pos = m.start() + 1


def highlight(text: str, query: str) -> Union[str, Markup]:
    """
    Wrap each occurrence of query in <mark> and HTML-escape everything else.

    An empty query returns text as-is, NOT escaped; callers must escape it
    themselves before display. Overlapping hits are consumed left to right:
    a hit that starts inside an already marked span is skipped.
    """
    if not query:
        return text

    parts: List[Markup] = []
    consumed = 0
    width = len(query)
    for start in find_matches(text, query):
        if start < consumed:
            continue
        end = start + width
        parts.append(escape(text[consumed:start]))
        parts.append(_OPEN + escape(text[start:end]) + _CLOSE)
        consumed = end
    parts.append(escape(text[consumed:]))
    return Markup("").join(parts)
