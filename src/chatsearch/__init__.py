"""
Chat Search Module

This module provides an in-memory fuzzy search index for short text records
such as chat messages. Each record's text is split into padded character
trigrams; queries are matched through the trigram postings, rescored by
Jaccard similarity, and returned with exact substring hits first.

The module is designed with a clean separation of concerns:
- Tokenization into trigrams (normalize)
- Index construction (index)
- Similarity scoring (similarity)
- Candidate retrieval and ranking (search)
- HTML highlighting of matched spans (highlight)

Main Functions:
    build_index(items, extract_text): Build an immutable index over a corpus
    search(index, query, limit): Ranked items for a query
    highlight(text, query): Escaped text with <mark>-wrapped matches

Example Usage:
    from chatsearch import build_index, search, highlight

    index = build_index(messages, lambda m: m.text)
    for msg in search(index, "wrld", limit=20):
        print(highlight(msg.text, "wrld"))
"""

# src/chatsearch/__init__.py
from .highlight import highlight, find_matches  # re-export
from .index import build_index
from .models import SearchIndex, ScoredResult, SkippedItem
from .normalize import generate_grams
from .search import search, search_scored
from .similarity import jaccard
from .engine import Engine

__version__ = "1.0.0"
__all__ = [
    "build_index", "search", "search_scored", "highlight", "find_matches",
    "generate_grams", "jaccard", "Engine",
    "SearchIndex", "ScoredResult", "SkippedItem",
]
