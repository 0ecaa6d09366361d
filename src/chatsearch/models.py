# src/chatsearch/models.py
"""
Data models for the chat search engine.

This module defines small, focused data containers:

- SearchIndex: the immutable gram index built over one corpus snapshot.
- Candidate: an item id plus how many query grams hit its postings.
- ScoredResult: the ranked result object returned to callers.
- SkippedItem: a non-fatal diagnostic for an item whose text could not be read.

These classes do not contain business logic; they only structure the data so
that indexing, searching, and scoring remain simple and predictable.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, FrozenSet, Generic, Mapping, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SkippedItem:
    """
    An item left out because the caller's text projection raised.

    Attributes
    ----------
    item_id : int
        Position of the item in the indexed corpus.
    stage : str
        "build" when the item was dropped from the postings, "query" when it
        was dropped from scoring.
    error : str
        The exception rendered as "ExcType: message".
    """
    item_id: int
    stage: str
    error: str


@dataclass(frozen=True, slots=True)
class SearchIndex(Generic[T]):
    """
    An immutable snapshot of a corpus plus its gram postings.

    Attributes
    ----------
    items : Tuple[T, ...]
        The corpus records in their original order. An item's id is its
        position in this tuple.
    postings : Mapping[str, FrozenSet[int]]
        Read-only mapping gram -> ids of the items whose text contains it.
    extract_text : Callable[[T], str]
        Caller-owned projection used to (re)compute an item's searchable text.
        Text is not cached on the index.
    skipped : Tuple[SkippedItem, ...]
        Items whose projection failed while the index was built.
    """
    items: Tuple[T, ...]
    postings: Mapping[str, FrozenSet[int]]
    extract_text: Callable[[T], str]
    skipped: Tuple[SkippedItem, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    @property
    def gram_count(self) -> int:
        return len(self.postings)


@dataclass(frozen=True, slots=True)
class Candidate:
    item_id: int
    matches: int   # number of query grams found in this item's postings


@dataclass(frozen=True, slots=True)
class ScoredResult(Generic[T]):
    """
    One ranked hit.

    score is the Jaccard similarity of the gram sets, in [0, 1]; exact
    case-insensitive substring hits get 1 added so they sort above fuzzy ones.
    """
    item: T
    item_id: int
    score: float
    exact_match: bool
