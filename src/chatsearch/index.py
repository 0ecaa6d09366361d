"""
Index module for chat search.

This module builds the gram inverted index over a corpus. The index maps each
3-gram to the set of item ids whose text contains it, enabling candidate
lookup without scanning the whole corpus on every keystroke.
"""

from __future__ import annotations
import logging
from collections import defaultdict
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, TypeVar

from .models import SearchIndex, SkippedItem
from .normalize import generate_grams

T = TypeVar("T")

SkipHandler = Callable[[SkippedItem], None]

log = logging.getLogger(__name__)


def project_text(
    extract_text: Callable[[T], str],
    item: T,
    item_id: int,
    stage: str,
    on_skip: Optional[SkipHandler] = None,
) -> Optional[str]:
    """
    Run the caller's projection for one item.

    Returns None when the projection raises or returns something other than
    a str; the failure is logged and handed to on_skip as a SkippedItem, and
    is never retried.
    """
    try:
        text = extract_text(item)
        if not isinstance(text, str):
            raise TypeError(f"text projection returned {type(text).__name__}, expected str")
        return text
    except Exception as exc:
        skipped = SkippedItem(item_id=item_id, stage=stage, error=f"{type(exc).__name__}: {exc}")
        log.warning("Skipping item %d during %s: %s", item_id, stage, skipped.error)
        if on_skip is not None:
            on_skip(skipped)
        return None


def build_index(
    items: Iterable[T],
    extract_text: Callable[[T], str],
    *,
    on_skip: Optional[SkipHandler] = None,
) -> SearchIndex[T]:
    """
    Build a gram index from a corpus.

    Args:
        items: The corpus records. They are copied into a tuple, so later
            changes to the caller's sequence do not leak into the index.
        extract_text: Projection record -> searchable text.
        on_skip: Optional callback receiving a SkippedItem for every record
            whose projection raised or returned a non-str. Such records stay in `items` (and in the
            empty-query pass-through) but get no postings.

    Returns:
        SearchIndex: a frozen snapshot with read-only postings.

    Example:
        >>> idx = build_index(["hello world"], str)
        >>> 0 in idx.postings["hel"]
        True
    """
    snapshot = tuple(items)
    buckets: Dict[str, Set[int]] = defaultdict(set)
    skipped: List[SkippedItem] = []

    def _record(s: SkippedItem) -> None:
        skipped.append(s)
        if on_skip is not None:
            on_skip(s)

    for item_id, item in enumerate(snapshot):
        text = project_text(extract_text, item, item_id, "build", _record)
        if text is None:
            continue
        for g in generate_grams(text):
            buckets[g].add(item_id)

    postings: Dict[str, FrozenSet[int]] = {g: frozenset(ids) for g, ids in buckets.items()}
    log.info("Indexed items=%d grams=%d skipped=%d", len(snapshot), len(postings), len(skipped))

    return SearchIndex(
        items=snapshot,
        postings=MappingProxyType(postings),
        extract_text=extract_text,
        skipped=tuple(skipped),
    )
