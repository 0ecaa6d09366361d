from __future__ import annotations
import heapq
import logging
from collections import Counter
from typing import AbstractSet, List, Optional, TypeVar

from .config import DEFAULT_LIMIT, MIN_SCORE, OVERSAMPLE
from .index import SkipHandler, project_text
from .models import Candidate, ScoredResult, SearchIndex
from .normalize import generate_grams
from .similarity import contains_substring, jaccard

T = TypeVar("T")

log = logging.getLogger(__name__)


def count_matches(index: SearchIndex, query_grams: AbstractSet[str]) -> Counter:
    """item id -> number of query grams present in its postings (ids with no overlap are absent)."""
    counts: Counter = Counter()
    for g in query_grams:
        ids = index.postings.get(g)
        if ids:
            counts.update(ids)
    return counts


def select_candidates(counts: Counter, pool: int) -> List[Candidate]:
    """
    Keep the `pool` best candidates by match count, ties by ascending id.

    This is a deliberate approximation of top-k: items with few shared grams
    are never scored even if their Jaccard would have been high.
    """
    if pool <= 0:
        return []
    top = heapq.nsmallest(pool, counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [Candidate(item_id=sid, matches=n) for sid, n in top]


def _rank_key(r: ScoredResult):
    return (not r.exact_match, -r.score, r.item_id)


def search_scored(
    index: SearchIndex[T],
    query: str,
    limit: int = DEFAULT_LIMIT,
    *,
    on_skip: Optional[SkipHandler] = None,
) -> List[ScoredResult[T]]:
    """
    Rank the index items against a query.

    - blank query: the first `limit` items in corpus order (score 0, not exact)
    - otherwise: candidates from the postings, rescored by gram Jaccard;
      exact substring hits first, then by score, then by item id.
    """
    if limit <= 0:
        return []

    if not query.strip():
        return [
            ScoredResult(item=item, item_id=i, score=0.0, exact_match=False)
            for i, item in enumerate(index.items[:limit])
        ]

    q_grams = generate_grams(query)
    counts = count_matches(index, q_grams)
    if not counts:
        return []

    candidates = select_candidates(counts, limit * OVERSAMPLE)
    log.debug("query=%r candidates=%d pool=%d", query, len(counts), len(candidates))

    results: List[ScoredResult[T]] = []
    for cand in candidates:
        item = index.items[cand.item_id]
        text = project_text(index.extract_text, item, cand.item_id, "query", on_skip)
        if text is None:
            continue

        exact = contains_substring(text, query)
        similarity = jaccard(q_grams, generate_grams(text))
        score = 1 + similarity if exact else similarity

        if score > MIN_SCORE or exact:
            results.append(ScoredResult(item=item, item_id=cand.item_id, score=score, exact_match=exact))

    results.sort(key=_rank_key)
    return results[:limit]


def search(
    index: SearchIndex[T],
    query: str,
    limit: int = DEFAULT_LIMIT,
    *,
    on_skip: Optional[SkipHandler] = None,
) -> List[T]:
    """Return the items of search_scored(), without scores."""
    if limit > 0 and not query.strip():
        return list(index.items[:limit])
    return [r.item for r in search_scored(index, query, limit, on_skip=on_skip)]
