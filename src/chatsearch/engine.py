# chatsearch/engine.py
from __future__ import annotations

import os
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from markupsafe import Markup

from . import config as CFG
from .highlight import highlight
from .index import SkipHandler, build_index
from .loader import load_messages, message_text
from .models import ScoredResult, SearchIndex
from .search import search, search_scored

log = logging.getLogger(__name__)


class Engine:
    """
    Thin orchestration layer that glues together:
      - corpus loading (loader.load_messages),
      - gram index construction (index.build_index),
      - search/ranking pipeline (search.search_scored),
      - highlighting for display (highlight.highlight).

    Public API (used by CLI/Flask):
      * build(paths):                load chat exports -> index
      * rebuild(items, extract_text): index any corpus, replacing the current one
      * search(query, limit) / search_scored(query, limit)
      * highlight(text, query)
      * stats(), shutdown()

    The current index is swapped in with a single assignment, so a query that
    already picked up the previous index finishes against that snapshot.
    """

    # ------------- lifecycle -------------

    def __init__(self, *, on_skip: Optional[SkipHandler] = None) -> None:
        self.index: Optional[SearchIndex[Any]] = None
        self._on_skip = on_skip

    # /* ~~~ Build an index from chat export files ~~~ */
    def build(self, paths: Iterable[str], *, verbose: bool = False) -> None:
        if verbose:
            logging.basicConfig(level=logging.INFO)
            os.environ["CHATSEARCH_VERBOSE"] = "1"

        paths = list(paths)
        if not paths:
            raise ValueError("build(): at least one input file is required")

        log.info("Loading messages from %s", paths)
        messages = load_messages(paths, verbose=verbose)
        self.rebuild(messages, message_text)

    # /* ~~~ Index an arbitrary corpus and swap it in ~~~ */
    def rebuild(self, items: Sequence[Any], extract_text: Callable[[Any], str]) -> SearchIndex[Any]:
        log.info("Building gram index over %d items", len(items))
        idx = build_index(items, extract_text, on_skip=self._on_skip)
        self.index = idx
        log.info("Engine rebuild() complete: items=%d grams=%d", len(idx), idx.gram_count)
        return idx

    # ------------- query -------------

    def _current(self) -> SearchIndex[Any]:
        idx = self.index
        if idx is None:
            raise RuntimeError("Engine not initialized. Call build() or rebuild() first.")
        return idx

    def search(self, query: str, *, limit: int = CFG.DEFAULT_LIMIT) -> List[Any]:
        return search(self._current(), query, limit, on_skip=self._on_skip)

    def search_scored(self, query: str, *, limit: int = CFG.DEFAULT_LIMIT) -> List[ScoredResult[Any]]:
        return search_scored(self._current(), query, limit, on_skip=self._on_skip)

    @staticmethod
    def highlight(text: str, query: str) -> Union[str, Markup]:
        return highlight(text, query)

    def stats(self) -> Dict[str, int]:
        idx = self._current()
        return {"items": len(idx), "grams": idx.gram_count, "skipped": len(idx.skipped)}

    # ------------- teardown -------------

    def shutdown(self) -> None:
        self.index = None
        log.info("Engine shutdown complete")
