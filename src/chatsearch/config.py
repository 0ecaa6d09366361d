from __future__ import annotations
import os

# n-gram size for the inverted index
GRAM: int = 3
# sentinel padding on each side of the normalized text
PAD: str = " " * (GRAM - 1)

# Candidate selection tuning
OVERSAMPLE: int = 3      # candidate pool = limit * OVERSAMPLE
MIN_SCORE: float = 0.1   # non-exact results must score strictly above this

DEFAULT_LIMIT: int = 100

# /* ~~~ limits used by the interactive front ends ~~~ */
UI_LIMIT: int = 500
UI_PAGE_SIZE: int = 200

# tag wrapped around highlighted spans
MARK_TAG: str = "mark"

# Progress logging (set CHATSEARCH_VERBOSE=1 to enable)
VERBOSE: bool = os.environ.get("CHATSEARCH_VERBOSE") == "1"
