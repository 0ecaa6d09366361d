from __future__ import annotations
from typing import Set

from .config import GRAM, PAD


def normalize(text: str) -> str:
    """Lowercase and trim. No punctuation or accent folding is applied."""
    return text.lower().strip()


def generate_grams(text: str) -> Set[str]:
    """
    Return the distinct 3-grams of the normalized, padded text.

    The text is lowercased, trimmed and bordered by two spaces on each side,
    so word edges produce their own grams:

        >>> sorted(generate_grams("Hi"))
        ['  h', ' hi', 'hi ', 'i  ']

    Empty or blank input still yields the all-padding gram {'   '}.
    """
    padded = f"{PAD}{normalize(text)}{PAD}"
    grams: Set[str] = set()
    for i in range(len(padded) - GRAM + 1):
        grams.add(padded[i:i + GRAM])
    return grams
