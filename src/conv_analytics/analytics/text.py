"""Tokenization helpers shared by the analytics functions."""

from __future__ import annotations

import re

_TOKEN_SPLIT = re.compile(r"[^a-z0-9']+")


def tokenize(text: str) -> list[str]:
    """
    Split text into lowercase word tokens.

    Anything outside ``[a-z0-9']`` separates tokens, so apostrophes stay
    inside words ("don't") and accented letters act as separators.
    """
    return [w for w in _TOKEN_SPLIT.split(text.lower()) if w]


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())
