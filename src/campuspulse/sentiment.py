"""Keyword sentiment scoring for feedback comments."""

from __future__ import annotations

import re
from typing import Optional

POSITIVE_WORDS = frozenset(
    {
        "amazing",
        "awesome",
        "clear",
        "confident",
        "cool",
        "easy",
        "excellent",
        "fast",
        "good",
        "great",
        "helpful",
        "insightful",
        "love",
        "nice",
        "smooth",
        "useful",
    }
)

NEGATIVE_WORDS = frozenset(
    {
        "bad",
        "boring",
        "confusing",
        "hard",
        "issue",
        "lag",
        "slow",
        "pain",
        "poor",
        "rough",
        "unclear",
        "stuck",
        "tough",
        "waste",
    }
)

MIN_SCORE = -3
MAX_SCORE = 3

_SPLIT_RE = re.compile(r"[\s,.!?;:/\\]+")


def tokenize(text: str) -> list[str]:
    return [token for token in _SPLIT_RE.split(text.lower()) if token]


def score_comment(comment: Optional[str]) -> int:
    if not comment or not comment.strip():
        return 0

    score = 0
    for token in tokenize(comment):
        if token in POSITIVE_WORDS:
            score += 1
        if token in NEGATIVE_WORDS:
            score -= 1
    return max(MIN_SCORE, min(MAX_SCORE, score))
