"""Engagement scoring for candidate clip windows.

WHY: Without a model in the loop, the ranking has to come from cheap text
signals: hook words ("secret", "how to"), questions, complete sentences,
a duration close to what performs well on short-form platforms, and a
word count that suggests continuous speech rather than silence.

HOW: score_clip() adds up independent bonuses taken from a ScoringTable.

RULES:
- Pure: the score depends only on (text, duration, table).
- Keyword matches are case-insensitive substrings and every occurrence
  counts ("tip ... tip" scores twice).
- The "?" bonus is flat, not per question.
- Clauses come from splitting on runs of [.!?]; only clauses longer than
  min_sentence_chars after trimming count.
- Duration bonus: max(0, tolerance - |duration - ideal|).
- Word count is a whitespace split.
"""

from __future__ import annotations

import dataclasses
import re

from vertical_shorts.config import DEFAULT_SCORING, ScoringTable
from vertical_shorts.core.ir import ClipCandidate

_CLAUSE_SPLIT_RE = re.compile(r"[.!?]+")


def keyword_hits(text: str, keywords: tuple[str, ...]) -> int:
    """Total occurrences of all keywords in text (case-insensitive)."""
    lowered = text.lower()
    return sum(lowered.count(keyword.lower()) for keyword in keywords if keyword)


def score_clip(text: str, duration_s: float, table: ScoringTable = DEFAULT_SCORING) -> float:
    """Score a window's text and duration. Higher is more engaging."""
    score = table.keyword_points * keyword_hits(text, table.keywords)

    if "?" in text:
        score += table.question_bonus

    clauses = [c for c in _CLAUSE_SPLIT_RE.split(text) if len(c.strip()) > table.min_sentence_chars]
    score += table.sentence_points * len(clauses)

    score += max(0.0, table.duration_tolerance_s - abs(duration_s - table.ideal_duration_s))

    word_count = len(text.split())
    if table.min_words <= word_count <= table.max_words:
        score += table.word_count_bonus

    return score


def score_candidates(
    candidates: list[ClipCandidate],
    table: ScoringTable = DEFAULT_SCORING,
) -> list[ClipCandidate]:
    """Return copies of the candidates with their scores filled in."""
    return [
        dataclasses.replace(c, score=score_clip(c.text, c.duration, table))
        for c in candidates
    ]
