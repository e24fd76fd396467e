"""Greedy top-K selection of non-overlapping clip windows, and Short building.

WHY: Overlapping windows are near-duplicates of each other, so the output
must be a small set of disjoint clips. Picking by score first keeps the
strongest hooks even if that leaves gaps in the timeline.

HOW: Sort candidates by score (descending), then by start (ascending) for
a deterministic order among ties. Walk the list and accept a candidate
when its [start, end) interval misses every accepted interval. Stop at
max_clips, then re-sort the accepted set by start.

RULES:
- Greedy by score; not a maximum-total-score selection. Changing the
  policy reorders every fixture.
- Intervals are half-open: [a, b) and [b, c) do not overlap.
- Short ids are "short-<n>" in time order, n from 0.
- Short segments are re-based on the window's exact float start.
"""

from __future__ import annotations

import logging
import math

from vertical_shorts.cache.clip_cache import cache_key
from vertical_shorts.config import EXCERPT_MAX_CHARS, MAX_SHORTS
from vertical_shorts.core.ir import ClipCandidate, Short, TranscriptSegment

logger = logging.getLogger(__name__)

EXCERPT_ELLIPSIS = "..."


def intervals_overlap(a: ClipCandidate, b: ClipCandidate) -> bool:
    """True if the half-open intervals [a.start, a.end) and [b.start, b.end) intersect."""
    return a.start < b.end and b.start < a.end


def select_clips(
    candidates: list[ClipCandidate],
    max_clips: int = MAX_SHORTS,
) -> list[ClipCandidate]:
    """Pick up to max_clips best-scoring, mutually disjoint candidates.

    Returns:
        The accepted candidates ordered by start time.
    """
    ranked = sorted(candidates, key=lambda c: (-c.score, c.start))
    accepted: list[ClipCandidate] = []

    for candidate in ranked:
        if len(accepted) >= max_clips:
            break
        if any(intervals_overlap(candidate, chosen) for chosen in accepted):
            continue
        accepted.append(candidate)
        logger.debug(
            "Accepted window %.2f-%.2f (score %.1f)", candidate.start, candidate.end, candidate.score
        )

    return sorted(accepted, key=lambda c: c.start)


def truncate_excerpt(text: str, max_chars: int = EXCERPT_MAX_CHARS) -> str:
    """Cut text to max_chars characters, appending "..." when cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + EXCERPT_ELLIPSIS


def build_shorts(
    selected: list[ClipCandidate],
    segments: list[TranscriptSegment],
    source_title: str = "Untitled",
    source_id: str | None = None,
    excerpt_chars: int = EXCERPT_MAX_CHARS,
) -> list[Short]:
    """Turn selected windows into Short records.

    Args:
        selected: Accepted candidates, ordered by start.
        segments: The normalized segments the candidates index into.
        source_title: Video title, used for "<title> - Clip <n>".
        source_id: Source identifier (e.g. the video URL); enables cache keys.
        excerpt_chars: Excerpt length limit.

    Returns:
        Shorts with clip-relative segments.
    """
    shorts: list[Short] = []
    for index, window in enumerate(selected):
        start = int(math.floor(window.start))
        end = int(math.floor(window.end))
        clip_segments = [
            segment.shifted(window.start)
            for segment in segments[window.start_idx:window.end_idx + 1]
        ]
        shorts.append(Short(
            id="short-{}".format(index),
            start=start,
            end=end,
            title="{} - Clip {}".format(source_title, index + 1),
            transcript_excerpt=truncate_excerpt(window.text, excerpt_chars),
            segments=clip_segments,
            score=window.score,
            window_start=window.start,
            window_end=window.end,
            cache_key=cache_key(source_id, start, end) if source_id else None,
        ))
    return shorts
