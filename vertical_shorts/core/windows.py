"""Candidate clip window enumeration over normalized segments.

WHY: A short must start and end on segment boundaries (never mid-sentence)
and last between min and max duration. Every contiguous run of segments
that fits is a candidate; scoring decides which ones are worth keeping.

HOW: For each start index i, extend the end index j one segment at a
time, accumulating text. Emit a candidate whenever
min <= segments[j].end - segments[i].start <= max, and stop extending once
the duration exceeds max (segment ends never decrease, so no later j can
fit).

RULES:
- O(n^2) in the segment count; max_segments bounds n up front.
- Candidates are emitted in (start index, end index) order with score 0.
- Window text is the segment texts joined by single spaces.
"""

from __future__ import annotations

import logging

from vertical_shorts.config import MAX_CLIP_DURATION_S, MIN_CLIP_DURATION_S
from vertical_shorts.core.ir import ClipCandidate, TranscriptSegment
from vertical_shorts.errors import ProcessingBudgetExceeded

logger = logging.getLogger(__name__)


def search_windows(
    segments: list[TranscriptSegment],
    min_duration_s: float = MIN_CLIP_DURATION_S,
    max_duration_s: float = MAX_CLIP_DURATION_S,
    max_segments: int | None = None,
) -> list[ClipCandidate]:
    """Enumerate every segment-aligned window within the duration bounds.

    Args:
        segments: Normalized segments (time-ordered, non-overlapping).
        min_duration_s: Shortest acceptable window.
        max_duration_s: Longest acceptable window.
        max_segments: Processing budget; None disables the check.

    Returns:
        Unscored candidates (score 0.0). Empty when nothing fits.

    Raises:
        ValueError: If min_duration_s > max_duration_s.
        ProcessingBudgetExceeded: If len(segments) > max_segments.
    """
    if min_duration_s > max_duration_s:
        raise ValueError(
            "min_duration_s ({}) is greater than max_duration_s ({})".format(
                min_duration_s, max_duration_s
            )
        )
    if max_segments is not None and len(segments) > max_segments:
        raise ProcessingBudgetExceeded("search_windows", max_segments, len(segments))

    candidates: list[ClipCandidate] = []

    for i, first in enumerate(segments):
        texts: list[str] = []
        for j in range(i, len(segments)):
            texts.append(segments[j].text)
            window_end = segments[j].end
            duration = window_end - first.start

            if min_duration_s <= duration <= max_duration_s:
                candidates.append(ClipCandidate(
                    start=first.start,
                    end=window_end,
                    text=" ".join(texts),
                    score=0.0,
                    start_idx=i,
                    end_idx=j,
                ))

            if duration > max_duration_s:
                break

    logger.info(
        "Found %d candidate windows in %d segments (%.0f-%.0fs)",
        len(candidates), len(segments), min_duration_s, max_duration_s,
    )
    return candidates
