"""End-to-end shorts generation: caption cues in, ShortsReport out.

WHY: Callers (CLI, a web backend, tests) want one call that runs the whole
chain with consistent settings instead of wiring five stages by hand.

HOW: normalize_cues -> search_windows -> score_candidates -> select_clips
-> build_shorts, with every knob taken from a Settings instance.

RULES:
- No I/O: cues arrive already fetched/parsed.
- A transcript with no qualifying window yields an empty shorts list,
  never an error.
- FallbackUnavailableError and ProcessingBudgetExceeded propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from vertical_shorts.config import Settings, load_settings
from vertical_shorts.core.ir import ShortsReport
from vertical_shorts.core.normalizer import normalize_cues
from vertical_shorts.core.scoring import score_candidates
from vertical_shorts.core.selector import build_shorts, select_clips
from vertical_shorts.core.windows import search_windows

logger = logging.getLogger(__name__)


def generate_shorts(
    cues: Iterable[Any] | None,
    duration_s: float | None = None,
    source_title: str = "Untitled",
    source_id: str | None = None,
    settings: Settings | None = None,
) -> ShortsReport:
    """Run the full transcript-to-shorts pipeline.

    Args:
        cues: RawCue objects or cue dicts; None when no caption track exists.
        duration_s: Video duration, needed only for the synthetic fallback.
        source_title: Video title used in short titles.
        source_id: Source identifier (e.g. URL); enables cache keys.
        settings: Pipeline knobs; defaults to load_settings().

    Returns:
        ShortsReport with the normalized segments and selected shorts.
    """
    settings = settings or load_settings()

    normalized = normalize_cues(
        cues,
        duration_s,
        max_gap_s=settings.merge_max_gap_s,
        min_words=settings.merge_min_words,
        fallback_segment_s=settings.fallback_segment_s,
        max_segments=settings.max_segments,
        source_id=source_id,
    )
    segments = normalized.segments

    candidates = search_windows(
        segments,
        settings.min_duration_s,
        settings.max_duration_s,
        max_segments=settings.max_segments,
    )
    scored = score_candidates(candidates, settings.scoring)
    selected = select_clips(scored, settings.max_shorts)
    shorts = build_shorts(
        selected,
        segments,
        source_title=source_title,
        source_id=source_id,
        excerpt_chars=settings.excerpt_chars,
    )

    if shorts:
        logger.info("Selected %d shorts from %d candidates", len(shorts), len(candidates))
    else:
        logger.info("No window between %.0fs and %.0fs; returning no shorts",
                    settings.min_duration_s, settings.max_duration_s)

    return ShortsReport(
        source_title=source_title,
        duration_s=duration_s,
        segments=segments,
        shorts=shorts,
        used_fallback=normalized.used_fallback,
        candidate_count=len(candidates),
        source_id=source_id,
    )
