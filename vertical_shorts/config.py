"""Configuration constants, scoring table, and .env loading.

WHY: Clip search and scoring are driven by heuristics (window bounds,
keyword list, bonus points) that were tuned by hand rather than derived
from data. Keeping them as plain data in one module means they can be
read, overridden and tested without touching the algorithms.

HOW: python-dotenv loads the .env file on import. Numeric knobs are
module-level constants with environment overrides. The scoring heuristics
are a frozen ScoringTable; Settings bundles the pipeline knobs and
load_settings() builds one from the current constants.

RULES:
- All durations are in seconds.
- Environment overrides are read once, at import.
- ENGAGEMENT_KEYWORDS are lowercase; matching is case-insensitive substring.
- Changing a scoring constant changes the ranking of every fixture.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got {!r}".format(name, raw))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw))


# ---------------------------------------------------------------------------
# Clip window search and selection
# ---------------------------------------------------------------------------

MIN_CLIP_DURATION_S = _env_float("MIN_CLIP_DURATION_S", 30.0)
MAX_CLIP_DURATION_S = _env_float("MAX_CLIP_DURATION_S", 60.0)
MAX_SHORTS = _env_int("MAX_SHORTS", 5)
EXCERPT_MAX_CHARS = _env_int("EXCERPT_MAX_CHARS", 300)

MAX_SEGMENTS = _env_int("MAX_SEGMENTS", 5000)
"""Processing budget for the O(n^2) window search (normalized segments)."""

# ---------------------------------------------------------------------------
# Transcript normalization
# ---------------------------------------------------------------------------

MERGE_MAX_GAP_S = _env_float("MERGE_MAX_GAP_S", 0.5)
MERGE_MIN_WORDS = _env_int("MERGE_MIN_WORDS", 8)
FALLBACK_SEGMENT_S = _env_float("FALLBACK_SEGMENT_S", 15.0)

PLACEHOLDER_TEXTS: tuple[str, ...] = (
    "This is an engaging moment from the video that captures attention.",
    "Key point being discussed here with important information.",
    "Interesting content that viewers would want to see.",
    "Valuable insight shared in this segment of the video.",
    "Compelling moment that makes for great short-form content.",
    "Highlight from the video with shareable content.",
)
"""Text for synthetic segments when no caption track is available."""

# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

ENGAGEMENT_KEYWORDS: tuple[str, ...] = (
    "amazing", "incredible", "important", "secret", "tip", "trick",
    "how to", "why", "best", "top", "must", "need", "should",
    "learn", "discover", "reveal", "truth", "fact", "actually",
    "surprising", "shocking", "crazy", "insane", "game changer",
)


@dataclass(frozen=True)
class ScoringTable:
    """Heuristic weights for scoring a clip window.

    RULES:
    - keyword_points per keyword occurrence (repeats count again)
    - question_bonus once if the text contains "?"
    - sentence_points per [.!?]-separated clause longer than
      min_sentence_chars after trimming
    - max(0, duration_tolerance_s - |duration - ideal_duration_s|)
    - word_count_bonus when min_words <= word count <= max_words
    """

    keywords: tuple[str, ...] = ENGAGEMENT_KEYWORDS
    keyword_points: float = 10.0
    question_bonus: float = 15.0
    sentence_points: float = 5.0
    min_sentence_chars: int = 10
    ideal_duration_s: float = 45.0
    duration_tolerance_s: float = 20.0
    min_words: int = 50
    max_words: int = 150
    word_count_bonus: float = 15.0


DEFAULT_SCORING = ScoringTable()

# ---------------------------------------------------------------------------
# Clip cache and caption fetching
# ---------------------------------------------------------------------------

CLIP_CACHE_DIR = Path(
    os.getenv("CLIP_CACHE_DIR", "").strip()
    or os.path.join(tempfile.gettempdir(), "shorts-crop-cache")
)
CLIP_CACHE_TTL_S = _env_float("CLIP_CACHE_TTL_S", 24 * 60 * 60)
CLIP_CACHE_WORKERS = _env_int("CLIP_CACHE_WORKERS", 2)

CAPTION_FETCH_TIMEOUT_S = _env_float("CAPTION_FETCH_TIMEOUT_S", 30.0)


@dataclass(frozen=True)
class Settings:
    """Pipeline knobs for one generation request.

    WHY: Requests may need different bounds (tests, CLI flags) without
    touching module globals, and concurrent requests must not share
    mutable configuration.
    """

    min_duration_s: float = MIN_CLIP_DURATION_S
    max_duration_s: float = MAX_CLIP_DURATION_S
    max_shorts: int = MAX_SHORTS
    max_segments: int | None = MAX_SEGMENTS
    excerpt_chars: int = EXCERPT_MAX_CHARS
    merge_max_gap_s: float = MERGE_MAX_GAP_S
    merge_min_words: int = MERGE_MIN_WORDS
    fallback_segment_s: float = FALLBACK_SEGMENT_S
    scoring: ScoringTable = DEFAULT_SCORING


def load_settings(**overrides) -> Settings:
    """Build Settings from the module constants, applying keyword overrides.

    Overrides that are None are ignored so CLI flags can be passed through
    unconditionally.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**values)
