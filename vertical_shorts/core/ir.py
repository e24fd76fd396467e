"""Intermediate representation dataclasses for transcripts and shorts.

WHY: Caption tracks come in loosely (VTT files, JSON cue lists, an HTTP
fetch) and leave as several outputs (shorts JSON, per-short SRT and ASS).
Every stage in between works on the same few typed records, which keeps
normalization, search, scoring and formatting independent of each other.

HOW: Records, leaf-first:
  RawCue: one cue as received, before any cleaning
  TranscriptSegment: one cleaned, de-duplicated segment
  ClipCandidate: a window over normalized segments, with its score
  Short: a selected clip with clip-relative segments
  ShortsReport: everything one generation request produced

RULES:
- All times are float seconds except Short.start/end (floored integers).
- TranscriptSegment and ClipCandidate are immutable once built.
- Short.segments are re-based so the clip's own start is 0.
- to_dict() methods produce the camelCase wire shape.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from vertical_shorts.errors import MalformedCueError


def _as_seconds(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise MalformedCueError("{} must be a number, got {!r}".format(name, value))
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise MalformedCueError("{} must be a number, got {!r}".format(name, value)) from None
    if math.isnan(seconds) or math.isinf(seconds):
        raise MalformedCueError("{} must be finite, got {!r}".format(name, value))
    return seconds


@dataclass(frozen=True)
class RawCue:
    """A caption cue exactly as received.

    The text may still contain markup, timing sub-tags, bracketed
    annotations, HTML entities and progressive overlap with the
    previous cue.
    """

    start: float
    end: float
    text: str

    @classmethod
    def from_dict(cls, data: Any) -> RawCue:
        """Parse a cue from a loose JSON object.

        RULES:
        - start/end: numbers or numeric strings, finite, end >= start
        - text: string (may be empty; cleaning decides whether it survives)

        Raises:
            MalformedCueError: If the cue cannot be used.
        """
        if not isinstance(data, dict):
            raise MalformedCueError("Cue must be an object, got {!r}".format(data))
        start = _as_seconds(data.get("start"), "start")
        end = _as_seconds(data.get("end"), "end")
        text = data.get("text")
        if not isinstance(text, str):
            raise MalformedCueError("Cue text must be a string, got {!r}".format(text))
        if end < start:
            raise MalformedCueError("Cue ends before it starts ({} < {})".format(end, start))
        return cls(start=start, end=end, text=text)


@dataclass(frozen=True)
class TranscriptSegment:
    """A cleaned span of transcript text.

    RULES:
    - end >= start
    - text is non-empty after normalization
    - within a normalized transcript: ordered by start, non-overlapping
      (adjacent segments may touch)
    """

    start: float
    end: float
    text: str

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    def shifted(self, offset: float) -> TranscriptSegment:
        """Return a copy with offset subtracted from both bounds."""
        return TranscriptSegment(start=self.start - offset, end=self.end - offset, text=self.text)

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "text": self.text}


@dataclass(frozen=True)
class ClipCandidate:
    """A contiguous window over normalized segments.

    start_idx / end_idx are inclusive indices into the normalized segment
    list the window was built from.
    """

    start: float
    end: float
    text: str
    score: float
    start_idx: int
    end_idx: int

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class Short:
    """A selected clip, ready for preview and export.

    RULES:
    - id: "short-<n>", n counts from 0 in time order
    - start / end: floor of the window bounds, integer seconds
    - transcript_excerpt: at most EXCERPT_MAX_CHARS plus "..." if cut
    - segments: clip-relative (window start subtracted)
    - window_start / window_end: exact float window bounds
    - cache_key: ClipCache key for (source_id, start, end), None without a source id
    """

    id: str
    start: int
    end: int
    title: str
    transcript_excerpt: str
    segments: list[TranscriptSegment]
    score: float
    window_start: float
    window_end: float
    cache_key: str | None = None

    @property
    def duration(self) -> float:
        return self.window_end - self.window_start

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "title": self.title,
            "transcriptExcerpt": self.transcript_excerpt,
            "segments": [s.to_dict() for s in self.segments],
            "score": self.score,
            "cacheKey": self.cache_key,
        }


@dataclass
class ShortsReport:
    """The complete result of one generation request.

    RULES:
    - segments: the normalized (absolute-time) transcript the shorts came from
    - shorts: ordered by start time, at most Settings.max_shorts
    - used_fallback: True when segments were synthesized
    - candidate_count: number of windows that met the duration bounds
    """

    source_title: str
    duration_s: float | None
    segments: list[TranscriptSegment]
    shorts: list[Short] = field(default_factory=list)
    used_fallback: bool = False
    candidate_count: int = 0
    source_id: str | None = None
