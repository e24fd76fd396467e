"""Caption cue cleaning, progressive-overlap removal, merging and fallback.

WHY: Auto-generated caption tracks are noisy. Cues carry inline timing
tags, style tags, ">>" speaker markers, HTML entities and "[Music]"-style
annotations, and auto-captioning repeats each cue's words in the next cue
while appending the newly recognized ones. Naively concatenating cues
would say every sentence two or three times and break keyword scoring and
excerpts downstream.

HOW: Four stages, each a pure function:
  1. clean_cue_text(): strip markup and annotations, collapse whitespace
  2. extract_new_text(): remove the part of a cue that repeats the
     previous cue (prefix match, else the longest
     word-sequence overlap)
  3. deduplicate_cues(): apply 1 and 2 to a cue list, emit segments
  4. merge_segments(): join short fragments separated by small gaps
normalize_cues() runs them and falls back to synthesize_segments() when the
track is missing or yields nothing.

RULES:
- Cues whose cleaned text is 1 character or less are dropped and do not
  update the overlap reference.
- The overlap reference is always the previous cue's full cleaned text,
  never the trimmed new text.
- Emitted segments never overlap: a segment's start is raised to the
  previous segment's end when the cues overlap in time.
- Merge when gap < max_gap_s AND the running segment has < min_words words.
- Fallback segments depend only on the duration (deterministic).
- The fallback needs a finite positive duration, and its segment count is
  checked against max_segments before any segment is built.
"""

from __future__ import annotations

import html
import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from vertical_shorts.config import (
    FALLBACK_SEGMENT_S,
    MERGE_MAX_GAP_S,
    MERGE_MIN_WORDS,
    PLACEHOLDER_TEXTS,
)
from vertical_shorts.core.ir import RawCue, TranscriptSegment
from vertical_shorts.errors import (
    FallbackUnavailableError,
    MalformedCueError,
    ProcessingBudgetExceeded,
)

logger = logging.getLogger(__name__)

# Inline timing tags (<00:00:01.234>) and style tags (<c>, </c>, <i>, <c.colorE5E5E5>)
_TAG_RE = re.compile(r"<[^>]*>")
# Speaker-change markers: runs of two or more ">"
_MARKER_RE = re.compile(r">{2,}")
# Non-speech annotations: [Music], [Applause], [inaudible]
_ANNOTATION_RE = re.compile(r"\[[^\]]*\]")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class NormalizedTranscript:
    """Result of normalize_cues(): the segments and whether they are synthetic."""

    segments: list[TranscriptSegment]
    used_fallback: bool = False


def clean_cue_text(text: str) -> str:
    """Strip markup from one cue's text and collapse whitespace."""
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    text = _MARKER_RE.sub(" ", text)
    text = _ANNOTATION_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_new_text(last_text: str, text: str) -> str:
    """Return the part of `text` that does not repeat `last_text`.

    WHY: Progressive captions look like "so today" → "so today we are" →
    "we are going to". Each cue restates some tail of the previous one.

    HOW: If text starts with last_text (case-insensitive) the remainder is
    new. Otherwise find the largest k where the last k words of last_text
    equal the first k words of text (case-insensitive) and keep the words
    after position k. k = 0 keeps the whole text.

    Args:
        last_text: Cleaned text of the previous kept cue ("" for the first).
        text: Cleaned text of the current cue.

    Returns:
        The new text, whitespace-trimmed (may be empty).
    """
    if text.lower().startswith(last_text.lower()):
        return text[len(last_text):].strip()

    previous = last_text.lower().split()
    words = text.split()
    lowered = [w.lower() for w in words]

    for k in range(min(len(previous), len(words)), 0, -1):
        if previous[-k:] == lowered[:k]:
            return " ".join(words[k:])
    return " ".join(words)


def deduplicate_cues(cues: Iterable[RawCue]) -> list[TranscriptSegment]:
    """Clean cues and strip progressive overlap, one segment per new text.

    Returns segments before the merge pass; see normalize_cues() for the
    full normalization.
    """
    segments: list[TranscriptSegment] = []
    last_text = ""
    previous_end: float | None = None

    for cue in cues:
        text = clean_cue_text(cue.text)
        if len(text) <= 1:
            continue

        new_text = extract_new_text(last_text, text)
        last_text = text
        if len(new_text) <= 1:
            continue

        start = cue.start if previous_end is None else max(cue.start, previous_end)
        end = max(cue.end, start)
        segments.append(TranscriptSegment(start=start, end=end, text=new_text))
        previous_end = end

    return segments


def merge_segments(
    segments: list[TranscriptSegment],
    max_gap_s: float = MERGE_MAX_GAP_S,
    min_words: int = MERGE_MIN_WORDS,
) -> list[TranscriptSegment]:
    """Merge short fragments into their successors.

    The next segment is merged into the running one when the gap between
    them is below max_gap_s and the running segment still has fewer than
    min_words words.
    """
    if not segments:
        return []

    merged: list[TranscriptSegment] = []
    current = segments[0]

    for following in segments[1:]:
        gap = following.start - current.end
        if gap < max_gap_s and current.word_count < min_words:
            current = TranscriptSegment(
                start=current.start,
                end=following.end,
                text="{} {}".format(current.text, following.text),
            )
        else:
            merged.append(current)
            current = following

    merged.append(current)
    return merged


def synthesize_segments(
    duration_s: float,
    segment_s: float = FALLBACK_SEGMENT_S,
    texts: tuple[str, ...] = PLACEHOLDER_TEXTS,
) -> list[TranscriptSegment]:
    """Uniform placeholder segments covering [0, duration_s].

    Segment i spans [i*segment_s, min((i+1)*segment_s, duration_s)] and
    uses texts[floor(start / segment_s) % len(texts)].
    """
    if segment_s <= 0:
        raise ValueError("segment_s must be positive, got {}".format(segment_s))
    if not math.isfinite(duration_s):
        raise ValueError("duration_s must be finite, got {}".format(duration_s))

    segments: list[TranscriptSegment] = []
    index = 0
    while index * segment_s < duration_s:
        start = index * segment_s
        end = min(start + segment_s, duration_s)
        text = texts[int(math.floor(start / segment_s)) % len(texts)]
        segments.append(TranscriptSegment(start=start, end=end, text=text))
        index += 1
    return segments


def _coerce_cues(raw_cues: Iterable[Any]) -> list[RawCue]:
    """Turn a mixed list of RawCue objects / dicts into RawCues, skipping bad ones."""
    cues: list[RawCue] = []
    for position, item in enumerate(raw_cues):
        try:
            if isinstance(item, RawCue):
                if item.end < item.start:
                    raise MalformedCueError(
                        "Cue ends before it starts ({} < {})".format(item.end, item.start)
                    )
                cue = item
            else:
                cue = RawCue.from_dict(item)
        except MalformedCueError as exc:
            logger.warning("Skipping malformed cue #%d: %s", position, exc)
            continue
        cues.append(cue)
    return cues


def normalize_cues(
    raw_cues: Iterable[Any] | None,
    duration_s: float | None = None,
    *,
    max_gap_s: float = MERGE_MAX_GAP_S,
    min_words: int = MERGE_MIN_WORDS,
    fallback_segment_s: float = FALLBACK_SEGMENT_S,
    max_segments: int | None = None,
    source_id: str | None = None,
) -> NormalizedTranscript:
    """Normalize a raw caption track into ordered, disjoint segments.

    WHY: Every later stage (window search, scoring, excerpts, captions)
    assumes clean, time-ordered, non-overlapping segments.

    HOW: Coerce cues (skipping malformed ones), deduplicate, merge. If the
    track is absent or nothing survives, synthesize placeholder segments
    from the known duration.

    Args:
        raw_cues: RawCue objects or cue dicts, in track order; None when
                  the video has no caption track.
        duration_s: Total video duration, required only for the fallback.
        max_gap_s: Merge threshold for gaps between segments.
        min_words: Merge while the running segment has fewer words.
        fallback_segment_s: Length of synthetic segments.
        max_segments: Upper bound on synthetic segments; None disables it.
        source_id: Included in the error when the fallback is impossible.

    Returns:
        NormalizedTranscript with segments and the fallback flag.

    Raises:
        FallbackUnavailableError: If a fallback is needed but duration_s is
            missing, not finite or not positive.
        ProcessingBudgetExceeded: If the fallback would need more than
            max_segments segments.
    """
    cue_count = 0
    if raw_cues is not None:
        cues = _coerce_cues(raw_cues)
        cue_count = len(cues)
        segments = merge_segments(deduplicate_cues(cues), max_gap_s, min_words)
        if segments:
            logger.info("Normalized %d cues into %d segments", cue_count, len(segments))
            return NormalizedTranscript(segments=segments, used_fallback=False)
        logger.info("Caption track yielded no usable segments (%d cues)", cue_count)

    if duration_s is None or not math.isfinite(duration_s) or duration_s <= 0:
        raise FallbackUnavailableError(
            "normalize_cues",
            {"source_id": source_id, "duration_s": duration_s, "cue_count": cue_count},
        )

    needed = math.ceil(duration_s / fallback_segment_s) if fallback_segment_s > 0 else 0
    if max_segments is not None and needed > max_segments:
        raise ProcessingBudgetExceeded("normalize_cues", max_segments, needed)

    segments = synthesize_segments(duration_s, fallback_segment_s)
    logger.info(
        "Synthesized %d fallback segments for %.1fs of video", len(segments), duration_s
    )
    return NormalizedTranscript(segments=segments, used_fallback=True)
