"""Core caption logic: word chunking, active-chunk lookup and SRT output.

WHY: Vertical shorts show a few words at a time. A transcript segment is
usually a full sentence or more, so it has to be re-chunked into short,
word-bounded captions whose timing is spread proportionally over the
segment. The interactive preview and the offline export must agree on which
chunk is visible at any instant, otherwise burned-in captions drift away
from what the user approved.

HOW: The pipeline has three stages:
  1. chunk_segment(): splits a segment into groups of max_words words,
     each spanning group_size * time_per_word seconds.
  2. active_chunk_index() / caption_at(): the preview lookup, built on the
     same time_per_word() helper as the export.
  3. generate_srt(): rebases captions onto the clip, drops entries that
     are too short to read, and writes numbered SRT blocks.

RULES:
- All functions are pure; no global state.
- Concatenating a segment's chunk texts with single spaces reproduces the
  segment's whitespace-normalized text exactly.
- A segment with at most max_words words yields one caption spanning the
  segment's own [start, end].
- Export and preview both derive timing from time_per_word().
- SRT indices are 1-based and contiguous after filtering.
"""

import math
from typing import Iterable, List, Optional, Tuple

from .models import Caption, CaptionSegment
from .presets import MIN_CAPTION_DURATION_S

# Tolerance added to the word index before flooring
_INDEX_EPSILON = 1e-9

# =============================================================================
# Chunking
# =============================================================================


def time_per_word(segment: CaptionSegment, word_count: int) -> float:
    """Seconds allotted to each word when a segment is spread evenly."""
    if word_count <= 0:
        return 0.0
    return (segment.end - segment.start) / word_count


def chunk_segment(segment: CaptionSegment, max_words: int) -> List[Caption]:
    """Split one segment into word-bounded captions with proportional timing.

    WHY: Long segments cannot be shown at once on a 9:16 frame. Chunks of a
    few words, timed by their share of the segment's word count, follow the
    speech closely enough without word-level timestamps.

    HOW: Group g covers words [g*max_words, g*max_words + len(group)) and
    spans start + offset*time_per_word up to the group's last word, capped
    at the segment end.

    Args:
        segment: The segment to chunk.
        max_words: Maximum words per caption (>= 1).

    Returns:
        Captions in order; empty if the segment has no words.

    Raises:
        ValueError: If max_words < 1.
    """
    if max_words < 1:
        raise ValueError("max_words must be >= 1, got {}".format(max_words))

    words = segment.text.split()
    if not words:
        return []

    if len(words) <= max_words:
        return [Caption(start=segment.start, end=segment.end, text=" ".join(words))]

    per_word = time_per_word(segment, len(words))
    captions = []  # type: List[Caption]
    for offset in range(0, len(words), max_words):
        group = words[offset:offset + max_words]
        start = segment.start + offset * per_word
        end = min(segment.end, segment.start + (offset + len(group)) * per_word)
        captions.append(Caption(start=start, end=end, text=" ".join(group)))

    return captions


def chunk_segments(segments: Iterable[CaptionSegment], max_words: int) -> List[Caption]:
    """Chunk every segment and flatten the result, preserving order."""
    captions = []  # type: List[Caption]
    for segment in segments:
        captions.extend(chunk_segment(segment, max_words))
    return captions


# =============================================================================
# Preview lookup
# =============================================================================


def active_chunk_index(segment: CaptionSegment, t: float, max_words: int) -> int:
    """Index of the chunk of `segment` visible at time t.

    Uses wordIndex = floor((t - start) / time_per_word) and
    chunkIndex = floor(wordIndex / max_words), clamped to the chunks that
    actually exist (t at or past the segment end maps to the last chunk).
    """
    words = segment.text.split()
    if len(words) <= max_words:
        return 0

    per_word = time_per_word(segment, len(words))
    if per_word <= 0:
        return 0

    # t == chunk.start must select that chunk despite float rounding
    word_index = int(math.floor((t - segment.start) / per_word + _INDEX_EPSILON))
    chunk_index = word_index // max_words
    last_index = (len(words) - 1) // max_words
    return max(0, min(chunk_index, last_index))


def caption_at(
    segments: Iterable[CaptionSegment],
    t: float,
    max_words: int,
) -> Optional[str]:
    """Caption text to show at time t, or None between segments.

    The active segment is the first one with start <= t < end.
    """
    for segment in segments:
        if segment.start <= t < segment.end:
            words = segment.text.split()
            if not words:
                return None
            index = active_chunk_index(segment, t, max_words)
            first = index * max_words
            return " ".join(words[first:first + max_words])
    return None


# =============================================================================
# SRT Output
# =============================================================================


def seconds_to_srt_time(seconds: float) -> str:
    """Convert seconds to SRT timestamp format: HH:MM:SS,mmm"""
    total_ms = int(round(max(0.0, seconds) * 1000))
    hours, rem = divmod(total_ms, 3600 * 1000)
    minutes, rem = divmod(rem, 60 * 1000)
    secs, millis = divmod(rem, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


def clip_relative(
    caption: Caption,
    clip_start: float = 0.0,
    clip_duration: Optional[float] = None,
) -> Optional[Tuple[float, float, str]]:
    """Rebase a caption onto its clip, or None if it should not be shown.

    RULES:
    - s = max(0, start - clip_start), e = max(0, end - clip_start)
    - With a known clip_duration both are also capped at it.
    - Entries with empty text or e - s < MIN_CAPTION_DURATION_S are dropped.
    """
    text = " ".join(caption.text.split())
    if not text:
        return None

    start = max(0.0, caption.start - clip_start)
    end = max(0.0, caption.end - clip_start)
    if clip_duration is not None:
        start = min(start, clip_duration)
        end = min(end, clip_duration)

    if end - start < MIN_CAPTION_DURATION_S:
        return None
    return start, end, text


def generate_srt(
    captions: Iterable[Caption],
    clip_start: float = 0.0,
    clip_duration: Optional[float] = None,
) -> str:
    """Generate SRT content for one clip.

    Args:
        captions: Captions in playback order (absolute or clip-relative).
        clip_start: Subtracted from every timestamp; 0 for captions that
                    are already clip-relative.
        clip_duration: Optional clip length used to cap timestamps.

    Returns:
        SRT text: index, "HH:MM:SS,mmm --> HH:MM:SS,mmm", text, blank line.
        Empty string when nothing survives filtering.
    """
    lines = []  # type: List[str]
    index = 0

    for caption in captions:
        window = clip_relative(caption, clip_start, clip_duration)
        if window is None:
            continue
        start, end, text = window
        index += 1
        lines.append(str(index))
        lines.append("{} --> {}".format(seconds_to_srt_time(start), seconds_to_srt_time(end)))
        lines.append(text)
        lines.append("")

    return "\n".join(lines)
