"""Caption library for vertical short-form clips.

WHY: Shorts need captions a few words at a time, timed proportionally
within each transcript segment, and the same captions have to come out of
the browser preview, the SRT export and the burned-in render. Keeping that
logic in a small library with no application imports lets every consumer
share one implementation.

HOW: format_srt(segments, style) chunks clip-relative segments by the
style's max_words and renders SRT. format_ass() does the same for a styled
ASS script. Lower-level pieces (chunk_segment, caption_at, generate_srt,
style_directives, hex_to_ass_color, validate_style) are exported for
callers that need them directly.

RULES:
- format_srt() / format_ass() are the entry points for subtitle output.
- Segments must be CaptionSegment objects from short_captions.models.
- Style input from users goes through validate_style(), which clamps
  instead of rejecting.
- Python 3.9 compatible (no match/case, no X | Y unions).
"""

from typing import List, Optional

from .colors import hex_to_ass_color, normalize_hex, swap_red_blue
from .core import (
    active_chunk_index,
    caption_at,
    chunk_segment,
    chunk_segments,
    generate_srt,
    seconds_to_srt_time,
    time_per_word,
)
from .models import Caption, CaptionSegment, CaptionStyleConfig
from .style import force_style, generate_ass, style_directives, validate_style

__all__ = [
    "format_srt",
    "format_ass",
    "Caption",
    "CaptionSegment",
    "CaptionStyleConfig",
    "active_chunk_index",
    "caption_at",
    "chunk_segment",
    "chunk_segments",
    "force_style",
    "generate_ass",
    "generate_srt",
    "hex_to_ass_color",
    "normalize_hex",
    "seconds_to_srt_time",
    "style_directives",
    "swap_red_blue",
    "time_per_word",
    "validate_style",
]


def format_srt(
    segments: List[CaptionSegment],
    style: Optional[CaptionStyleConfig] = None,
    clip_start: float = 0.0,
    clip_duration: Optional[float] = None,
) -> str:
    """Chunk segments into captions and render them as SRT.

    Args:
        segments: Segments in playback order.
        style: Caption style (only max_words matters for SRT). Default style
               when None.
        clip_start: Subtracted from all timestamps (0 for clip-relative input).
        clip_duration: Optional clip length; timestamps are capped at it.

    Returns:
        SRT-formatted subtitle string (empty when there is nothing to show).
    """
    style = style or CaptionStyleConfig()
    if not segments:
        return ""
    captions = chunk_segments(segments, style.max_words)
    return generate_srt(captions, clip_start=clip_start, clip_duration=clip_duration)


def format_ass(
    segments: List[CaptionSegment],
    style: Optional[CaptionStyleConfig] = None,
    clip_start: float = 0.0,
    clip_duration: Optional[float] = None,
) -> str:
    """Chunk segments into captions and render a styled ASS script."""
    style = style or CaptionStyleConfig()
    captions = chunk_segments(segments, style.max_words)
    return generate_ass(captions, style, clip_start=clip_start, clip_duration=clip_duration)
