"""Adapter: Short records to caption library segments.

WHY: The shorts IR (TranscriptSegment inside a Short) and the caption
library (short_captions.CaptionSegment) are separate data models so the
library can be used without the application. This adapter is the single
crossing point.

HOW: Each clip-relative TranscriptSegment of a Short becomes one
CaptionSegment with identical timing and text.

RULES:
- Short.segments are already clip-relative; no time shifting here.
- Segments with blank text are skipped (nothing to caption).
- The Short is never modified.
- Python 3.9 compatible, like the caption library it feeds.
"""

from typing import List

from short_captions.models import CaptionSegment
from vertical_shorts.core.ir import Short


def short_to_caption_segments(short: Short) -> List[CaptionSegment]:
    """Convert a Short's segments into caption library input.

    Args:
        short: A selected clip with clip-relative segments.

    Returns:
        CaptionSegments in playback order, ready for format_srt()/format_ass().
    """
    return [
        CaptionSegment(start=segment.start, end=segment.end, text=segment.text)
        for segment in short.segments
        if segment.text.strip()
    ]
