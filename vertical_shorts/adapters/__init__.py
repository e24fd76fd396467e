"""Adapter modules for converting between the shorts IR and library formats.

WHY: The shorts IR (Short, TranscriptSegment) and the caption library
(short_captions.CaptionSegment) use different data models. Adapters bridge
them so each side can evolve independently.

RULES:
- Adapters are pure data transformations: no I/O, no side effects.
- Adapters must not modify the source IR objects.
"""

from vertical_shorts.adapters.caption_adapter import short_to_caption_segments

__all__ = ["short_to_caption_segments"]
