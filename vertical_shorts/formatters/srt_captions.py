"""SRT caption formatter: one word-chunked SRT file per Short.

WHY: Editors and upload tools want a sidecar subtitle file for each clip,
with the same few-words-at-a-time captions the preview shows. All SRT
output goes through the caption library so preview and export never
disagree on timing.

HOW: For each Short, the caption adapter converts its clip-relative
segments into CaptionSegments, then short_captions.format_srt() chunks them
by style.max_words and renders SRT with timestamps capped at the clip's
duration.

RULES:
- One file per Short, named after its id: "-short-0.srt" for "short-0".
- Media type: "application/x-subrip".
- A report without shorts produces no files.
- Never modifies the ShortsReport.
"""

from typing import List, Optional

from short_captions import format_srt
from short_captions.models import CaptionStyleConfig
from vertical_shorts.adapters.caption_adapter import short_to_caption_segments
from vertical_shorts.core.ir import ShortsReport
from vertical_shorts.formatters.base import BaseFormatter, FormatterOutput


class SRTCaptionFormatter(BaseFormatter):
    """Formatter that produces one SRT caption file per selected Short."""

    @property
    def name(self) -> str:
        return "SRT Captions"

    def format(
        self,
        report: ShortsReport,
        style: Optional[CaptionStyleConfig] = None,
    ) -> List[FormatterOutput]:
        """Render every Short's captions as SRT.

        Args:
            report: Result of generate_shorts().
            style: Caption style; only max_words affects SRT output.

        Returns:
            One FormatterOutput per Short, in time order.
        """
        style = style or CaptionStyleConfig()
        outputs: List[FormatterOutput] = []

        for short in report.shorts:
            srt = format_srt(
                short_to_caption_segments(short),
                style,
                clip_duration=short.duration,
            )
            outputs.append(FormatterOutput(
                suffix="-{}.srt".format(short.id),
                content=srt,
                media_type="application/x-subrip",
            ))

        return outputs
