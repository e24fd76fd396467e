"""ASS caption formatter: one styled subtitle script per Short.

WHY: Burned-in captions for vertical renders need font, colour, box and
vertical placement, which SRT cannot carry. An ASS script holds the same
chunked captions as the SRT export plus a style built from the user's
CaptionStyleConfig, so the renderer can hand it straight to ffmpeg's
subtitles filter.

HOW: Same per-Short flow as the SRT formatter, rendered with
short_captions.format_ass().

RULES:
- One file per Short, named after its id: "-short-0.ass" for "short-0".
- Media type: "text/x-ssa".
"""

from typing import List, Optional

from short_captions import format_ass
from short_captions.models import CaptionStyleConfig
from vertical_shorts.adapters.caption_adapter import short_to_caption_segments
from vertical_shorts.core.ir import ShortsReport
from vertical_shorts.formatters.base import BaseFormatter, FormatterOutput


class ASSCaptionFormatter(BaseFormatter):
    """Formatter that produces a styled ASS script per selected Short."""

    @property
    def name(self) -> str:
        return "ASS Captions"

    def format(
        self,
        report: ShortsReport,
        style: Optional[CaptionStyleConfig] = None,
    ) -> List[FormatterOutput]:
        style = style or CaptionStyleConfig()
        return [
            FormatterOutput(
                suffix="-{}.ass".format(short.id),
                content=format_ass(
                    short_to_caption_segments(short),
                    style,
                    clip_duration=short.duration,
                ),
                media_type="text/x-ssa",
            )
            for short in report.shorts
        ]
