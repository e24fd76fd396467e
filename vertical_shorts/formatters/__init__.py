"""Output formatter registry.

WHY: The CLI needs a single lookup to find the right formatter by name.
A central dict makes it trivial to add new formats: create the formatter
class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["shorts_json"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vertical_shorts.formatters.ass_captions import ASSCaptionFormatter
from vertical_shorts.formatters.shorts_json import ShortsJSONFormatter
from vertical_shorts.formatters.srt_captions import SRTCaptionFormatter

if TYPE_CHECKING:
    from vertical_shorts.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "shorts_json": ShortsJSONFormatter,
    "srt_captions": SRTCaptionFormatter,
    "ass_captions": ASSCaptionFormatter,
}
