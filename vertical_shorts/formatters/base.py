"""Abstract base formatter and output container.

WHY: Every output format consumes the same ShortsReport but produces
different file content. This base class enforces a consistent interface
so the CLI (and any web layer) can work with any formatter generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list: the JSON formatter returns one item,
  per-short subtitle formatters return one item per Short
- ``suffix`` starts with a hyphen, e.g. ``"-shorts.json"``
- The caller is responsible for prepending the source filename stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from short_captions.models import CaptionStyleConfig
from vertical_shorts.core.ir import ShortsReport


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-short-0.srt"`` gives ``"talk-short-0.srt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str | bytes
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Shorts JSON'."""

    @abstractmethod
    def format(
        self,
        report: ShortsReport,
        style: CaptionStyleConfig | None = None,
    ) -> list[FormatterOutput]:
        """Convert a ShortsReport into one or more output files.

        Args:
            report: Result of generate_shorts().
            style: Caption style; formatters that do not render captions
                   ignore it. Default style when None.

        Returns:
            List of FormatterOutput objects.
        """
