"""Shorts JSON formatter: the generation result as one JSON document.

WHY: Front ends and downstream renderers consume the selected shorts as
JSON: the preview player needs start/end and clip-relative segments, the
export step needs the cache key. This is the wire shape of a generation
request.

HOW: Builds {"source": {...}, "shorts": [Short.to_dict(), ...]} from the
ShortsReport and validates it against shorts_output_schema.json (shipped
next to this module) before serializing.

RULES:
- Output suffix: "-shorts.json"
- Short keys are camelCase (transcriptExcerpt, cacheKey)
- Schema validation is mandatory; raises jsonschema.ValidationError
- The caption style is not part of this output
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from short_captions.models import CaptionStyleConfig
from vertical_shorts.core.ir import ShortsReport
from vertical_shorts.formatters.base import BaseFormatter, FormatterOutput

_SCHEMA_PATH = Path(__file__).resolve().parent / "shorts_output_schema.json"

_CACHED_SCHEMA: dict[str, Any] | None = None


def _get_schema() -> dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def build_shorts_document(report: ShortsReport) -> dict[str, Any]:
    """Build the JSON-ready dict for a ShortsReport (not yet validated)."""
    return {
        "source": {
            "id": report.source_id,
            "title": report.source_title,
            "duration": report.duration_s,
            "usedFallback": report.used_fallback,
            "candidateCount": report.candidate_count,
        },
        "shorts": [short.to_dict() for short in report.shorts],
    }


class ShortsJSONFormatter(BaseFormatter):
    """Formatter that writes the selected shorts as a validated JSON file."""

    @property
    def name(self) -> str:
        return "Shorts JSON"

    def format(
        self,
        report: ShortsReport,
        style: CaptionStyleConfig | None = None,
    ) -> list[FormatterOutput]:
        """Serialize the report to "-shorts.json".

        Raises:
            jsonschema.ValidationError: If the document does not match the schema.
        """
        document = build_shorts_document(report)
        jsonschema.validate(instance=document, schema=_get_schema())
        content = json.dumps(document, indent=2, ensure_ascii=False)
        return [
            FormatterOutput(
                suffix="-shorts.json",
                content=content,
                media_type="application/json",
            )
        ]
