"""WebVTT caption track parsing into raw cues.

WHY: Video platforms publish auto-generated captions as WebVTT. The
normalizer works on RawCue objects, so the track has to be split into
timed cues first, without cleaning the text (cleaning and de-duplication
belong to the normalizer).

HOW: Line-oriented scan. A timing line ("00:00:01.000 --> 00:00:04.500",
optionally followed by cue settings) starts a cue; following non-blank
lines are its text. Header, NOTE, STYLE and REGION blocks and numeric or
named cue identifiers are skipped.

RULES:
- Hours are optional in timestamps ("01:02.500" is valid).
- "," is accepted as the millisecond separator (SRT-style tracks).
- A cue with unparseable timing or end < start is skipped with a warning;
  parsing continues with the next cue.
- Cue text lines are joined with a single space.
"""

from __future__ import annotations

import logging
import re

from vertical_shorts.core.ir import RawCue
from vertical_shorts.errors import MalformedCueError

logger = logging.getLogger(__name__)

_TIMESTAMP = r"(?:\d+:)?\d{1,2}:\d{2}[.,]\d{1,3}"
_TIMING_RE = re.compile(r"^\s*({ts})\s*-->\s*({ts})(?:\s+.*)?$".format(ts=_TIMESTAMP))
_ARROW_RE = re.compile(r"-->")
_SKIP_BLOCKS = ("NOTE", "STYLE", "REGION")


def parse_timestamp(value: str) -> float:
    """Convert "HH:MM:SS.mmm" or "MM:SS.mmm" to seconds.

    Raises:
        MalformedCueError: If the timestamp cannot be parsed.
    """
    match = re.fullmatch(r"(?:(\d+):)?(\d{1,2}):(\d{2})[.,](\d{1,3})", value.strip())
    if not match:
        raise MalformedCueError("Bad timestamp: {!r}".format(value))
    hours, minutes, seconds, fraction = match.groups()
    if int(minutes) > 59 or int(seconds) > 59:
        raise MalformedCueError("Bad timestamp: {!r}".format(value))
    return (
        int(hours or 0) * 3600
        + int(minutes) * 60
        + int(seconds)
        + int(fraction.ljust(3, "0")) / 1000.0
    )


def _parse_timing(line: str) -> tuple[float, float]:
    match = _TIMING_RE.match(line)
    if not match:
        raise MalformedCueError("Bad timing line: {!r}".format(line))
    start = parse_timestamp(match.group(1))
    end = parse_timestamp(match.group(2))
    if end < start:
        raise MalformedCueError("Cue ends before it starts: {!r}".format(line))
    return start, end


def parse_vtt(content: str) -> list[RawCue]:
    """Parse a WebVTT document into raw cues.

    Args:
        content: Full WebVTT text.

    Returns:
        Cues in document order. Cue text is left untouched apart from
        joining its lines.
    """
    lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    cues: list[RawCue] = []

    i = 0
    while i < len(lines):
        line = lines[i].strip()

        if not line:
            i += 1
            continue

        # Header and metadata blocks run until the next blank line
        if line.startswith("WEBVTT") or line.split(" ", 1)[0] in _SKIP_BLOCKS:
            while i < len(lines) and lines[i].strip():
                i += 1
            continue

        if not _ARROW_RE.search(line):
            # Cue identifier; the timing line follows
            i += 1
            continue

        timing_line = line
        i += 1
        text_lines: list[str] = []
        while i < len(lines) and lines[i].strip():
            text_lines.append(lines[i].strip())
            i += 1

        try:
            start, end = _parse_timing(timing_line)
        except MalformedCueError as exc:
            logger.warning("Skipping malformed VTT cue: %s", exc)
            continue

        if text_lines:
            cues.append(RawCue(start=start, end=end, text=" ".join(text_lines)))

    logger.debug("Parsed %d VTT cues", len(cues))
    return cues
