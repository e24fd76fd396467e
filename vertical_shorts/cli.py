"""Command-line interface for the vertical shorts generator.

WHY: Editors need a way to turn a long video's caption track into short
clip suggestions and per-clip subtitle files without running a web app.
The CLI wires together caption loading (file or URL), the shorts pipeline,
caption style validation, pluggable formatter output and file saving
behind a single command.

HOW: Uses argparse to accept a caption source, duration/title metadata,
clip bounds, caption style flags, output format selection and output
directory. Runs the async pipeline via asyncio.run() (fetching a caption
track is the only network step). Status messages go to stderr; output
files are saved next to the input (or to --output-dir).

RULES:
- Positional argument: a .vtt file, a .json cue list, or "-" for a video
  without captions (requires --duration for the synthetic fallback)
- --url fetches a WebVTT track instead of reading a file
- --formats: comma-separated formatter keys (default: all registered)
- Style flags go through validate_style(); every adjustment is printed
  as a warning and the run continues
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-shorts-2.json)
- Status output goes to stderr (not stdout)
- Exit code 1 on any error, including a missing transcript without duration
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any, List, Optional

import jsonschema

from short_captions.models import CaptionStyleConfig
from short_captions.style import validate_style
from vertical_shorts.api.client import CaptionTrackClient
from vertical_shorts.config import load_settings
from vertical_shorts.core.ir import ShortsReport
from vertical_shorts.core.pipeline import generate_shorts
from vertical_shorts.core.vtt import parse_vtt
from vertical_shorts.errors import ShortsError
from vertical_shorts.formatters import FORMATTERS
from vertical_shorts.formatters.base import FormatterOutput

logger = logging.getLogger(__name__)

NO_TRANSCRIPT = "-"
_DEFAULT_STEM = "video"


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed, so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the generator several times on the same video.
    Overwriting previous output would lose work. Numeric suffixes
    (-shorts-2.json) prevent data loss.

    RULES:
    - First attempt: {stem}{suffix} (e.g. talk-short-0.srt)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. talk-short-0-2.srt)
    - Counter starts at 2 and increments

    Args:
        stem: Source filename stem (without extension).
        suffix: Formatter's suffix (e.g. "-shorts.json").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Write one formatter output to a conflict-free path and return it."""
    path = _resolve_output_path(stem, output.suffix, output_dir)

    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")

    return path


def _load_json_cues(path: Path) -> tuple:
    """Read a JSON cue file.

    Accepts either a bare list of {start, end, text} objects or an object
    {"cues": [...], "duration": ..., "title": ...}.

    Returns:
        (cues, duration_or_None, title_or_None)
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        return data, None, None
    if isinstance(data, dict) and isinstance(data.get("cues"), list):
        duration = data.get("duration")
        if duration is not None:
            if isinstance(duration, bool) or not isinstance(duration, (int, float, str)):
                raise ValueError("{}: 'duration' must be a number".format(path.name))
            duration = float(duration)
            if not math.isfinite(duration):
                raise ValueError("{}: 'duration' must be finite".format(path.name))
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise ValueError("{}: 'title' must be a string".format(path.name))
        return data["cues"], duration, title
    raise ValueError(
        "{}: expected a list of cues or an object with a 'cues' list".format(path.name)
    )


async def _load_cues(args: argparse.Namespace) -> tuple:
    """Load caption cues from --url, a file, or nothing.

    Returns:
        (cues_or_None, duration_or_None, title_or_None)
    """
    if args.url:
        async with CaptionTrackClient() as client:
            cues = await client.fetch_cues(args.url, on_status=_status)
        return cues, None, None

    if args.input == NO_TRANSCRIPT:
        _status("No caption track; clips will use placeholder segments")
        return None, None, None

    input_path = Path(args.input).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if ext == ".vtt":
        _status("Reading WebVTT track: {}".format(input_path.name))
        return parse_vtt(input_path.read_text(encoding="utf-8")), None, None
    if ext == ".json":
        _status("Reading cue list: {}".format(input_path.name))
        return _load_json_cues(input_path)

    _fail("Unsupported caption file '{}'. Use a .vtt or .json file.".format(ext))
    return None, None, None


def _style_from_args(args: argparse.Namespace) -> CaptionStyleConfig:
    """Build the caption style from CLI flags, printing every adjustment."""
    raw: dict[str, Any] = {}
    for field in (
        "font_family", "font_size", "font_weight", "color",
        "background_color", "position", "max_words",
    ):
        value = getattr(args, field)
        if value is not None:
            raw[field] = value

    style, notes = validate_style(raw)
    for note in notes:
        _status("Warning: {}".format(note))
    return style


def _output_location(args: argparse.Namespace) -> tuple:
    """Return (stem, output_dir) for the current input."""
    if args.input and args.input != NO_TRANSCRIPT and not args.url:
        input_path = Path(args.input).resolve()
        stem, default_dir = input_path.stem, input_path.parent
    else:
        stem, default_dir = _DEFAULT_STEM, Path.cwd()

    output_dir = Path(args.output_dir).resolve() if args.output_dir else default_dir
    return stem, output_dir


def _select_formats(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())

    format_keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return format_keys


def _summarize(report: ShortsReport) -> None:
    if report.used_fallback:
        _status("  Using {} synthetic segments (no usable captions)".format(len(report.segments)))
    else:
        _status("  {} transcript segments".format(len(report.segments)))

    if not report.shorts:
        _status("  No window fits the clip duration bounds; no shorts selected")
        return

    _status("  {} candidate windows, {} shorts selected".format(
        report.candidate_count, len(report.shorts)))
    for short in report.shorts:
        _status("    {} {}s-{}s score {:.1f}: {}".format(
            short.id, short.start, short.end, short.score, short.title))


async def _run_pipeline(args: argparse.Namespace) -> None:
    """Load captions, generate shorts, run formatters, save files."""
    if not args.input and not args.url:
        _fail("Provide a caption file, '-' for no transcript, or --url")

    stem, output_dir = _output_location(args)
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    format_keys = _select_formats(args.formats)
    style = _style_from_args(args)

    try:
        settings = load_settings(
            min_duration_s=args.min_duration,
            max_duration_s=args.max_duration,
            max_shorts=args.max_shorts,
        )
        cues, file_duration, file_title = await _load_cues(args)

        duration = args.duration if args.duration is not None else file_duration
        title = args.title or file_title or stem
        source_id = args.source_id or args.url

        _status("Generating shorts...")
        report = generate_shorts(
            cues,
            duration_s=duration,
            source_title=title,
            source_id=source_id,
            settings=settings,
        )
        _summarize(report)

        _status("Formatting output...")
        saved_files: List[Path] = []
        for key in format_keys:
            formatter = FORMATTERS[key]()
            _status("  Running {} formatter...".format(formatter.name))
            for output in formatter.format(report, style):
                saved_path = _save_output(output, stem, output_dir)
                saved_files.append(saved_path)
                _status("  Saved: {}".format(saved_path.name))

    except jsonschema.ValidationError as e:
        logger.debug("Output failed schema validation", exc_info=True)
        _fail("Invalid shorts document: {}".format(e.message))
        return
    except (ShortsError, ValueError, OSError) as e:
        logger.debug("Pipeline failed", exc_info=True)
        _fail(str(e))
        return

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI (separate from main() for tests)."""
    parser = argparse.ArgumentParser(
        prog="vertical_shorts",
        description="Pick short vertical clips from a long video's caption track "
                    "and write clip metadata plus per-clip subtitles.",
    )

    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Caption track: a .vtt file, a .json cue list, or '-' for none.",
    )
    parser.add_argument("--url", default=None, help="Fetch the WebVTT track from this URL.")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Video duration in seconds (needed when there is no usable transcript).",
    )
    parser.add_argument("--title", default=None, help="Video title used in clip titles.")
    parser.add_argument(
        "--source-id",
        default=None,
        help="Source identifier for clip cache keys (default: --url if given).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: next to the input, or CWD).",
    )

    clips = parser.add_argument_group("clip selection")
    clips.add_argument("--min-duration", type=float, default=None,
                       help="Shortest clip in seconds.")
    clips.add_argument("--max-duration", type=float, default=None,
                       help="Longest clip in seconds.")
    clips.add_argument("--max-shorts", type=int, default=None,
                       help="Maximum number of clips.")

    captions = parser.add_argument_group("caption style")
    captions.add_argument("--font-family", default=None)
    captions.add_argument("--font-size", type=int, default=None, help="12 to 48.")
    captions.add_argument("--font-weight", default=None, help="normal or bold.")
    captions.add_argument("--color", default=None, help="Text colour, #RRGGBB.")
    captions.add_argument("--background-color", default=None,
                          help="Box colour, #RRGGBB or 'transparent'.")
    captions.add_argument("--position", default=None, help="top, middle or bottom.")
    captions.add_argument("--max-words", type=int, default=None,
                          help="Words per caption, 2 to 10.")

    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details.")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m vertical_shorts``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(_run_pipeline(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)


if __name__ == "__main__":
    main()
