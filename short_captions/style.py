"""Caption style validation and burned-in style directives (ASS / force_style).

WHY: Users pick caption styles in a browser editor, and the same style
must come out of the video encoder when captions are burned in. Browser
values are CSS-flavoured (#RRGGBB, "top"/"bottom", px sizes) while libass
wants ASS style fields with reversed colour byte order and numeric margins.

HOW: validate_style() turns untrusted input into a CaptionStyleConfig plus
notes. style_directives() maps a config onto ASS style fields;
force_style() and generate_ass() are two serializations of those fields.

RULES:
- Invalid style values are clamped or replaced, never rejected.
- Colour conversion happens only in colors.hex_to_ass_color().
- Alignment is fixed bottom-center; position only changes MarginV.
- Dialogue timing goes through core.clip_relative(), the same filter the
  SRT writer uses.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .colors import ASS_TRANSPARENT, hex_to_ass_color
from .core import clip_relative
from .models import Caption, CaptionStyleConfig
from .presets import (
    ALIGNMENT,
    MARGIN_H,
    MARGIN_V,
    PLAY_RES_X,
    PLAY_RES_Y,
    TRANSPARENT,
)

_ASS_STYLE_FIELDS = (
    "Name", "Fontname", "Fontsize", "PrimaryColour", "SecondaryColour",
    "OutlineColour", "BackColour", "Bold", "Italic", "Underline", "StrikeOut",
    "ScaleX", "ScaleY", "Spacing", "Angle", "BorderStyle", "Outline", "Shadow",
    "Alignment", "MarginL", "MarginR", "MarginV", "Encoding",
)

_ASS_EVENT_FIELDS = (
    "Layer", "Start", "End", "Style", "Name", "MarginL", "MarginR", "MarginV",
    "Effect", "Text",
)


def validate_style(
    raw: Optional[Mapping[str, Any]] = None,
) -> Tuple[CaptionStyleConfig, List[str]]:
    """Build a CaptionStyleConfig from untrusted input.

    WHY: A style arrives with every export request and may carry values the
    editor never offers (fontSize 100, maxWords 0, "#zzz"). Export should
    still proceed with the nearest sensible style.

    HOW: Runs pydantic validation with a notes list in the validation
    context; the model's "before" validators clamp or substitute defaults
    and append a note for each change.

    Args:
        raw: Mapping with camelCase or snake_case keys. None means defaults.

    Returns:
        (style, notes); notes is empty when nothing had to be adjusted.
    """
    notes = []  # type: List[str]
    style = CaptionStyleConfig.model_validate(dict(raw or {}), context={"notes": notes})
    return style, notes


def style_directives(style: CaptionStyleConfig) -> Dict[str, Any]:
    """Translate a caption style into ASS style fields.

    RULES:
    - Fontname / Fontsize pass through; Bold is -1 (on) or 0 (off).
    - A background colour switches to BorderStyle 3 (opaque box) and is
      used as the box (OutlineColour) and shadow (BackColour) colour.
    - Without a background the text gets a plain black outline.
    """
    has_box = style.background_color != TRANSPARENT
    if has_box:
        box_colour = hex_to_ass_color(style.background_color)
        border_style = 3
        outline_colour = box_colour
        back_colour = box_colour
    else:
        border_style = 1
        outline_colour = "&H00000000"
        back_colour = ASS_TRANSPARENT

    return {
        "Fontname": style.font_family,
        "Fontsize": style.font_size,
        "Bold": -1 if style.font_weight == "bold" else 0,
        "PrimaryColour": hex_to_ass_color(style.color),
        "OutlineColour": outline_colour,
        "BackColour": back_colour,
        "BorderStyle": border_style,
        "Outline": 2,
        "Shadow": 0,
        "Alignment": ALIGNMENT,
        "MarginV": MARGIN_V[style.position],
    }


def force_style(style: CaptionStyleConfig, play_res_y: int = PLAY_RES_Y) -> str:
    """Serialize style directives for ffmpeg's subtitles filter.

    MarginV is expressed on a PLAY_RES_Y-high canvas; pass the script
    height actually used by the renderer (libass uses 288 for SRT input)
    to rescale it.
    """
    directives = style_directives(style)
    if play_res_y != PLAY_RES_Y:
        directives["MarginV"] = int(round(directives["MarginV"] * play_res_y / PLAY_RES_Y))
    return ",".join("{}={}".format(key, value) for key, value in directives.items())


def seconds_to_ass_time(seconds: float) -> str:
    """Convert seconds to ASS timestamp format: H:MM:SS.cc"""
    total_cs = int(round(max(0.0, seconds) * 100))
    hours, rem = divmod(total_cs, 3600 * 100)
    minutes, rem = divmod(rem, 60 * 100)
    secs, centis = divmod(rem, 100)
    return "{}:{:02d}:{:02d}.{:02d}".format(hours, minutes, secs, centis)


def _escape_ass_text(text: str) -> str:
    # Braces open override blocks in ASS
    return text.replace("{", "(").replace("}", ")").replace("\n", "\\N")


def generate_ass(
    captions: Iterable[Caption],
    style: Optional[CaptionStyleConfig] = None,
    clip_start: float = 0.0,
    clip_duration: Optional[float] = None,
) -> str:
    """Generate a complete ASS script for burning captions into a 9:16 clip.

    Args:
        captions: Captions in playback order.
        style: Caption style; defaults to CaptionStyleConfig().
        clip_start: Subtracted from every timestamp.
        clip_duration: Optional clip length used to cap timestamps.

    Returns:
        ASS script text with one "Default" style and one Dialogue per caption.
    """
    style = style or CaptionStyleConfig()
    directives = style_directives(style)

    style_values = {
        "Name": "Default",
        "SecondaryColour": "&H000000FF",
        "Italic": 0,
        "Underline": 0,
        "StrikeOut": 0,
        "ScaleX": 100,
        "ScaleY": 100,
        "Spacing": 0,
        "Angle": 0,
        "MarginL": MARGIN_H,
        "MarginR": MARGIN_H,
        "Encoding": 1,
    }
    style_values.update(directives)

    lines = [
        "[Script Info]",
        "ScriptType: v4.00+",
        "PlayResX: {}".format(PLAY_RES_X),
        "PlayResY: {}".format(PLAY_RES_Y),
        "WrapStyle: 0",
        "ScaledBorderAndShadow: yes",
        "",
        "[V4+ Styles]",
        "Format: {}".format(", ".join(_ASS_STYLE_FIELDS)),
        "Style: {}".format(",".join(str(style_values[f]) for f in _ASS_STYLE_FIELDS)),
        "",
        "[Events]",
        "Format: {}".format(", ".join(_ASS_EVENT_FIELDS)),
    ]

    for caption in captions:
        window = clip_relative(caption, clip_start, clip_duration)
        if window is None:
            continue
        start, end, text = window
        lines.append("Dialogue: 0,{},{},Default,,0,0,0,,{}".format(
            seconds_to_ass_time(start),
            seconds_to_ass_time(end),
            _escape_ass_text(text),
        ))

    lines.append("")
    return "\n".join(lines)
