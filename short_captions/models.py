"""Data models for the caption library.

WHY: Captions for a vertical short are derived from transcript segments
that already carry clip-relative timing. The library needs its own small
types so it never depends on the application package that produces them.

HOW: CaptionSegment is the input unit (one transcript segment), Caption is
the output unit (one on-screen chunk of at most max_words words).
CaptionStyleConfig is a pydantic model whose "before" validators clamp or
replace bad values instead of rejecting them.

RULES:
- Timestamps are in seconds (float).
- Caption.text is built from the segment's words only; words are never
  rewritten, reordered or dropped.
- CaptionStyleConfig never raises for out-of-range or unknown values.
  When validated with context={"notes": [...]}, every adjustment appends
  one human-readable note to that list.
"""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from .colors import normalize_hex
from .presets import DEFAULT_STYLE, STYLE_BOUNDS, STYLE_CHOICES, TRANSPARENT


@dataclass
class CaptionSegment:
    """A timed block of transcript text to be chunked into captions.

    Attributes:
        start: Start time in seconds.
        end: End time in seconds.
        text: Segment text; split on whitespace when chunking.
    """
    start: float
    end: float
    text: str


@dataclass
class Caption:
    """One on-screen caption chunk.

    Attributes:
        start: Start time in seconds.
        end: End time in seconds.
        text: The chunk's words joined by single spaces.
    """
    start: float
    end: float
    text: str


def _note(info: ValidationInfo, message: str) -> None:
    """Append a validation note when the caller asked for them."""
    context = info.context
    if isinstance(context, dict) and isinstance(context.get("notes"), list):
        context["notes"].append(message)


class CaptionStyleConfig(BaseModel):
    """Caption appearance for preview and burned-in export.

    Accepts both snake_case and the camelCase keys used by browser clients
    (fontFamily, fontSize, maxWords, ...). Use
    short_captions.style.validate_style() to get the adjustment notes back.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    font_family: str = Field(default=DEFAULT_STYLE["font_family"])
    font_size: int = Field(default=DEFAULT_STYLE["font_size"], ge=12, le=48)
    font_weight: Literal["normal", "bold"] = Field(default=DEFAULT_STYLE["font_weight"])
    color: str = Field(default=DEFAULT_STYLE["color"], description="#RRGGBB")
    background_color: str = Field(
        default=DEFAULT_STYLE["background_color"],
        description="#RRGGBB or 'transparent'",
    )
    position: Literal["top", "middle", "bottom"] = Field(default=DEFAULT_STYLE["position"])
    max_words: int = Field(default=DEFAULT_STYLE["max_words"], ge=2, le=10)

    @field_validator("font_family", mode="before")
    @classmethod
    def _font_family(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str) and value.strip():
            return value.strip()
        default = DEFAULT_STYLE["font_family"]
        _note(info, "fontFamily {!r} is empty or invalid; using {!r}".format(value, default))
        return default

    @field_validator("font_size", "max_words", mode="before")
    @classmethod
    def _clamp_to_bounds(cls, value: Any, info: ValidationInfo) -> Any:
        name = info.field_name
        low, high = STYLE_BOUNDS[name]
        default = DEFAULT_STYLE[name]
        try:
            number = int(round(float(value)))
        except (TypeError, ValueError, OverflowError):
            _note(info, "{} {!r} is not a number; using {}".format(to_camel(name), value, default))
            return default

        clamped = min(max(number, low), high)
        if clamped != number:
            _note(info, "{} {} is outside [{}, {}]; clamped to {}".format(
                to_camel(name), number, low, high, clamped))
        return clamped

    @field_validator("font_weight", "position", mode="before")
    @classmethod
    def _known_choice(cls, value: Any, info: ValidationInfo) -> Any:
        name = info.field_name
        if isinstance(value, str) and value.strip().lower() in STYLE_CHOICES[name]:
            return value.strip().lower()
        default = DEFAULT_STYLE[name]
        _note(info, "{} {!r} is not one of {}; using {!r}".format(
            to_camel(name), value, ", ".join(sorted(STYLE_CHOICES[name])), default))
        return default

    @field_validator("color", "background_color", mode="before")
    @classmethod
    def _hex_colour(cls, value: Any, info: ValidationInfo) -> Any:
        name = info.field_name
        if (
            name == "background_color"
            and isinstance(value, str)
            and value.strip().lower() == TRANSPARENT
        ):
            return TRANSPARENT
        try:
            return normalize_hex(value)
        except ValueError:
            default = DEFAULT_STYLE[name]
            _note(info, "{} {!r} is not a hex colour; using {!r}".format(
                to_camel(name), value, default))
            return default
