"""Hex colour parsing and ASS channel-order conversion.

WHY: Browser clients describe colours as #RRGGBB, but ASS/libass (and
ffmpeg's force_style) expect &HAABBGGRR: alpha first, then the bytes in
reversed order. Keeping the conversion in one pure module means the rest of
the renderer never touches byte order and other subtitle backends can skip
it entirely.

RULES:
- normalize_hex() accepts "#RGB", "#RRGGBB", with or without "#"; anything
  else raises ValueError.
- swap_red_blue() is the only place the byte order is reversed.
- "transparent" maps to a fully transparent ASS colour (alpha FF).
"""

import re

from .presets import TRANSPARENT

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

ASS_TRANSPARENT = "&HFF000000"


def normalize_hex(value: object) -> str:
    """Return value as an uppercase "#RRGGBB" string.

    Raises:
        ValueError: If value is not a 3- or 6-digit hex colour.
    """
    if not isinstance(value, str):
        raise ValueError("Colour must be a string, got {!r}".format(value))
    match = _HEX_RE.match(value.strip())
    if not match:
        raise ValueError("Not a hex colour: {!r}".format(value))
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits.upper()


def swap_red_blue(hex_color: str) -> str:
    """Convert "#RRGGBB" to "BBGGRR" (no prefix)."""
    digits = normalize_hex(hex_color)[1:]
    return digits[4:6] + digits[2:4] + digits[0:2]


def hex_to_ass_color(hex_color: str, alpha: str = "00") -> str:
    """Convert a CSS-style colour to an ASS colour literal.

    Args:
        hex_color: "#RRGGBB", "#RGB" or "transparent".
        alpha: Two hex digits, 00 = opaque, FF = invisible.

    Returns:
        "&HAABBGGRR", e.g. "#FF8000" -> "&H000080FF".
    """
    if hex_color.strip().lower() == TRANSPARENT:
        return ASS_TRANSPARENT
    return "&H{}{}".format(alpha.upper(), swap_red_blue(hex_color))
