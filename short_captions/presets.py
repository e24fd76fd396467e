"""Style bounds, defaults and rendering constants for vertical captions.

WHY: Caption styling is user-editable, so every bound and every renderer
constant must live in one importable place. The clamping validator, the
SRT/ASS writers and the tests all read from here.

HOW: Plain module-level constants. STYLE_BOUNDS holds inclusive numeric
ranges, STYLE_CHOICES holds closed sets, MARGIN_V maps the vertical position
to an ASS MarginV on a 1080x1920 canvas.

RULES:
- Constants only; never mutate at runtime.
- MARGIN_V values must stay distinct per position.
- ALIGNMENT is fixed bottom-center (numpad 2); vertical placement is done
  purely through MarginV.
"""

from typing import Dict, FrozenSet, Tuple

# Inclusive numeric bounds; out-of-range values are clamped, not rejected.
STYLE_BOUNDS: Dict[str, Tuple[int, int]] = {
    "font_size": (12, 48),
    "max_words": (2, 10),
}

STYLE_CHOICES: Dict[str, FrozenSet[str]] = {
    "font_weight": frozenset({"normal", "bold"}),
    "position": frozenset({"top", "middle", "bottom"}),
}

DEFAULT_STYLE: Dict = {
    "font_family": "Inter",
    "font_size": 18,
    "font_weight": "bold",
    "color": "#FFFFFF",
    "background_color": "transparent",
    "position": "bottom",
    "max_words": 5,
}

TRANSPARENT = "transparent"

# Vertical 9:16 output canvas
PLAY_RES_X = 1080
PLAY_RES_Y = 1920

# Bottom-center (numpad layout used by ASS)
ALIGNMENT = 2

MARGIN_V: Dict[str, int] = {
    "top": 1500,
    "middle": 860,
    "bottom": 180,
}

MARGIN_H = 60

# Captions shorter than this are not worth a subtitle entry
MIN_CAPTION_DURATION_S = 0.1
