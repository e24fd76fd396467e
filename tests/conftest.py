"""Shared test fixtures for the vertical_shorts test suite.

WHY: Most test modules need the same realistic caption track: long enough
to produce several 30-60 s windows, with keywords and a question in some
cues, and free of accidental progressive overlap so segment counts are
predictable.

HOW: LECTURE_SENTENCES rotate over 5-second cues. Every sentence has at
least 8 words (no merging) and no sentence starts with the last word of
another (no overlap trimming), so 40 cues normalize to 40 segments.

RULES:
- Fixtures return fresh lists; tests may mutate them.
- SOURCE_URL is the source id used wherever a cache key is expected.
"""

from typing import Any, Dict, List

import pytest

from vertical_shorts.config import Settings
from vertical_shorts.core.ir import RawCue
from vertical_shorts.core.pipeline import generate_shorts

SOURCE_URL = "https://videos.example.com/watch?v=fries101"

LECTURE_SENTENCES = (
    "Welcome back to the channel where we talk about cooking.",
    "Today I want to share the best tip for crispy potatoes.",
    "Have you ever wondered why restaurant fries taste so much better?",
    "The secret is actually a double fry at two different temperatures.",
    "First you blanch the cut potatoes in oil around one hundred sixty degrees.",
    "Then you let them rest on a rack for twenty minutes.",
    "Finally fry them again until they turn deep golden and crunchy.",
    "Season right away with salt while the fries are still hot.",
)

CUE_LENGTH_S = 5.0
CUE_COUNT = 40


def make_lecture_cues(count: int = CUE_COUNT) -> List[Dict[str, Any]]:
    """Back-to-back 5 s cues cycling through LECTURE_SENTENCES."""
    return [
        {
            "start": i * CUE_LENGTH_S,
            "end": (i + 1) * CUE_LENGTH_S,
            "text": LECTURE_SENTENCES[i % len(LECTURE_SENTENCES)],
        }
        for i in range(count)
    ]


@pytest.fixture
def lecture_cues():
    """40 cue dicts covering [0, 200] seconds."""
    return make_lecture_cues()


@pytest.fixture
def lecture_raw_cues():
    """The lecture track as RawCue objects."""
    return [RawCue.from_dict(c) for c in make_lecture_cues()]


@pytest.fixture
def progressive_cues():
    """Auto-caption style cues where each cue repeats the previous one."""
    return [
        RawCue(0.0, 2.0, "hello world"),
        RawCue(1.8, 4.0, "hello world today"),
    ]


@pytest.fixture
def default_settings():
    return Settings()


@pytest.fixture
def lecture_report():
    """ShortsReport for the lecture track with a known source id."""
    return generate_shorts(
        make_lecture_cues(),
        duration_s=200.0,
        source_title="Crispy Fries",
        source_id=SOURCE_URL,
    )


@pytest.fixture
def sample_vtt():
    """A small auto-caption style WebVTT track."""
    return (
        "WEBVTT\n"
        "Kind: captions\n"
        "Language: en\n"
        "\n"
        "NOTE generated by the platform\n"
        "\n"
        "1\n"
        "00:00:00.000 --> 00:00:02.000 align:start position:0%\n"
        "so<00:00:00.500><c> today</c>\n"
        "\n"
        "2\n"
        "00:00:01.900 --> 00:00:04.000 align:start position:0%\n"
        "so today\n"
        "we are going to cook\n"
        "\n"
        "00:04.000 --> 00:06.500\n"
        "[Music]\n"
        "\n"
        "00:00:06.500 --> 00:00:09.000\n"
        "&gt;&gt; the best fries ever\n"
    )


@pytest.fixture
def source_url():
    return SOURCE_URL


@pytest.fixture
def lecture_vtt():
    """The lecture track serialized as WebVTT."""
    blocks = ["WEBVTT", ""]
    for cue in make_lecture_cues():
        blocks.append("{} --> {}".format(_vtt_time(cue["start"]), _vtt_time(cue["end"])))
        blocks.append(cue["text"])
        blocks.append("")
    return "\n".join(blocks)


def _vtt_time(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return "{:02d}:{:02d}:{:02d}.000".format(hours, minutes, secs)
