"""End-to-end tests for generate_shorts()."""

import pytest

from vertical_shorts.config import Settings, load_settings
from vertical_shorts.core.pipeline import generate_shorts
from vertical_shorts.errors import FallbackUnavailableError, ProcessingBudgetExceeded


class TestGenerateShorts:

    def test_lecture_report(self, lecture_report):
        assert lecture_report.used_fallback is False
        assert len(lecture_report.segments) == 40
        assert lecture_report.candidate_count == 224
        assert 1 <= len(lecture_report.shorts) <= 5

    def test_shorts_are_disjoint_sorted_and_bounded(self, lecture_report):
        shorts = lecture_report.shorts
        for short in shorts:
            assert 30.0 <= short.duration <= 60.0
        for prev, nxt in zip(shorts, shorts[1:]):
            assert prev.window_end <= nxt.window_start

    def test_ids_titles_and_keys(self, lecture_report, source_url):
        for n, short in enumerate(lecture_report.shorts):
            assert short.id == "short-{}".format(n)
            assert short.title == "Crispy Fries - Clip {}".format(n + 1)
            assert short.cache_key is not None and len(short.cache_key) == 32
        assert lecture_report.source_id == source_url

    def test_excerpts_are_capped(self, lecture_report):
        for short in lecture_report.shorts:
            assert len(short.transcript_excerpt) <= 303

    def test_short_segments_are_clip_relative(self, lecture_report):
        for short in lecture_report.shorts:
            assert short.segments[0].start == 0.0
            assert short.segments[-1].end == pytest.approx(short.duration)

    def test_deterministic(self, lecture_cues):
        first = generate_shorts(lecture_cues, duration_s=200.0)
        second = generate_shorts(lecture_cues, duration_s=200.0)
        assert first == second

    def test_fallback_without_transcript(self):
        report = generate_shorts(None, duration_s=300.0, source_title="Silent Film")
        assert report.used_fallback is True
        assert len(report.segments) == 20
        assert 1 <= len(report.shorts) <= 5
        for short in report.shorts:
            assert short.duration in (30.0, 45.0, 60.0)

    def test_no_duration_and_no_transcript_is_fatal(self):
        with pytest.raises(FallbackUnavailableError):
            generate_shorts(None, source_id="vid-9")

    def test_short_transcript_returns_no_shorts(self):
        cues = [{"start": 0.0, "end": 10.0, "text": "only ten seconds of speech here today"}]
        report = generate_shorts(cues)
        assert report.shorts == []
        assert report.candidate_count == 0

    def test_settings_override(self, lecture_cues):
        settings = load_settings(max_shorts=1, min_duration_s=10.0, max_duration_s=20.0)
        report = generate_shorts(lecture_cues, settings=settings)
        assert len(report.shorts) == 1
        assert 10.0 <= report.shorts[0].duration <= 20.0

    def test_processing_budget(self, lecture_cues):
        with pytest.raises(ProcessingBudgetExceeded):
            generate_shorts(lecture_cues, settings=Settings(max_segments=5))

    def test_huge_duration_without_transcript_hits_budget(self):
        with pytest.raises(ProcessingBudgetExceeded):
            generate_shorts(None, duration_s=1e12)

    def test_infinite_duration_without_transcript_is_fatal(self):
        with pytest.raises(FallbackUnavailableError):
            generate_shorts(None, duration_s=float("inf"))

    def test_no_cache_key_without_source(self, lecture_cues):
        report = generate_shorts(lecture_cues)
        assert all(s.cache_key is None for s in report.shorts)


class TestLoadSettings:

    def test_none_overrides_ignored(self):
        assert load_settings(max_shorts=None) == Settings()

    def test_override_applied(self):
        assert load_settings(max_shorts=2).max_shorts == 2
