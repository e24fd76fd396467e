"""Tests for the command-line interface.

HOW: main() is called with an explicit argv and writes into tmp_path.
Status lines go to stderr and are checked through capsys. Error paths
exit through sys.exit(1), observed as SystemExit.
"""

from __future__ import annotations

import json

import httpx
import pytest

from vertical_shorts import cli
from vertical_shorts.api.client import CaptionTrackClient
from vertical_shorts.cli import build_parser, main
from vertical_shorts.formatters import shorts_json

TRACK_URL = "https://captions.example.com/tracks/fries101.vtt"


@pytest.fixture
def lecture_json(tmp_path, lecture_cues):
    path = tmp_path / "talk.json"
    path.write_text(
        json.dumps({"cues": lecture_cues, "duration": 200, "title": "Crispy Fries"}),
        encoding="utf-8",
    )
    return path


def _load(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["talk.vtt"])
        assert args.input == "talk.vtt"
        assert args.url is None
        assert args.formats is None
        assert args.max_words is None

    def test_style_and_clip_flags(self):
        args = build_parser().parse_args([
            "-", "--duration", "90", "--font-size", "30", "--position", "top",
            "--max-shorts", "2", "--min-duration", "20",
        ])
        assert args.duration == 90.0
        assert args.font_size == 30
        assert args.position == "top"
        assert args.max_shorts == 2
        assert args.min_duration == 20.0


class TestRun:

    def test_json_input_writes_all_formats(self, lecture_json, tmp_path):
        main([str(lecture_json)])

        document = _load(tmp_path / "talk-shorts.json")
        assert document["source"]["title"] == "Crispy Fries"
        assert document["source"]["duration"] == 200.0
        assert document["shorts"]
        count = len(document["shorts"])
        for short in document["shorts"]:
            assert (tmp_path / "talk-{}.srt".format(short["id"])).is_file()
            assert (tmp_path / "talk-{}.ass".format(short["id"])).is_file()
        assert not (tmp_path / "talk-short-{}.srt".format(count)).exists()

    def test_vtt_input(self, tmp_path, lecture_vtt):
        track = tmp_path / "lecture.vtt"
        track.write_text(lecture_vtt, encoding="utf-8")

        main([str(track), "--formats", "shorts_json", "--title", "Fries"])

        document = _load(tmp_path / "lecture-shorts.json")
        assert document["source"]["title"] == "Fries"
        assert document["source"]["usedFallback"] is False
        assert document["shorts"][0]["title"] == "Fries - Clip 1"

    def test_output_dir(self, lecture_json, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        main([str(lecture_json), "--formats", "shorts_json", "--output-dir", str(out)])
        assert (out / "talk-shorts.json").is_file()
        assert not (tmp_path / "talk-shorts.json").exists()

    def test_second_run_does_not_overwrite(self, lecture_json, tmp_path):
        main([str(lecture_json), "--formats", "shorts_json"])
        main([str(lecture_json), "--formats", "shorts_json"])
        assert (tmp_path / "talk-shorts.json").is_file()
        assert (tmp_path / "talk-shorts-2.json").is_file()

    def test_clip_flags_reach_pipeline(self, lecture_json, tmp_path):
        main([
            str(lecture_json), "--formats", "shorts_json",
            "--max-shorts", "1", "--min-duration", "10", "--max-duration", "20",
        ])
        shorts = _load(tmp_path / "talk-shorts.json")["shorts"]
        assert len(shorts) == 1
        assert 10 <= shorts[0]["end"] - shorts[0]["start"] <= 20

    def test_no_transcript_with_duration(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        main(["-", "--duration", "300", "--formats", "shorts_json"])

        document = _load(tmp_path / "video-shorts.json")
        assert document["source"]["usedFallback"] is True
        for short in document["shorts"]:
            assert short["end"] - short["start"] in (30, 45, 60)

    def test_status_goes_to_stderr(self, lecture_json, capsys):
        main([str(lecture_json), "--formats", "shorts_json"])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Saved: talk-shorts.json" in captured.err
        assert "Done!" in captured.err

    def test_style_warnings_printed(self, lecture_json, capsys):
        main([str(lecture_json), "--formats", "srt_captions", "--font-size", "100"])
        err = capsys.readouterr().err
        assert "Warning: fontSize 100 is outside [12, 48]; clamped to 48" in err

    def test_url_input(self, tmp_path, lecture_vtt, monkeypatch):
        def handler(request):
            return httpx.Response(200, text=lecture_vtt)

        monkeypatch.setattr(
            cli,
            "CaptionTrackClient",
            lambda: CaptionTrackClient(transport=httpx.MockTransport(handler)),
        )
        main(["--url", TRACK_URL, "--formats", "shorts_json", "--output-dir", str(tmp_path)])

        document = _load(tmp_path / "video-shorts.json")
        assert document["source"]["id"] == TRACK_URL
        assert document["shorts"][0]["cacheKey"] is not None


class TestErrors:

    def _exit_code(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        return exc_info.value.code

    def test_no_input(self, capsys):
        assert self._exit_code([]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_no_transcript_without_duration(self, tmp_path, capsys):
        assert self._exit_code(["-", "--output-dir", str(tmp_path)]) == 1
        assert "no usable transcript" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert self._exit_code([str(tmp_path / "absent.vtt")]) == 1

    def test_unsupported_extension(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        assert self._exit_code([str(path)]) == 1
        assert "Unsupported caption file" in capsys.readouterr().err

    def test_unknown_format(self, lecture_json, capsys):
        assert self._exit_code([str(lecture_json), "--formats", "pdf"]) == 1
        assert "Unknown format 'pdf'" in capsys.readouterr().err

    def test_malformed_json_file(self, tmp_path, capsys):
        path = tmp_path / "talk.json"
        path.write_text(json.dumps({"segments": []}), encoding="utf-8")
        assert self._exit_code([str(path)]) == 1
        assert "expected a list of cues" in capsys.readouterr().err

    def test_non_string_title_in_json_file(self, tmp_path, lecture_cues, capsys):
        path = tmp_path / "talk.json"
        path.write_text(json.dumps({"cues": lecture_cues, "title": 2024}), encoding="utf-8")
        assert self._exit_code([str(path), "--formats", "shorts_json"]) == 1
        assert "'title' must be a string" in capsys.readouterr().err
        assert not (tmp_path / "talk-shorts.json").exists()

    @pytest.mark.parametrize("duration", ["Infinity", "[200]", "true"])
    def test_unusable_duration_in_json_file(self, tmp_path, duration, capsys):
        path = tmp_path / "talk.json"
        path.write_text('{{"cues": [], "duration": {}}}'.format(duration), encoding="utf-8")
        assert self._exit_code([str(path), "--formats", "shorts_json"]) == 1
        assert "'duration' must be" in capsys.readouterr().err

    def test_infinite_duration_flag_without_transcript(self, tmp_path, capsys):
        argv = ["-", "--duration", "inf", "--output-dir", str(tmp_path)]
        assert self._exit_code(argv) == 1
        assert "no usable transcript" in capsys.readouterr().err

    def test_huge_duration_flag_without_transcript(self, tmp_path, capsys):
        argv = ["-", "--duration", "1e12", "--output-dir", str(tmp_path)]
        assert self._exit_code(argv) == 1
        assert "exceeds the processing budget" in capsys.readouterr().err

    def test_schema_failure_exits_cleanly(self, lecture_json, monkeypatch, capsys):
        monkeypatch.setattr(shorts_json, "build_shorts_document", lambda report: {"shorts": []})
        assert self._exit_code([str(lecture_json), "--formats", "shorts_json"]) == 1
        assert "Invalid shorts document" in capsys.readouterr().err

    def test_missing_output_dir(self, lecture_json, tmp_path):
        assert self._exit_code([str(lecture_json), "--output-dir", str(tmp_path / "nope")]) == 1

    def test_fetch_failure(self, tmp_path, monkeypatch, capsys):
        def handler(request):
            return httpx.Response(403, text="forbidden")

        monkeypatch.setattr(
            cli,
            "CaptionTrackClient",
            lambda: CaptionTrackClient(transport=httpx.MockTransport(handler)),
        )
        assert self._exit_code(["--url", TRACK_URL, "--output-dir", str(tmp_path)]) == 1
        assert "HTTP 403" in capsys.readouterr().err
