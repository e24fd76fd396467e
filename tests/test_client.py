"""Tests for CaptionTrackClient.

HOW: An httpx.MockTransport stands in for the network. Each test runs its
own event loop through asyncio.run(), so no async test plugin is needed.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from vertical_shorts.api.client import CaptionTrackClient
from vertical_shorts.errors import CaptionTrackError

TRACK_URL = "https://captions.example.com/tracks/fries101.vtt"


def _run(coro):
    return asyncio.run(coro)


def _transport(handler):
    return httpx.MockTransport(handler)


class TestFetchVTT:

    def test_returns_body_text(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="WEBVTT\n")

        async def scenario():
            async with CaptionTrackClient(transport=_transport(handler)) as client:
                return await client.fetch_vtt(TRACK_URL)

        assert _run(scenario()) == "WEBVTT\n"
        assert seen == [TRACK_URL]

    def test_error_status_raises_with_code(self):
        def handler(request):
            return httpx.Response(404, text="no such track")

        async def scenario():
            async with CaptionTrackClient(transport=_transport(handler)) as client:
                await client.fetch_vtt(TRACK_URL)

        with pytest.raises(CaptionTrackError) as exc_info:
            _run(scenario())
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "no such track"
        assert "HTTP 404" in str(exc_info.value)

    def test_error_body_is_truncated(self):
        def handler(request):
            return httpx.Response(500, text="x" * 1000)

        async def scenario():
            async with CaptionTrackClient(transport=_transport(handler)) as client:
                await client.fetch_vtt(TRACK_URL)

        with pytest.raises(CaptionTrackError) as exc_info:
            _run(scenario())
        assert len(exc_info.value.message) == 200

    def test_transport_failure_has_no_status(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario():
            async with CaptionTrackClient(transport=_transport(handler)) as client:
                await client.fetch_vtt(TRACK_URL)

        with pytest.raises(CaptionTrackError) as exc_info:
            _run(scenario())
        assert exc_info.value.status_code is None
        assert "transport error" in str(exc_info.value)

    def test_requires_context_manager(self):
        client = CaptionTrackClient()
        with pytest.raises(RuntimeError, match="async context manager"):
            _run(client.fetch_vtt(TRACK_URL))

    def test_custom_headers_sent(self):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, text="WEBVTT\n")

        async def scenario():
            client = CaptionTrackClient(
                transport=_transport(handler), headers={"Authorization": "Bearer abc"}
            )
            async with client:
                await client.fetch_vtt(TRACK_URL)

        _run(scenario())
        assert seen["authorization"] == "Bearer abc"


class TestFetchCues:

    def test_parses_track(self, sample_vtt):
        def handler(request):
            return httpx.Response(200, text=sample_vtt)

        messages = []

        async def scenario():
            async with CaptionTrackClient(transport=_transport(handler)) as client:
                return await client.fetch_cues(TRACK_URL, on_status=messages.append)

        cues = _run(scenario())
        assert [(c.start, c.end) for c in cues] == [
            (0.0, 2.0), (1.9, 4.0), (4.0, 6.5), (6.5, 9.0),
        ]
        assert messages == ["Fetching caption track...", "Parsed 4 cues"]
