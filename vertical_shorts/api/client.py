"""Async HTTP client for fetching caption tracks.

WHY: Caption tracks for a video are published at a URL (the platform's
subtitle endpoint or a pre-signed storage link). Fetching is the only
network step before shorts generation, and callers (CLI, a web backend,
tests) should not need to know HTTP details or status handling.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. CaptionTrackClient is an
async context manager: enter it to open the connection pool, exit to close
it. fetch_vtt() returns the raw track; fetch_cues() parses it into RawCues.

RULES:
- Always use the async context manager (async with CaptionTrackClient() as client:)
- Non-2xx responses raise CaptionTrackError with the status code
- Transport failures raise CaptionTrackError with status_code=None
- A transport can be injected (httpx.MockTransport in tests)
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from vertical_shorts.config import CAPTION_FETCH_TIMEOUT_S
from vertical_shorts.core.ir import RawCue
from vertical_shorts.core.vtt import parse_vtt
from vertical_shorts.errors import CaptionTrackError

logger = logging.getLogger(__name__)

_ERROR_BODY_MAX_CHARS = 200


class CaptionTrackClient:
    """Async client that downloads WebVTT caption tracks.

    RULES:
    - Use as: async with CaptionTrackClient() as client: ...
    - timeout defaults to CAPTION_FETCH_TIMEOUT_S from config
    - Redirects are followed (storage links usually redirect)
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout = timeout if timeout is not None else CAPTION_FETCH_TIMEOUT_S
        self._transport = transport
        self._headers = headers or {}
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> CaptionTrackClient:
        self._client = httpx.AsyncClient(
            headers=self._headers,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "CaptionTrackClient must be used as an async context manager: "
                "async with CaptionTrackClient() as client: ..."
            )
        return self._client

    async def fetch_vtt(
        self,
        url: str,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Download a caption track and return its text.

        Args:
            url: Absolute URL of the WebVTT track.
            on_status: Optional callback for status updates.

        Returns:
            The response body decoded as text.

        Raises:
            CaptionTrackError: On non-2xx responses or transport failures.
        """
        client = self._ensure_client()
        if on_status:
            on_status("Fetching caption track...")

        try:
            resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise CaptionTrackError(None, str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            raise CaptionTrackError(resp.status_code, resp.text[:_ERROR_BODY_MAX_CHARS])

        logger.info("Fetched caption track (%d bytes) from %s", len(resp.content), url)
        return resp.text

    async def fetch_cues(
        self,
        url: str,
        on_status: Callable[[str], None] | None = None,
    ) -> list[RawCue]:
        """Download a WebVTT track and parse it into raw cues."""
        content = await self.fetch_vtt(url, on_status=on_status)
        cues = parse_vtt(content)
        if on_status:
            on_status("Parsed {} cues".format(len(cues)))
        return cues
