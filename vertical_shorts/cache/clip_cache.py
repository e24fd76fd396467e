"""Content-addressed store for rendered clip artifacts.

WHY: Cropping and encoding a clip takes seconds to minutes, and the same
(source, start, end) is requested repeatedly: once when shorts are
generated, again for preview, again for download. Two requests for the
same clip arriving together must not start two encoder runs, and nobody
may ever read a half-written file.

HOW: cache_key() hashes "<source>-<start>-<end>" to a fixed-length hex
key. ClipCache keeps a table of pending futures, guarded by a
threading.Lock: the first caller for a missing key submits the render to a
small worker pool, later callers wait on the same future. The render writes
into a temporary file inside the cache directory that is published with
os.replace(), which is atomic on the same filesystem.

RULES:
- At most one render in flight per key; waiters share its result.
- Readers only ever see fully published files ("<key><suffix>").
- A caller that times out or is cancelled does not cancel the render;
  the artifact is still published for the next request.
- Render failures reach every waiter as RenderError and leave no file.
- Eviction never touches keys with a render in flight.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import hashlib
import logging
import os
import re
import tempfile
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from vertical_shorts.config import CLIP_CACHE_DIR, CLIP_CACHE_TTL_S, CLIP_CACHE_WORKERS
from vertical_shorts.errors import RenderError

logger = logging.getLogger(__name__)

RenderFn = Callable[[Path], None]
"""Render collaborator: writes the finished artifact to the given path."""

_KEY_RE = re.compile(r"^[0-9a-f]{32}$")


def _format_number(value: float) -> str:
    """Render a bound the way the key has always been written: 30, 30.5."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def cache_key(source: str, start: float, end: float) -> str:
    """Lowercase MD5 hex digest of "<source>-<start>-<end>"."""
    raw = "{}-{}-{}".format(source, _format_number(start), _format_number(end))
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class ClipCache:
    """File-backed clip cache with per-key render de-duplication.

    WHY: The web layer, the CLI and background pre-rendering all ask for the
    same artifacts concurrently; the cache is the only shared mutable state
    in the system.

    HOW: A dict of pending futures keyed by cache key, protected by
    self._lock. Renders run on a ThreadPoolExecutor so a waiting caller can
    give up (timeout, task cancellation) without stopping the render.

    RULES:
    - get_or_render() / aget_or_render() are the only ways to populate
    - lookup() returns None for missing keys (no exceptions)
    - path_for() rejects anything that is not a 32-char hex key
    - Use as a context manager, or call close(), to stop the worker pool
    """

    def __init__(
        self,
        cache_dir: Path | str | None = None,
        suffix: str = ".mp4",
        max_workers: int = CLIP_CACHE_WORKERS,
    ) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else CLIP_CACHE_DIR
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.suffix = suffix
        self.render_count = 0
        self._pending: dict[str, Future] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="clip-render"
        )

    def __enter__(self) -> ClipCache:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        """Wait for in-flight renders and stop the worker pool."""
        self._executor.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def path_for(self, key: str) -> Path:
        """Published location of an artifact.

        Raises:
            ValueError: If key is not a lowercase 32-char hex digest.
        """
        if not _KEY_RE.match(key):
            raise ValueError("Invalid cache key: {!r}".format(key))
        return self.cache_dir / "{}{}".format(key, self.suffix)

    def lookup(self, key: str) -> Path | None:
        """Return the published artifact for key, or None on a miss."""
        path = self.path_for(key)
        return path if path.is_file() else None

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._pending

    # ------------------------------------------------------------------
    # Populate
    # ------------------------------------------------------------------

    def _claim(self, key: str, render: RenderFn) -> tuple[Path | None, Future | None]:
        """Return (hit, None) or (None, future) for the render of key."""
        with self._lock:
            hit = self.lookup(key)
            if hit is not None:
                return hit, None

            future = self._pending.get(key)
            if future is None:
                future = self._executor.submit(self._render_and_publish, key, render)
                self._pending[key] = future
                self.render_count += 1
                logger.info("Cache miss for %s, render started", key)
            else:
                logger.debug("Cache miss for %s, joining in-flight render", key)
            return None, future

    def _render_and_publish(self, key: str, render: RenderFn) -> Path:
        final_path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(
            prefix=".render-{}-".format(key), suffix=self.suffix, dir=self.cache_dir
        )
        os.close(fd)
        tmp_path = Path(tmp_name)

        try:
            try:
                render(tmp_path)
            except Exception as exc:
                raise RenderError(key, "{}: {}".format(type(exc).__name__, exc)) from exc

            if not tmp_path.is_file() or tmp_path.stat().st_size == 0:
                raise RenderError(key, "renderer produced no output")

            os.replace(tmp_path, final_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        finally:
            with self._lock:
                self._pending.pop(key, None)

        logger.info("Published %s", final_path.name)
        return final_path

    def get_or_render(
        self,
        source: str,
        start: float,
        end: float,
        render: RenderFn,
        timeout: float | None = None,
    ) -> Path:
        """Return the artifact for (source, start, end), rendering it once if missing.

        Args:
            source: Source identifier (e.g. the video URL).
            start: Clip start in seconds.
            end: Clip end in seconds.
            render: Called as render(tmp_path) by exactly one worker per key.
            timeout: Seconds to wait; the render keeps running after a timeout.

        Returns:
            Path of the published artifact.

        Raises:
            RenderError: If the render failed.
            TimeoutError: If timeout elapsed first.
        """
        key = cache_key(source, start, end)
        hit, future = self._claim(key, render)
        if hit is not None:
            return hit
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            raise TimeoutError(
                "Render for {} still running after {}s".format(key, timeout)
            ) from None

    async def aget_or_render(
        self,
        source: str,
        start: float,
        end: float,
        render: RenderFn,
    ) -> Path:
        """Async variant of get_or_render().

        The shared render future is awaited through asyncio.shield(), so
        cancelling the awaiting task leaves the render (and the other
        waiters) untouched.
        """
        key = cache_key(source, start, end)
        hit, future = self._claim(key, render)
        if hit is not None:
            return hit
        return await asyncio.shield(asyncio.wrap_future(future))

    # ------------------------------------------------------------------
    # Eviction
    # ------------------------------------------------------------------

    def evict_expired(self, max_age_s: float = CLIP_CACHE_TTL_S) -> int:
        """Delete published artifacts older than max_age_s (by mtime).

        Returns:
            Number of artifacts removed.
        """
        now = time.time()
        removed = 0

        with self._lock:
            pending = set(self._pending)

        for path in self.cache_dir.glob("*{}".format(self.suffix)):
            key = path.name[:len(path.name) - len(self.suffix)]
            if not _KEY_RE.match(key) or key in pending:
                continue
            try:
                age = now - path.stat().st_mtime
                if age > max_age_s:
                    path.unlink()
                    removed += 1
                    logger.info("Evicted %s (%.0fs old)", path.name, age)
            except FileNotFoundError:
                continue
            except OSError:
                logger.warning("Failed to evict cached clip: %s", path)

        return removed
