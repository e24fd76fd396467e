"""Tests for the content-addressed clip cache.

WHY: The cache is the only shared mutable state in the system. It must
render each key once even under concurrent requests, never expose partial
files, and keep renders alive when a waiting caller gives up.

HOW: Render collaborators are plain functions that write bytes and
optionally block on a threading.Event, so tests control exactly when a
render finishes. Concurrency uses real threads and asyncio.run().
"""

import asyncio
import hashlib
import os
import threading
import time

import pytest

from vertical_shorts.cache.clip_cache import ClipCache, cache_key
from vertical_shorts.errors import RenderError

SOURCE = "https://videos.example.com/watch?v=fries101"


class RecordingRenderer:
    """Render collaborator that counts calls and can be held open."""

    def __init__(self, payload=b"fake mp4 bytes", block=False):
        self.payload = payload
        self.calls = 0
        self.release = threading.Event()
        self.started = threading.Event()
        if not block:
            self.release.set()
        self._lock = threading.Lock()

    def __call__(self, tmp_path):
        with self._lock:
            self.calls += 1
        self.started.set()
        assert self.release.wait(timeout=5.0)
        tmp_path.write_bytes(self.payload)


@pytest.fixture
def cache(tmp_path):
    with ClipCache(tmp_path / "clips", max_workers=2) as c:
        yield c


def _published(cache_dir):
    return sorted(p.name for p in cache_dir.iterdir())


class TestCacheKey:

    def test_md5_of_source_and_bounds(self):
        expected = hashlib.md5("{}-30-60".format(SOURCE).encode("utf-8")).hexdigest()
        assert cache_key(SOURCE, 30, 60) == expected

    def test_integral_floats_match_ints(self):
        assert cache_key(SOURCE, 30.0, 60.0) == cache_key(SOURCE, 30, 60)

    def test_fractional_bounds_differ(self):
        expected = hashlib.md5("{}-30.5-60".format(SOURCE).encode("utf-8")).hexdigest()
        assert cache_key(SOURCE, 30.5, 60) == expected

    def test_lowercase_hex(self):
        key = cache_key(SOURCE, 1, 2)
        assert len(key) == 32
        assert key == key.lower()

    def test_different_inputs_different_keys(self):
        assert cache_key(SOURCE, 0, 30) != cache_key(SOURCE, 30, 60)
        assert cache_key("a", 0, 30) != cache_key("b", 0, 30)


class TestLookup:

    def test_miss_returns_none(self, cache):
        assert cache.lookup(cache_key(SOURCE, 0, 30)) is None

    @pytest.mark.parametrize("key", ["", "../etc/passwd", "A" * 32, "0" * 31, "g" * 32])
    def test_invalid_keys_rejected(self, cache, key):
        with pytest.raises(ValueError):
            cache.path_for(key)

    def test_path_uses_suffix(self, tmp_path):
        with ClipCache(tmp_path, suffix=".webm") as c:
            key = cache_key(SOURCE, 0, 30)
            assert c.path_for(key).name == key + ".webm"


class TestGetOrRender:

    def test_renders_and_publishes(self, cache):
        render = RecordingRenderer()
        path = cache.get_or_render(SOURCE, 30, 60, render)
        assert path == cache.path_for(cache_key(SOURCE, 30, 60))
        assert path.read_bytes() == b"fake mp4 bytes"
        assert cache.lookup(cache_key(SOURCE, 30, 60)) == path

    def test_hit_does_not_render_again(self, cache):
        render = RecordingRenderer()
        first = cache.get_or_render(SOURCE, 30, 60, render)
        second = cache.get_or_render(SOURCE, 30, 60, render)
        assert first == second
        assert render.calls == 1
        assert cache.render_count == 1

    def test_concurrent_callers_share_one_render(self, cache):
        render = RecordingRenderer(block=True)
        results = []
        errors = []

        def worker():
            try:
                results.append(cache.get_or_render(SOURCE, 30, 60, render, timeout=5.0))
            except Exception as exc:  # pragma: no cover - surfaced by the assert below
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        assert render.started.wait(timeout=5.0)
        time.sleep(0.05)
        render.release.set()
        for t in threads:
            t.join(timeout=5.0)

        assert errors == []
        assert len(results) == 8
        assert len(set(results)) == 1
        assert render.calls == 1

    def test_no_partial_file_visible_during_render(self, cache):
        render = RecordingRenderer(block=True)
        key = cache_key(SOURCE, 30, 60)
        t = threading.Thread(target=cache.get_or_render, args=(SOURCE, 30, 60, render))
        t.start()
        assert render.started.wait(timeout=5.0)
        assert cache.lookup(key) is None
        assert cache.is_pending(key)
        render.release.set()
        t.join(timeout=5.0)
        assert cache.lookup(key) is not None
        assert not cache.is_pending(key)

    def test_failure_propagates_and_leaves_nothing(self, cache):
        def broken(tmp_path):
            tmp_path.write_bytes(b"half a file")
            raise RuntimeError("encoder crashed")

        with pytest.raises(RenderError) as exc_info:
            cache.get_or_render(SOURCE, 30, 60, broken)
        assert "encoder crashed" in str(exc_info.value)
        assert exc_info.value.key == cache_key(SOURCE, 30, 60)
        assert _published(cache.cache_dir) == []

    def test_failure_is_retried_on_next_request(self, cache):
        def broken(tmp_path):
            raise RuntimeError("transient")

        with pytest.raises(RenderError):
            cache.get_or_render(SOURCE, 30, 60, broken)
        path = cache.get_or_render(SOURCE, 30, 60, RecordingRenderer())
        assert path.exists()
        assert cache.render_count == 2

    def test_empty_output_is_a_failure(self, cache):
        with pytest.raises(RenderError):
            cache.get_or_render(SOURCE, 30, 60, lambda tmp_path: None)
        assert _published(cache.cache_dir) == []

    def test_timeout_does_not_cancel_render(self, cache):
        render = RecordingRenderer(block=True)
        with pytest.raises(TimeoutError):
            cache.get_or_render(SOURCE, 30, 60, render, timeout=0.05)

        render.release.set()
        path = cache.get_or_render(SOURCE, 30, 60, render, timeout=5.0)
        assert path.read_bytes() == b"fake mp4 bytes"
        assert render.calls == 1

    def test_distinct_keys_render_independently(self, cache):
        render = RecordingRenderer()
        a = cache.get_or_render(SOURCE, 0, 30, render)
        b = cache.get_or_render(SOURCE, 30, 60, render)
        assert a != b
        assert render.calls == 2


class TestAsyncGetOrRender:

    def test_returns_published_path(self, cache):
        path = asyncio.run(cache.aget_or_render(SOURCE, 30, 60, RecordingRenderer()))
        assert path.read_bytes() == b"fake mp4 bytes"

    def test_cancelled_waiter_does_not_cancel_render(self, cache):
        render = RecordingRenderer(block=True)
        key = cache_key(SOURCE, 30, 60)

        async def scenario():
            task = asyncio.ensure_future(cache.aget_or_render(SOURCE, 30, 60, render))
            while not render.started.is_set():
                await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

            render.release.set()
            for _ in range(500):
                if cache.lookup(key) is not None and not cache.is_pending(key):
                    break
                await asyncio.sleep(0.01)
            # Let the worker's completion callback reach this loop before it closes
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        assert cache.lookup(key) is not None
        assert render.calls == 1

    def test_concurrent_async_callers_share_render(self, cache):
        render = RecordingRenderer(block=True)

        async def scenario():
            waiters = [
                asyncio.ensure_future(cache.aget_or_render(SOURCE, 30, 60, render))
                for _ in range(4)
            ]
            while not render.started.is_set():
                await asyncio.sleep(0.01)
            render.release.set()
            return await asyncio.gather(*waiters)

        paths = asyncio.run(scenario())
        assert len(set(paths)) == 1
        assert render.calls == 1


class TestEviction:

    def test_expired_artifacts_removed(self, cache):
        old = cache.get_or_render(SOURCE, 0, 30, RecordingRenderer())
        fresh = cache.get_or_render(SOURCE, 30, 60, RecordingRenderer())
        two_days_ago = time.time() - 2 * 24 * 60 * 60
        os.utime(old, (two_days_ago, two_days_ago))

        assert cache.evict_expired(24 * 60 * 60) == 1
        assert not old.exists()
        assert fresh.exists()

    def test_foreign_files_untouched(self, cache):
        stray = cache.cache_dir / "notes.mp4"
        stray.write_bytes(b"x")
        long_ago = time.time() - 10 * 24 * 60 * 60
        os.utime(stray, (long_ago, long_ago))
        assert cache.evict_expired(60) == 0
        assert stray.exists()

    def test_pending_keys_are_skipped(self, cache):
        render = RecordingRenderer(block=True)
        key = cache_key(SOURCE, 30, 60)
        # A stale artifact for a key that is being re-rendered right now
        stale = cache.path_for(key)
        t = threading.Thread(target=cache.get_or_render, args=(SOURCE, 30, 60, render))
        t.start()
        assert render.started.wait(timeout=5.0)
        stale.write_bytes(b"old")
        os.utime(stale, (0, 0))

        assert cache.evict_expired(60) == 0
        assert stale.exists()

        render.release.set()
        t.join(timeout=5.0)
