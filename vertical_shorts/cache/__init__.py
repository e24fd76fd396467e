"""Rendered-clip cache: content-addressed keys and de-duplicated renders."""

from vertical_shorts.cache.clip_cache import ClipCache, RenderFn, cache_key

__all__ = ["ClipCache", "RenderFn", "cache_key"]
