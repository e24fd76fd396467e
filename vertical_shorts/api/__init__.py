"""Caption track client package: async HTTP access to caption tracks.

RULES:
- All HTTP calls go through CaptionTrackClient (no direct httpx usage elsewhere)
"""

from vertical_shorts.api.client import CaptionTrackClient

__all__ = ["CaptionTrackClient"]
