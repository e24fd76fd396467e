"""Exception types for the shorts pipeline.

WHY: Callers (CLI, a web backend, tests) must tell recoverable conditions
from fatal ones without parsing messages. Only a few situations are fatal;
everything else degrades gracefully (skip a cue, fall back to synthetic
segments, return no shorts, clamp a style).

RULES:
- Every exception derives from ShortsError.
- Fatal errors carry the operation name and the identifiers needed to build
  a user-facing message.
- MalformedCueError is raised by parsers and caught by the normalizer;
  it never escapes a whole-transcript operation.
"""

from __future__ import annotations

from typing import Any


class ShortsError(Exception):
    """Base class for all vertical_shorts errors."""


class MalformedCueError(ShortsError, ValueError):
    """A single caption cue has unusable timing or text."""


class FallbackUnavailableError(ShortsError):
    """No usable transcript and no known duration to synthesize one.

    WHY: Fallback synthesis needs the video duration. Without a transcript
    and without a duration there is nothing to clip, which is the one
    generation failure the caller must surface.

    RULES:
    - operation: name of the failing operation (e.g. "normalize_cues")
    - identifiers: source id, duration, cue count... whatever was known
    """

    def __init__(self, operation: str, identifiers: dict[str, Any] | None = None) -> None:
        self.operation = operation
        self.identifiers = dict(identifiers or {})
        details = ", ".join("{}={!r}".format(k, v) for k, v in self.identifiers.items())
        super().__init__(
            "{}: no usable transcript and no known duration for fallback ({})".format(
                operation, details or "no identifiers"
            )
        )


class ProcessingBudgetExceeded(ShortsError):
    """Input is larger than the configured processing budget.

    Raised before the quadratic window search starts, so pathological
    transcripts fail fast instead of running unbounded.
    """

    def __init__(self, operation: str, limit: int, actual: int) -> None:
        self.operation = operation
        self.limit = limit
        self.actual = actual
        super().__init__(
            "{}: {} segments exceeds the processing budget of {}".format(
                operation, actual, limit
            )
        )


class RenderError(ShortsError):
    """The render collaborator failed to produce a clip artifact."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__("Render for cache key {} failed: {}".format(key, message))


class CaptionTrackError(ShortsError):
    """Fetching a caption track over HTTP failed.

    RULES:
    - status_code is None for transport-level failures
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        prefix = "HTTP {}".format(status_code) if status_code is not None else "transport error"
        super().__init__("Caption track fetch failed ({}): {}".format(prefix, message))
