"""Vertical Shorts: pick short vertical clips from a long video's transcript.

WHY: Long-form videos hide a handful of moments that work as 30 to 60
second vertical clips. Finding them by hand means scrubbing the whole
video. The caption track already says what is being said and when, which
is enough to rank candidate windows with simple engagement heuristics.

HOW: Three-stage pipeline: ingest (caption file or HTTP fetch), select
(normalize, search windows, score, pick non-overlapping clips), format
(shorts JSON, per-clip SRT/ASS captions via the short_captions library).
Rendered clips are de-duplicated by the content-addressed ClipCache.

RULES:
- The IR in core/ir.py is the stable contract between stages
- Adding an output format = one new formatter module, no core changes
- Nothing in core/ does I/O
"""

__version__ = "0.1.0"
