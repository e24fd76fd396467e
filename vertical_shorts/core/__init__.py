"""Transcript normalization, clip search, scoring and selection.

WHY: The core package is the pure heart of the shorts generator. It takes
caption cues and returns ranked, non-overlapping clip records, with no
I/O and no shared state, so it can run inside any request handler.

HOW: ir.py defines the records, vtt.py parses WebVTT tracks into cues,
normalizer.py cleans and de-duplicates cues, windows.py enumerates
candidate windows, scoring.py ranks them, selector.py picks the final set,
pipeline.py runs the chain.

RULES:
- IR dataclasses are the contract between stages
- No module here touches the network or the filesystem
- Heuristic constants come from vertical_shorts.config, not literals
"""
