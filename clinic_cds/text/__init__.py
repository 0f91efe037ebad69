"""
Text canonicalization boundary.

Design intent:
- Give every matcher the same lower-cased, punctuation-unified view of a note.
"""
from __future__ import annotations

from .normalizer import normalize_text

__all__ = ["normalize_text"]
