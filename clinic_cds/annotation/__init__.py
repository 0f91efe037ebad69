"""
Note annotation boundary.

Design intent:
- Single entry point used by the API and the command-line script.
"""
from __future__ import annotations

from .pipeline import Annotation, annotate_text

__all__ = ["Annotation", "annotate_text"]
