"""
Evidence reference boundary.

Design intent:
- Keep citation metadata in one immutable table loaded at startup.
- Let decision layers cite by id without owning citation text.
"""
from __future__ import annotations

from .table import (
    EvidenceReference,
    EvidenceTable,
    EvidenceTableError,
    default_evidence_table,
    load_evidence_table,
)

__all__ = [
    "EvidenceReference",
    "EvidenceTable",
    "EvidenceTableError",
    "default_evidence_table",
    "load_evidence_table",
]
