"""
Free-text extraction boundary.

Design intent:
- Turn a clinic narrative into an immutable PatientState plus an audit trace.
- Fail soft: unmatched fields stay unknown, flags stay False.
"""
from __future__ import annotations

from .extractor import extract_patient_state, mentions_lipid_topic
from .models import ExtractionResult, ExtractionTrace, PatientState

__all__ = [
    "ExtractionResult",
    "ExtractionTrace",
    "PatientState",
    "extract_patient_state",
    "mentions_lipid_topic",
]
