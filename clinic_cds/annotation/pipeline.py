"""
One-call annotation of a clinic note: text -> state -> {risk, eligibility}.

Design intent:
- Compose the pure layers; own no decision logic.
- Keep the extraction trace optional so callers can drop it from responses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from clinic_cds.eligibility.reimbursement import EligibilityResult, evaluate_eligibility
from clinic_cds.evidence.table import EvidenceTable
from clinic_cds.extraction.extractor import extract_patient_state, mentions_lipid_topic
from clinic_cds.extraction.models import ExtractionTrace, PatientState
from clinic_cds.risk.stratify import RiskAssessment, classify_risk, risk_profile_from_state


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Annotation:
    state: PatientState
    trace: ExtractionTrace | None
    lipid_topic: bool
    risk: RiskAssessment
    eligibility: EligibilityResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "trace": self.trace.to_dict() if self.trace is not None else None,
            "lipid_topic": self.lipid_topic,
            "risk": self.risk.to_dict(),
            "eligibility": self.eligibility.to_dict(),
        }


def annotate_text(
    text: str | None,
    *,
    evidence: EvidenceTable | None = None,
    include_trace: bool = True,
    risk_overrides: Mapping[str, Any] | None = None,
) -> Annotation:
    """
    risk_overrides carries profile fields free text cannot supply (eGFR, SBP,
    SCORE2, diabetes complications); they win over extracted values.
    """
    extraction = extract_patient_state(text)
    profile = risk_profile_from_state(extraction.state, **dict(risk_overrides or {}))
    risk = classify_risk(profile, evidence=evidence)
    eligibility = evaluate_eligibility(extraction.state, evidence=evidence)
    lipid_topic = mentions_lipid_topic(text)

    logger.debug(
        "note_annotated chars=%s lipid_topic=%s risk=%s eligible=%s",
        extraction.trace.text_chars,
        lipid_topic,
        risk.category,
        eligibility.eligible,
    )
    return Annotation(
        state=extraction.state,
        trace=extraction.trace if include_trace else None,
        lipid_topic=lipid_topic,
        risk=risk,
        eligibility=eligibility,
    )
