"""
Taiwan NHI lipid-lowering drug reimbursement check.

Design intent:
- Tiered numeric LDL-C thresholds keyed on prevention category and risk-factor count.
- Report missing inputs in the rationale instead of raising.
- Cite the applicable reimbursement rule by evidence id only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from clinic_cds.evidence.table import EvidenceTable
from clinic_cds.extraction.extractor import extract_patient_state
from clinic_cds.extraction.models import PatientState
from clinic_cds.text.numbers import first_number_in


logger = logging.getLogger(__name__)

PreventionCategory = Literal["primary_prevention", "secondary_prevention"]

SECONDARY_THRESHOLD_MGDL = 70.0
SECONDARY_GOAL_MGDL = 70.0
PRIMARY_MULTI_RF_THRESHOLD_MGDL = 130.0
PRIMARY_SINGLE_RF_THRESHOLD_MGDL = 160.0
MALE_RISK_AGE = 45
FEMALE_RISK_AGE = 55

SECONDARY_REMINDERS: tuple[str, ...] = (
    "Follow-up lipids: Year 1 every 3-6 months; Year >=2 every 6-12 months.",
    "Document safety monitoring: liver function abnormality and rhabdomyolysis.",
    "Lifestyle modification may be done in parallel with drug therapy (no mandatory lifestyle-only trial first).",
)
DOCUMENTATION_REMINDER = (
    "Ensure risk factors are explicitly documented (HTN/DM/smoking/age/FH) for auditability."
)


@dataclass(frozen=True)
class RiskFactorMatch:
    id: str
    label: str


@dataclass(frozen=True)
class EligibilityResult:
    category: PreventionCategory
    ldl_mgdl: float | None
    risk_factor_count: int
    matched_risk_factors: tuple[RiskFactorMatch, ...]
    eligible: bool
    threshold_mgdl: float | None
    goal_mgdl: float | None
    rationale: tuple[str, ...]
    reminders: tuple[str, ...]
    evidence_id: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "ldl_mgdl": self.ldl_mgdl,
            "risk_factor_count": self.risk_factor_count,
            "matched_risk_factors": [
                {"id": item.id, "label": item.label} for item in self.matched_risk_factors
            ],
            "eligible": self.eligible,
            "threshold_mgdl": self.threshold_mgdl,
            "goal_mgdl": self.goal_mgdl,
            "rationale": list(self.rationale),
            "reminders": list(self.reminders),
            "evidence_id": self.evidence_id,
        }


def parse_lipid_value(value: Any) -> float | None:
    return first_number_in(value)


def count_risk_factors(patient: PatientState | Mapping[str, Any]) -> tuple[RiskFactorMatch, ...]:
    """
    Count NHI primary-prevention risk factors.

    Age counts only when both age and sex are known; hypertension is satisfied by
    either a diagnosis or anti-hypertensive medication.
    """
    state = _as_state(patient)
    matched: list[RiskFactorMatch] = []
    if state.age is not None and state.sex == "M" and state.age >= MALE_RISK_AGE:
        matched.append(RiskFactorMatch("NHI_RF_AGE_MALE", "Age male >=45"))
    if state.age is not None and state.sex == "F" and state.age >= FEMALE_RISK_AGE:
        matched.append(RiskFactorMatch("NHI_RF_AGE_FEMALE", "Age female >=55"))
    if state.has_htn or state.on_anti_htn_meds:
        matched.append(RiskFactorMatch("NHI_RF_HYPERTENSION", "Hypertension"))
    if state.has_dm:
        matched.append(RiskFactorMatch("NHI_RF_DIABETES", "Diabetes"))
    if state.current_smoker:
        matched.append(RiskFactorMatch("NHI_RF_SMOKING", "Current smoking"))
    if state.fh_premature_ascvd:
        matched.append(RiskFactorMatch("NHI_RF_FAMILY_HISTORY", "FH premature ASCVD"))
    return tuple(matched)


def determine_prevention_category(patient: PatientState | Mapping[str, Any]) -> PreventionCategory:
    state = _as_state(patient)
    if state.has_acs or state.has_pci or state.has_cabg:
        return "secondary_prevention"
    return "primary_prevention"


def evaluate_eligibility(
    patient: PatientState | Mapping[str, Any],
    *,
    evidence: EvidenceTable | None = None,
) -> EligibilityResult:
    state = _as_state(patient)
    ldl = parse_lipid_value(state.ldl)
    factors = count_risk_factors(state)
    category = determine_prevention_category(state)
    base: dict[str, Any] = {
        "category": category,
        "ldl_mgdl": ldl,
        "risk_factor_count": len(factors),
        "matched_risk_factors": factors,
    }

    if ldl is None:
        logger.debug("eligibility_evaluated category=%s outcome=missing_ldl", category)
        return EligibilityResult(
            **base,
            eligible=False,
            threshold_mgdl=None,
            goal_mgdl=None,
            rationale=("LDL value missing/invalid -> cannot determine NHI eligibility.",),
            reminders=(),
            evidence_id=None,
        )

    if category == "secondary_prevention":
        eligible = ldl >= SECONDARY_THRESHOLD_MGDL
        rationale = (
            "Secondary prevention (ACS/PCI/CABG) + LDL >=70 -> eligible per NHI 2.6.1 logic."
            if eligible
            else "Secondary prevention present but LDL <70 -> does not meet NHI start threshold (2.6.1)."
        )
        result = EligibilityResult(
            **base,
            eligible=eligible,
            threshold_mgdl=SECONDARY_THRESHOLD_MGDL,
            goal_mgdl=SECONDARY_GOAL_MGDL,
            rationale=(rationale,),
            reminders=SECONDARY_REMINDERS + (DOCUMENTATION_REMINDER,),
            evidence_id="NHI_LDL_SEC_PREV_ACS_OR_CAD_1080201",
        )
    elif len(factors) >= 2:
        eligible = ldl >= PRIMARY_MULTI_RF_THRESHOLD_MGDL
        rationale = (
            "Primary prevention + >=2 risk factors + LDL >=130 -> eligible (operational NHI rule)."
            if eligible
            else "Primary prevention + >=2 risk factors but LDL <130 -> not eligible by threshold."
        )
        result = _primary_result(
            base, eligible, PRIMARY_MULTI_RF_THRESHOLD_MGDL, rationale, "NHI_LDL_PRIMARY_PREV_RF_GTE2"
        )
    elif len(factors) == 1:
        eligible = ldl >= PRIMARY_SINGLE_RF_THRESHOLD_MGDL
        rationale = (
            "Primary prevention + 1 risk factor + LDL >=160 -> eligible (operational NHI rule)."
            if eligible
            else "Primary prevention + 1 risk factor but LDL <160 -> not eligible by threshold."
        )
        result = _primary_result(
            base, eligible, PRIMARY_SINGLE_RF_THRESHOLD_MGDL, rationale, "NHI_LDL_PRIMARY_PREV_RF_EQ1"
        )
    else:
        result = _primary_result(
            base,
            False,
            None,
            "Primary prevention + 0 risk factors -> threshold intentionally undefined by this rule set.",
            "NHI_LDL_PRIMARY_PREV_RF_EQ0",
        )

    if evidence is not None and result.evidence_id and result.evidence_id not in evidence:
        logger.warning("eligibility_unknown_evidence evidence_id=%s", result.evidence_id)
    logger.debug(
        "eligibility_evaluated category=%s risk_factors=%s eligible=%s evidence_id=%s",
        result.category,
        result.risk_factor_count,
        result.eligible,
        result.evidence_id,
    )
    return result


def evaluate_eligibility_from_text(
    text: str | None,
    *,
    evidence: EvidenceTable | None = None,
) -> EligibilityResult:
    return evaluate_eligibility(extract_patient_state(text).state, evidence=evidence)


def _primary_result(
    base: dict[str, Any],
    eligible: bool,
    threshold: float | None,
    rationale: str,
    evidence_id: str,
) -> EligibilityResult:
    return EligibilityResult(
        **base,
        eligible=eligible,
        threshold_mgdl=threshold,
        goal_mgdl=None,
        rationale=(rationale,),
        reminders=(DOCUMENTATION_REMINDER,),
        evidence_id=evidence_id,
    )


def _as_state(patient: PatientState | Mapping[str, Any]) -> PatientState:
    if isinstance(patient, PatientState):
        return patient
    return PatientState.from_mapping(patient)
