"""
Cardiovascular risk stratification as an ordered rule ladder.

Design intent:
- Evaluate rules top-down; the first rule that applies fixes the category.
- Keep every rule's reason text and LDL-C target citation next to its predicate.
- A single non-specific risk factor (e.g. isolated hypertension) never escalates past moderate.
- Lp(a) is a treatment-stage risk enhancer and is never read here.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Literal, Mapping, Sequence

from clinic_cds.evidence.table import EvidenceTable
from clinic_cds.extraction.models import PatientState
from clinic_cds.text.numbers import coerce_flag, coerce_number


logger = logging.getLogger(__name__)

RiskCategory = Literal["very_high", "high", "moderate", "low"]

RISK_CATEGORIES: tuple[RiskCategory, ...] = ("very_high", "high", "moderate", "low")

SEVERE_CKD_EGFR = 30.0
MODERATE_CKD_EGFR_MAX = 59.0
MARKED_SBP = 180.0
MARKED_LDL = 190.0
DM_VERY_HIGH_MAJOR_RF = 3


@dataclass(frozen=True)
class RiskProfile:
    ascvd: bool = False
    diabetes: bool = False
    dm_target_organ_damage: bool = False
    dm_major_risk_factor_count: int | None = None
    t1dm_long_duration: bool = False
    egfr: float | None = None
    sbp: float | None = None
    ldl: float | None = None
    familial_hypercholesterolemia: bool = False
    score2_risk_category: str | None = None
    hypertension: bool = False
    smoking: bool = False
    family_history_premature_ascvd: bool = False
    obesity: bool = False
    metabolic_syndrome: bool = False
    lpa: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RiskProfile":
        values: dict[str, Any] = {}
        for item in fields(cls):
            if item.name not in data:
                continue
            raw = data[item.name]
            if item.name in {"egfr", "sbp", "ldl", "lpa"}:
                values[item.name] = coerce_number(raw)
            elif item.name == "dm_major_risk_factor_count":
                count = coerce_number(raw)
                values[item.name] = int(count) if count is not None else None
            elif item.name == "score2_risk_category":
                values[item.name] = _normalize_score2(raw)
            else:
                values[item.name] = coerce_flag(raw)
        return cls(**values)


@dataclass(frozen=True)
class LipidTarget:
    ldl_mgdl: float | None = None
    percent_reduction: float | None = None
    evidence_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


NO_NUMERIC_TARGET = LipidTarget()


@dataclass(frozen=True)
class RiskAssessment:
    category: RiskCategory
    reasons: tuple[str, ...]
    ldl_target: LipidTarget
    rule: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "reasons": list(self.reasons),
            "ldl_target": self.ldl_target.to_dict(),
            "rule": self.rule,
        }


@dataclass(frozen=True)
class _RiskFacts:
    """Profile values after numeric coercion; unusable numbers become None."""

    ascvd: bool
    diabetes: bool
    dm_target_organ_damage: bool
    dm_major_risk_factor_count: float | None
    t1dm_long_duration: bool
    egfr: float | None
    sbp: float | None
    ldl: float | None
    familial_hypercholesterolemia: bool
    score2: str | None
    has_risk_enhancer: bool


@dataclass(frozen=True)
class RiskRule:
    name: str
    category: RiskCategory
    applies: Callable[[_RiskFacts], bool]
    reasons: Callable[[_RiskFacts], tuple[str, ...]]
    target: LipidTarget


def _fixed(*reasons: str) -> Callable[[_RiskFacts], tuple[str, ...]]:
    return lambda _facts: reasons


def _severe_ckd(facts: _RiskFacts) -> bool:
    return facts.egfr is not None and facts.egfr < SEVERE_CKD_EGFR


def _moderate_ckd(facts: _RiskFacts) -> bool:
    return facts.egfr is not None and SEVERE_CKD_EGFR <= facts.egfr <= MODERATE_CKD_EGFR_MAX


def _marked_sbp(facts: _RiskFacts) -> bool:
    return facts.sbp is not None and facts.sbp >= MARKED_SBP


def _marked_ldl(facts: _RiskFacts) -> bool:
    return facts.ldl is not None and facts.ldl >= MARKED_LDL


def _diabetes_very_high(facts: _RiskFacts) -> bool:
    if not facts.diabetes:
        return False
    many_rf = (
        facts.dm_major_risk_factor_count is not None
        and facts.dm_major_risk_factor_count >= DM_VERY_HIGH_MAJOR_RF
    )
    return facts.dm_target_organ_damage or many_rf or facts.t1dm_long_duration


def _marked_single_factor_reasons(facts: _RiskFacts) -> tuple[str, ...]:
    out: list[str] = []
    if _marked_sbp(facts):
        out.append("Markedly elevated SBP (>=180 mmHg) -> high risk.")
    if _marked_ldl(facts):
        out.append("Markedly elevated LDL-C (>=190 mg/dL) -> high risk.")
    return tuple(out)


def _moderate_reasons(facts: _RiskFacts) -> tuple[str, ...]:
    out: list[str] = []
    if facts.familial_hypercholesterolemia:
        out.append("Possible familial hypercholesterolemia noted (needs confirmation).")
    out.append(
        "No very-high/high ESC features detected -> moderate risk by default; "
        "consider lifetime risk and shared decision-making."
    )
    return tuple(out)


RISK_LADDER: tuple[RiskRule, ...] = (
    RiskRule(
        name="established_ascvd",
        category="very_high",
        applies=lambda facts: facts.ascvd,
        reasons=_fixed("Established ASCVD -> very-high risk."),
        target=LipidTarget(55, 50, "ESC2025_LDL_VERY_HIGH_RISK"),
    ),
    RiskRule(
        name="severe_ckd",
        category="very_high",
        applies=_severe_ckd,
        reasons=_fixed("Severe CKD (eGFR <30) -> very-high risk."),
        target=LipidTarget(55, 50, "ESC2025_LDL_CKD_SEVERE"),
    ),
    RiskRule(
        name="diabetes_very_high",
        category="very_high",
        applies=_diabetes_very_high,
        reasons=_fixed(
            "Diabetes with target organ damage or >=3 major risk factors "
            "or long-duration T1DM -> very-high risk."
        ),
        target=LipidTarget(55, 50, "ESC2025_LDL_DM_VERY_HIGH"),
    ),
    RiskRule(
        name="score2_very_high",
        category="very_high",
        applies=lambda facts: facts.score2 == "very_high",
        reasons=_fixed("Caller-provided SCORE2 category = very_high."),
        target=LipidTarget(55, 50, "ESC2025_LDL_VERY_HIGH_RISK"),
    ),
    RiskRule(
        name="moderate_ckd",
        category="high",
        applies=_moderate_ckd,
        reasons=_fixed("Moderate CKD (eGFR 30-59) -> high risk."),
        target=LipidTarget(70, 50, "ESC2025_LDL_CKD_MODERATE"),
    ),
    RiskRule(
        name="marked_single_risk_factor",
        category="high",
        applies=lambda facts: _marked_sbp(facts) or _marked_ldl(facts),
        reasons=_marked_single_factor_reasons,
        target=LipidTarget(70, 50, "ESC2025_LDL_HIGH_RISK"),
    ),
    RiskRule(
        # Placeholder until a guideline-exact diabetes rule is available.
        name="diabetes_default_high",
        category="high",
        applies=lambda facts: facts.diabetes,
        reasons=_fixed(
            "Diabetes without very-high features -> high risk "
            "(engineering default, not a verbatim guideline rule; refine against evidence text)."
        ),
        target=LipidTarget(70, 50, "ESC2025_LDL_DM_HIGH"),
    ),
    RiskRule(
        name="score2_high",
        category="high",
        applies=lambda facts: facts.score2 == "high",
        reasons=_fixed("Caller-provided SCORE2 category = high."),
        target=LipidTarget(70, 50, "ESC2025_LDL_HIGH_RISK"),
    ),
    RiskRule(
        name="risk_enhancer_moderate",
        category="moderate",
        applies=lambda facts: facts.has_risk_enhancer or facts.familial_hypercholesterolemia,
        reasons=_moderate_reasons,
        target=NO_NUMERIC_TARGET,
    ),
    RiskRule(
        name="default_low",
        category="low",
        applies=lambda _facts: True,
        reasons=_fixed("No major ESC very-high/high features detected -> low risk by default."),
        target=NO_NUMERIC_TARGET,
    ),
)


def classify_risk(
    profile: RiskProfile | Mapping[str, Any],
    *,
    evidence: EvidenceTable | None = None,
    ladder: Sequence[RiskRule] = RISK_LADDER,
) -> RiskAssessment:
    if not isinstance(profile, RiskProfile):
        profile = RiskProfile.from_mapping(profile)
    facts = _facts(profile)

    rule = next((item for item in ladder if item.applies(facts)), RISK_LADDER[-1])
    if evidence is not None and rule.target.evidence_id and rule.target.evidence_id not in evidence:
        logger.warning("risk_rule_unknown_evidence rule=%s evidence_id=%s", rule.name, rule.target.evidence_id)

    logger.debug("risk_classified rule=%s category=%s", rule.name, rule.category)
    return RiskAssessment(
        category=rule.category,
        reasons=tuple(rule.reasons(facts)),
        ldl_target=rule.target,
        rule=rule.name,
    )


def risk_profile_from_state(state: PatientState, **overrides: Any) -> RiskProfile:
    """
    Map an extracted PatientState onto the classifier's input.

    Kidney function, SBP, diabetes complications and SCORE2 are not recovered from
    free text; callers supply them through overrides.
    """
    base: dict[str, Any] = {
        "ascvd": state.has_acs or state.has_pci or state.has_cabg,
        "diabetes": state.has_dm,
        "ldl": state.ldl,
        "hypertension": state.has_htn or state.on_anti_htn_meds,
        "smoking": state.current_smoker,
        "family_history_premature_ascvd": state.fh_premature_ascvd,
    }
    base.update(overrides)
    return RiskProfile.from_mapping(base)


def _facts(profile: RiskProfile) -> _RiskFacts:
    return _RiskFacts(
        ascvd=bool(profile.ascvd),
        diabetes=bool(profile.diabetes),
        dm_target_organ_damage=bool(profile.dm_target_organ_damage),
        dm_major_risk_factor_count=coerce_number(profile.dm_major_risk_factor_count),
        t1dm_long_duration=bool(profile.t1dm_long_duration),
        egfr=coerce_number(profile.egfr),
        sbp=coerce_number(profile.sbp),
        ldl=coerce_number(profile.ldl),
        familial_hypercholesterolemia=bool(profile.familial_hypercholesterolemia),
        score2=_normalize_score2(profile.score2_risk_category),
        has_risk_enhancer=any(
            (
                profile.hypertension,
                profile.smoking,
                profile.family_history_premature_ascvd,
                profile.obesity,
                profile.metabolic_syndrome,
            )
        ),
    )


def _normalize_score2(value: Any) -> str | None:
    raw = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
    return raw if raw in RISK_CATEGORIES else None
