from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from clinic_cds.internal_core.config import load_config

MAX_TEXT_CHARS = load_config().CDS_MAX_TEXT_CHARS

NumericInput = Union[float, str, None]

RiskCategoryName = Literal["very_high", "high", "moderate", "low"]
PreventionCategoryName = Literal["primary_prevention", "secondary_prevention"]


class NoteTextRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = Field(max_length=MAX_TEXT_CHARS)


class RiskProfileInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ascvd: bool = False
    diabetes: bool = False
    dm_target_organ_damage: bool = False
    dm_major_risk_factor_count: Union[int, str, None] = None
    t1dm_long_duration: bool = False
    egfr: NumericInput = None
    sbp: NumericInput = None
    ldl: NumericInput = None
    familial_hypercholesterolemia: bool = False
    score2_risk_category: Optional[str] = None
    hypertension: bool = False
    smoking: bool = False
    family_history_premature_ascvd: bool = False
    obesity: bool = False
    metabolic_syndrome: bool = False
    lpa: NumericInput = None


class RiskOverridesInput(BaseModel):
    """Profile fields that free text cannot supply."""

    model_config = ConfigDict(extra="forbid")

    egfr: NumericInput = None
    sbp: NumericInput = None
    dm_target_organ_damage: Optional[bool] = None
    dm_major_risk_factor_count: Union[int, str, None] = None
    t1dm_long_duration: Optional[bool] = None
    familial_hypercholesterolemia: Optional[bool] = None
    score2_risk_category: Optional[str] = None
    obesity: Optional[bool] = None
    metabolic_syndrome: Optional[bool] = None
    lpa: NumericInput = None


class AnnotateRequest(NoteTextRequest):
    include_trace: Optional[bool] = None
    risk_overrides: Optional[RiskOverridesInput] = None


class EligibilityInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age: NumericInput = None
    sex: Optional[str] = None
    ldl: NumericInput = None
    has_acs: bool = False
    has_pci: bool = False
    has_cabg: bool = False
    has_htn: bool = False
    on_anti_htn_meds: bool = False
    has_dm: bool = False
    current_smoker: bool = False
    fh_premature_ascvd: bool = False


class PatientStateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age: Optional[float] = None
    sex: Optional[Literal["M", "F"]] = None
    ldl: Optional[float] = None
    has_acs: bool = False
    has_pci: bool = False
    has_cabg: bool = False
    has_htn: bool = False
    on_anti_htn_meds: bool = False
    has_dm: bool = False
    current_smoker: bool = False
    fh_premature_ascvd: bool = False


class ExtractionTraceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age_source: Optional[str] = None
    sex_source: Optional[str] = None
    ldl_label: Optional[str] = None
    ldl_match: Optional[str] = None
    flag_matches: Dict[str, List[str]] = Field(default_factory=dict)
    text_chars: int = 0


class ExtractResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: PatientStateModel
    trace: ExtractionTraceModel


class LipidTargetModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ldl_mgdl: Optional[float] = None
    percent_reduction: Optional[float] = None
    evidence_id: Optional[str] = None


class RiskAssessmentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: RiskCategoryName
    reasons: List[str] = Field(default_factory=list)
    ldl_target: LipidTargetModel
    rule: str


class RiskFactorMatchModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    label: str


class EligibilityResultModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: PreventionCategoryName
    ldl_mgdl: Optional[float] = None
    risk_factor_count: int
    matched_risk_factors: List[RiskFactorMatchModel] = Field(default_factory=list)
    eligible: bool
    threshold_mgdl: Optional[float] = None
    goal_mgdl: Optional[float] = None
    rationale: List[str] = Field(default_factory=list)
    reminders: List[str] = Field(default_factory=list)
    evidence_id: Optional[str] = None


class AnnotateResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: PatientStateModel
    trace: Optional[ExtractionTraceModel] = None
    lipid_topic: bool
    risk: RiskAssessmentModel
    eligibility: EligibilityResultModel


class EvidenceReferenceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    kind: str
    guideline: str
    year: Optional[int] = None
    section: Optional[str] = None
    applies_to: Optional[str] = None
    summary: Optional[str] = None
    quote: Optional[str] = None
    note: Optional[str] = None
