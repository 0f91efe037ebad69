from clinic_cds.annotation.pipeline import annotate_text
from clinic_cds.evidence.table import default_evidence_table


def test_annotate_secondary_prevention_note() -> None:
    annotation = annotate_text(
        "65-year-old male, status post coronary stent, LDL 92",
        evidence=default_evidence_table(),
    )
    assert annotation.state.has_pci is True
    assert annotation.lipid_topic is True
    assert annotation.risk.category == "very_high"
    assert annotation.risk.ldl_target.ldl_mgdl == 55
    assert annotation.eligibility.category == "secondary_prevention"
    assert annotation.eligibility.eligible is True
    assert annotation.trace is not None


def test_annotate_can_drop_trace() -> None:
    annotation = annotate_text("47 y/o M with HTN, LDL-C 135", include_trace=False)
    payload = annotation.to_dict()
    assert payload["trace"] is None
    assert set(payload) == {"state", "trace", "lipid_topic", "risk", "eligibility"}
    assert payload["risk"]["category"] == "moderate"
    assert payload["eligibility"]["threshold_mgdl"] == 130
    assert payload["eligibility"]["matched_risk_factors"][0] == {
        "id": "NHI_RF_AGE_MALE",
        "label": "Age male >=45",
    }


def test_annotate_applies_risk_overrides() -> None:
    annotation = annotate_text("54 y/o m, LDL 100", risk_overrides={"egfr": 25})
    assert annotation.risk.category == "very_high"
    assert annotation.risk.ldl_target.evidence_id == "ESC2025_LDL_CKD_SEVERE"


def test_annotate_without_lipid_value() -> None:
    annotation = annotate_text("Follow-up for knee pain")
    assert annotation.lipid_topic is False
    assert annotation.risk.category == "low"
    assert annotation.eligibility.eligible is False
    assert "LDL value missing" in annotation.eligibility.rationale[0]
