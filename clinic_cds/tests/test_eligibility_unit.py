from clinic_cds.eligibility.reimbursement import (
    DOCUMENTATION_REMINDER,
    count_risk_factors,
    determine_prevention_category,
    evaluate_eligibility,
    evaluate_eligibility_from_text,
    parse_lipid_value,
)
from clinic_cds.extraction.models import PatientState


def test_primary_prevention_two_risk_factors_meets_130() -> None:
    result = evaluate_eligibility(PatientState(age=47, sex="M", has_htn=True, ldl=135))
    assert result.category == "primary_prevention"
    assert result.risk_factor_count == 2
    assert [item.id for item in result.matched_risk_factors] == ["NHI_RF_AGE_MALE", "NHI_RF_HYPERTENSION"]
    assert result.eligible is True
    assert result.threshold_mgdl == 130
    assert result.goal_mgdl is None
    assert result.evidence_id == "NHI_LDL_PRIMARY_PREV_RF_GTE2"
    assert result.reminders == (DOCUMENTATION_REMINDER,)


def test_primary_prevention_single_risk_factor_needs_160() -> None:
    result = evaluate_eligibility(PatientState(has_htn=True, ldl=150))
    assert result.risk_factor_count == 1
    assert result.threshold_mgdl == 160
    assert result.eligible is False
    assert result.evidence_id == "NHI_LDL_PRIMARY_PREV_RF_EQ1"
    assert "not eligible" in result.rationale[0]


def test_primary_prevention_without_risk_factors_is_undefined() -> None:
    result = evaluate_eligibility({"ldl": 220})
    assert result.risk_factor_count == 0
    assert result.threshold_mgdl is None
    assert result.eligible is False
    assert "intentionally undefined" in result.rationale[0]
    assert result.evidence_id == "NHI_LDL_PRIMARY_PREV_RF_EQ0"
    assert result.reminders == (DOCUMENTATION_REMINDER,)


def test_primary_threshold_does_not_increase_with_more_risk_factors() -> None:
    one = evaluate_eligibility(PatientState(current_smoker=True, ldl=100))
    two = evaluate_eligibility(PatientState(current_smoker=True, has_dm=True, ldl=100))
    assert two.threshold_mgdl <= one.threshold_mgdl


def test_secondary_prevention_threshold_goal_and_reminders() -> None:
    eligible = evaluate_eligibility(PatientState(has_acs=True, ldl=70))
    assert eligible.category == "secondary_prevention"
    assert eligible.eligible is True
    assert eligible.threshold_mgdl == 70
    assert eligible.goal_mgdl == 70
    assert eligible.evidence_id == "NHI_LDL_SEC_PREV_ACS_OR_CAD_1080201"
    assert len(eligible.reminders) == 4
    assert eligible.reminders[-1] == DOCUMENTATION_REMINDER

    below = evaluate_eligibility(PatientState(has_cabg=True, ldl=65))
    assert below.eligible is False
    assert below.threshold_mgdl == 70
    assert "LDL <70" in below.rationale[0]


def test_missing_ldl_is_reported_not_raised() -> None:
    result = evaluate_eligibility(PatientState(age=60, sex="F", has_dm=True))
    assert result.eligible is False
    assert result.threshold_mgdl is None
    assert result.goal_mgdl is None
    assert result.reminders == ()
    assert result.evidence_id is None
    assert "LDL value missing" in result.rationale[0]
    assert result.risk_factor_count == 2


def test_mapping_input_is_coerced() -> None:
    result = evaluate_eligibility(
        {"age": "47", "sex": "male", "has_htn": "yes", "ldl": "LDL-C: 135 mg/dL"}
    )
    assert result.ldl_mgdl == 135
    assert result.eligible is True
    assert result.threshold_mgdl == 130


def test_count_risk_factors_order_and_age_cutoffs() -> None:
    matched = count_risk_factors(
        PatientState(
            age=55,
            sex="F",
            on_anti_htn_meds=True,
            has_dm=True,
            current_smoker=True,
            fh_premature_ascvd=True,
        )
    )
    assert [item.id for item in matched] == [
        "NHI_RF_AGE_FEMALE",
        "NHI_RF_HYPERTENSION",
        "NHI_RF_DIABETES",
        "NHI_RF_SMOKING",
        "NHI_RF_FAMILY_HISTORY",
    ]
    assert count_risk_factors(PatientState(age=54, sex="F")) == ()
    assert count_risk_factors(PatientState(age=44, sex="M")) == ()
    assert count_risk_factors(PatientState(age=80)) == ()
    assert count_risk_factors({"age": 45, "sex": "M"})[0].label == "Age male >=45"


def test_determine_prevention_category() -> None:
    assert determine_prevention_category(PatientState(has_pci=True)) == "secondary_prevention"
    assert determine_prevention_category({"has_htn": True}) == "primary_prevention"


def test_parse_lipid_value() -> None:
    assert parse_lipid_value(92) == 92
    assert parse_lipid_value("LDL 1,30 mg/dL") == 130
    assert parse_lipid_value("n/a") is None
    assert parse_lipid_value(float("nan")) is None
    assert parse_lipid_value(None) is None


def test_evaluate_eligibility_from_text() -> None:
    result = evaluate_eligibility_from_text("65-year-old male, status post coronary stent, LDL 92")
    assert result.category == "secondary_prevention"
    assert result.ldl_mgdl == 92
    assert result.eligible is True


def test_evaluation_is_idempotent() -> None:
    state = PatientState(age=50, sex="M", has_dm=True, ldl=131)
    assert evaluate_eligibility(state) == evaluate_eligibility(state)
