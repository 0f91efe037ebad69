import json

import pytest

from clinic_cds.evidence.table import (
    EvidenceTableError,
    default_evidence_table,
    load_evidence_table,
    parse_evidence_payload,
)


def _write(tmp_path, payload) -> str:
    path = tmp_path / "evidence.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_default_table_contains_reimbursement_and_target_ids() -> None:
    table = default_evidence_table()
    assert table.version == "lipid_evidence_v1"
    for evidence_id in (
        "NHI_LDL_SEC_PREV_ACS_OR_CAD_1080201",
        "NHI_LDL_PRIMARY_PREV_RF_GTE2",
        "NHI_LDL_PRIMARY_PREV_RF_EQ1",
        "NHI_LDL_PRIMARY_PREV_RF_EQ0",
        "ESC2025_LDL_VERY_HIGH_RISK",
        "ESC2025_LDL_CKD_SEVERE",
    ):
        assert evidence_id in table
    reference = table.require("NHI_LDL_SEC_PREV_ACS_OR_CAD_1080201")
    assert reference.kind == "reimbursement"
    assert reference.guideline


def test_default_table_is_loaded_once() -> None:
    assert default_evidence_table() is default_evidence_table()


def test_require_unknown_id_raises_key_error() -> None:
    with pytest.raises(KeyError):
        default_evidence_table().require("NOT_A_REAL_ID")
    assert default_evidence_table().get("NOT_A_REAL_ID") is None


def test_table_is_read_only() -> None:
    table = default_evidence_table()
    with pytest.raises(TypeError):
        table["NEW_ID"] = table.require("ESC2025_LDL_HIGH_RISK")  # type: ignore[index]


def test_by_kind_filters_references() -> None:
    reimbursement = default_evidence_table().by_kind("reimbursement")
    assert reimbursement
    assert all(item.kind == "reimbursement" for item in reimbursement)
    assert default_evidence_table().by_kind("no_such_kind") == ()


def test_load_custom_table(tmp_path) -> None:
    path = _write(
        tmp_path,
        {
            "version": "test_v1",
            "references": [
                {"id": "X_ONE", "kind": "ldl_targets", "guideline": "Test guideline", "year": 2024},
            ],
        },
    )
    table = load_evidence_table(path)
    assert table.version == "test_v1"
    assert table.ids() == ("X_ONE",)
    assert table["X_ONE"].to_dict()["year"] == 2024


def test_missing_file_raises_evidence_table_error(tmp_path) -> None:
    with pytest.raises(EvidenceTableError):
        load_evidence_table(tmp_path / "missing.json")


def test_invalid_json_raises_evidence_table_error(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(EvidenceTableError):
        load_evidence_table(path)


def test_payload_validation_rejects_bad_entries() -> None:
    entry = {"id": "A", "kind": "reimbursement", "guideline": "NHI"}
    with pytest.raises(EvidenceTableError, match="Duplicate"):
        parse_evidence_payload({"references": [entry, dict(entry)]})
    with pytest.raises(EvidenceTableError, match="unknown kind"):
        parse_evidence_payload({"references": [{**entry, "kind": "other"}]})
    with pytest.raises(EvidenceTableError, match="guideline"):
        parse_evidence_payload({"references": [{**entry, "guideline": ""}]})
    with pytest.raises(EvidenceTableError, match="non-integer year"):
        parse_evidence_payload({"references": [{**entry, "year": "2019"}]})
    with pytest.raises(EvidenceTableError):
        parse_evidence_payload([entry])
