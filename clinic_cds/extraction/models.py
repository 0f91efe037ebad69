from __future__ import annotations

"""
Patient-state records shared by the extractor and the decision layers.

Design intent:
- Freeze every record once built; downstream code never merges or patches state.
- Use None for "unknown" instead of guessing a value.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Mapping

from clinic_cds.text.numbers import coerce_flag, coerce_number, first_number_in


Sex = Literal["M", "F"]

FLAG_FIELDS: tuple[str, ...] = (
    "has_acs",
    "has_pci",
    "has_cabg",
    "has_htn",
    "on_anti_htn_meds",
    "has_dm",
    "current_smoker",
    "fh_premature_ascvd",
)


@dataclass(frozen=True)
class PatientState:
    age: float | None = None
    sex: Sex | None = None
    ldl: float | None = None
    has_acs: bool = False
    has_pci: bool = False
    has_cabg: bool = False
    has_htn: bool = False
    on_anti_htn_meds: bool = False
    has_dm: bool = False
    current_smoker: bool = False
    fh_premature_ascvd: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PatientState":
        """Build a state from caller-supplied fields, dropping unusable values to unknown."""
        age = coerce_number(data.get("age"))
        return cls(
            age=age if age is not None and age >= 0 else None,
            sex=normalize_sex(data.get("sex")),
            ldl=first_number_in(data.get("ldl")),
            **{name: coerce_flag(data.get(name, False)) for name in FLAG_FIELDS},
        )


@dataclass(frozen=True)
class ExtractionTrace:
    age_source: str | None
    sex_source: str | None
    ldl_label: str | None
    ldl_match: str | None
    flag_matches: dict[str, tuple[str, ...]] = field(default_factory=dict)
    text_chars: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "age_source": self.age_source,
            "sex_source": self.sex_source,
            "ldl_label": self.ldl_label,
            "ldl_match": self.ldl_match,
            "flag_matches": {name: list(hits) for name, hits in self.flag_matches.items()},
            "text_chars": self.text_chars,
        }


@dataclass(frozen=True)
class ExtractionResult:
    state: PatientState
    trace: ExtractionTrace


def normalize_sex(value: Any) -> Sex | None:
    raw = str(value or "").strip().lower()
    if raw in {"m", "male", "man"}:
        return "M"
    if raw in {"f", "female", "woman"}:
        return "F"
    return None
