"""
Recover a minimal patient state from a free-text clinic note.

Design intent:
- Label-anchored numeric capture and literal keyword matching only.
- Never infer a value the text does not literally support.
- Keep a trace of every matched pattern so a reviewer can audit each flag.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from clinic_cds.text.normalizer import normalize_text

from .models import ExtractionResult, ExtractionTrace, PatientState, Sex


logger = logging.getLogger(__name__)

# "71f", "65 m", "65yo m", "58 y/o f"
_COMPACT_AGE_SEX_RE = re.compile(r"\b(\d{1,3})\s*(?:y/o|yo|yrs|yr|years|year)?\s*(m|f)(?![\w/])")
_MALE_WORD_RE = re.compile(r"\b(?:male|man)\b")
_FEMALE_WORD_RE = re.compile(r"\b(?:female|woman)\b")
_AGE_LABEL_RE = re.compile(r"\bage\s*[:=]?\s*(\d{1,3})\b")
_NARRATIVE_AGE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(\d{1,3})\s*-?\s*(?:years?|yrs?)\s*-?\s*old\b"),
    re.compile(r"\b(\d{1,3})\s*(?:y/o|yo)\b"),
    re.compile(r"(?<!\d)(\d{1,3})\s*歲"),
)

LDL_LABELS: tuple[str, ...] = (
    "ldl-c",
    "ldl c",
    "ldl",
    "low-density lipoprotein",
    "low density lipoprotein",
    "低密度膽固醇",
    "低密度",
)
_LDL_LABEL_RES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (label, re.compile(rf"(?<![a-z]){re.escape(label)}\s*[:=]?\s*(\d{{2,3}}(?:\.\d+)?)(?!\d)"))
    for label in LDL_LABELS
)

# Literal phrases match as substrings; ambiguous words and abbreviations are word-bounded regexes.
FLAG_RULES: tuple[tuple[str, tuple[str | re.Pattern[str], ...]], ...] = (
    (
        "has_acs",
        (
            re.compile(r"\bacs\b"),
            "acute coronary syndrome",
            "unstable angina",
            re.compile(r"\bstemi\b"),
            re.compile(r"\bnstemi\b"),
            "myocardial infarction",
            re.compile(r"\bami\b"),
            "acute mi",
            "急性冠心症",
            "心肌梗塞",
        ),
    ),
    (
        "has_pci",
        (
            re.compile(r"\bpci\b"),
            re.compile(r"\bstents?\b"),
            "ptca",
            "percutaneous coronary intervention",
            "支架",
        ),
    ),
    (
        "has_cabg",
        (
            re.compile(r"\bcabg\b"),
            "coronary artery bypass",
            "bypass surgery",
            "繞道手術",
        ),
    ),
    (
        "has_htn",
        (
            re.compile(r"\bhtn\b"),
            "hypertension",
            "high blood pressure",
            "高血壓",
        ),
    ),
    (
        "on_anti_htn_meds",
        (
            "amlodipine",
            "norvasc",
            "losartan",
            "valsartan",
            "candesartan",
            "telmisartan",
            "olmesartan",
            "irbesartan",
            "enalapril",
            "lisinopril",
            "ramipril",
            "perindopril",
            "bisoprolol",
            "carvedilol",
            "metoprolol",
            "nebivolol",
            "hctz",
            "hydrochlorothiazide",
            "indapamide",
            "chlorthalidone",
            "spironolactone",
            "eplerenone",
            "降壓藥",
        ),
    ),
    (
        "has_dm",
        (
            re.compile(r"\bdm\b"),
            "diabetes",
            "糖尿病",
            "metformin",
            "glucophage",
            "sitagliptin",
            "linagliptin",
            "empagliflozin",
            "dapagliflozin",
            "canagliflozin",
            "liraglutide",
            "semaglutide",
            "insulin",
            "lantus",
            "humalog",
        ),
    ),
    (
        "current_smoker",
        (
            # non-/ex-/former/never/quit/denies mentions are not current smoking
            re.compile(r"(?<!non-)(?<!non )(?<!ex-)(?<!former )(?<!never )(?<!quit )(?<!denies )\bsmok(?:er|ing)\b"),
            "cigarette",
            "pack-year",
            "抽菸",
            "吸菸",
        ),
    ),
    (
        "fh_premature_ascvd",
        (
            "family history of premature",
            "fh premature",
            "premature cad in family",
            "早發心血管家族史",
            "早發心臟病家族史",
            "家族史 早發",
        ),
    ),
)

LIPID_TOPIC_KEYWORDS: tuple[str, ...] = (
    "ldl",
    "cholesterol",
    "lipid",
    "statin",
    "ezetimibe",
    "pcsk9",
    "bempedoic",
    "lp(a)",
    "lpa",
    "hyperlipidem",
    "dyslip",
    "健保",
    "給付",
    "高血脂",
    "膽固醇",
    "降脂",
    "依折麥布",
)


def extract_patient_state(text: str | None) -> ExtractionResult:
    normalized = normalize_text(text)

    age, sex, age_source, sex_source = _parse_age_sex(normalized)
    ldl, ldl_label, ldl_match = _pick_number_after_labels(normalized, _LDL_LABEL_RES)

    flags: dict[str, bool] = {}
    flag_matches: dict[str, tuple[str, ...]] = {}
    for name, patterns in FLAG_RULES:
        hits = _matching_patterns(normalized, patterns)
        flags[name] = bool(hits)
        if hits:
            flag_matches[name] = hits

    state = PatientState(age=age, sex=sex, ldl=ldl, **flags)
    trace = ExtractionTrace(
        age_source=age_source,
        sex_source=sex_source,
        ldl_label=ldl_label,
        ldl_match=ldl_match,
        flag_matches=flag_matches,
        text_chars=len(normalized),
    )
    logger.debug(
        "patient_state_extracted chars=%s age_source=%s sex_source=%s ldl_label=%s flags=%s",
        len(normalized),
        age_source,
        sex_source,
        ldl_label,
        sorted(flag_matches),
    )
    return ExtractionResult(state=state, trace=trace)


def mentions_lipid_topic(text: str | None) -> bool:
    normalized = normalize_text(text)
    return any(keyword in normalized for keyword in LIPID_TOPIC_KEYWORDS)


def _parse_age_sex(text: str) -> tuple[float | None, Sex | None, str | None, str | None]:
    age: float | None = None
    sex: Sex | None = None
    age_source: str | None = None
    sex_source: str | None = None

    compact = _COMPACT_AGE_SEX_RE.search(text)
    if compact:
        age = float(compact.group(1))
        sex = "M" if compact.group(2) == "m" else "F"
        age_source = sex_source = "compact_token"

    if sex is None:
        if _MALE_WORD_RE.search(text):
            sex, sex_source = "M", "sex_word"
        elif _FEMALE_WORD_RE.search(text):
            sex, sex_source = "F", "sex_word"

    if age is None:
        labelled = _AGE_LABEL_RE.search(text)
        if labelled:
            age, age_source = float(labelled.group(1)), "age_label"

    if age is None:
        for pattern in _NARRATIVE_AGE_RES:
            found = pattern.search(text)
            if found:
                age, age_source = float(found.group(1)), "narrative_age"
                break

    return age, sex, age_source, sex_source


def _pick_number_after_labels(
    text: str,
    labels: Sequence[tuple[str, re.Pattern[str]]],
) -> tuple[float | None, str | None, str | None]:
    for label, pattern in labels:
        match = pattern.search(text)
        if match:
            return float(match.group(1)), label, match.group(0)
    return None, None, None


def _matching_patterns(text: str, patterns: Sequence[str | re.Pattern[str]]) -> tuple[str, ...]:
    hits: list[str] = []
    for item in patterns:
        if isinstance(item, str):
            if item in text:
                hits.append(item)
        else:
            found = item.search(text)
            if found:
                hits.append(found.group(0))
    return tuple(hits)
