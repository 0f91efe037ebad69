"""
Reimbursement eligibility boundary.

Design intent:
- Answer "does this patient meet the NHI LDL-C start threshold" with a citable rationale.
"""
from __future__ import annotations

from .reimbursement import (
    EligibilityResult,
    RiskFactorMatch,
    count_risk_factors,
    determine_prevention_category,
    evaluate_eligibility,
    evaluate_eligibility_from_text,
    parse_lipid_value,
)

__all__ = [
    "EligibilityResult",
    "RiskFactorMatch",
    "count_risk_factors",
    "determine_prevention_category",
    "evaluate_eligibility",
    "evaluate_eligibility_from_text",
    "parse_lipid_value",
]
