"""
Cardiovascular risk boundary.

Design intent:
- Classify a RiskProfile into one ESC-style category with cited LDL-C targets.
- Stay pure: same profile in, same assessment out.
"""
from __future__ import annotations

from .stratify import (
    RISK_LADDER,
    LipidTarget,
    RiskAssessment,
    RiskProfile,
    RiskRule,
    classify_risk,
    risk_profile_from_state,
)

__all__ = [
    "RISK_LADDER",
    "LipidTarget",
    "RiskAssessment",
    "RiskProfile",
    "RiskRule",
    "classify_risk",
    "risk_profile_from_state",
]
