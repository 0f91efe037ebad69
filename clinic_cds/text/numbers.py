from __future__ import annotations

import math
import re
from typing import Any

_NUMBER_RUN_RE = re.compile(r"\d+(?:\.\d+)?")
_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def coerce_number(value: Any) -> float | None:
    """Strict numeric coercion: finite numbers and whole numeric strings only."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            number = float(raw)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def first_number_in(value: Any) -> float | None:
    """
    Loose numeric coercion for lab values.

    Numbers pass through when finite; strings yield their first integer/decimal
    run after commas are dropped ("LDL-C: 135 mg/dL" -> 135.0).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    match = _NUMBER_RUN_RE.search(value.replace(",", ""))
    return float(match.group(0)) if match else None


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)
