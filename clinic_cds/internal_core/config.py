from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from clinic_cds.evidence.table import default_evidence_path


_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


def _getenv_csv(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class CdsConfig:
    CDS_LOG_LEVEL: str
    CDS_EVIDENCE_PATH: str
    CDS_CORS_ALLOW_ORIGINS: tuple[str, ...]
    CDS_MAX_TEXT_CHARS: int
    CDS_INCLUDE_TRACE: bool

    def evidence_path(self) -> Path:
        return Path(self.CDS_EVIDENCE_PATH).expanduser().resolve()

    def uses_packaged_evidence(self) -> bool:
        return self.evidence_path() == default_evidence_path()


def load_config() -> CdsConfig:
    return CdsConfig(
        CDS_LOG_LEVEL=_getenv_str("CDS_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        CDS_EVIDENCE_PATH=_getenv_str("CDS_EVIDENCE_PATH", "") or str(default_evidence_path()),
        CDS_CORS_ALLOW_ORIGINS=_getenv_csv("CDS_CORS_ALLOW_ORIGINS", ("*",)),
        CDS_MAX_TEXT_CHARS=_getenv_int("CDS_MAX_TEXT_CHARS", 20000),
        CDS_INCLUDE_TRACE=_getenv_bool("CDS_INCLUDE_TRACE", True),
    )
