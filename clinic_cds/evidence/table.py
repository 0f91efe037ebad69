from __future__ import annotations

"""
Read-only citation table for lipid guideline and reimbursement references.

Design intent:
- Load once at process start; never mutate afterwards.
- Decision layers attach ids only; resolving an id to citation text is the caller's job.
"""

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any


logger = logging.getLogger(__name__)

EVIDENCE_KINDS: tuple[str, ...] = (
    "ldl_targets",
    "treatment_logic",
    "non_statin_therapy",
    "statin_intolerance",
    "lipoprotein_a",
    "reimbursement",
    "risk_factors",
)


class EvidenceTableError(ValueError):
    pass


@dataclass(frozen=True)
class EvidenceReference:
    id: str
    kind: str
    guideline: str
    year: int | None = None
    section: str | None = None
    applies_to: str | None = None
    summary: str | None = None
    quote: str | None = None
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class EvidenceTable(Mapping[str, EvidenceReference]):
    """Immutable id -> EvidenceReference mapping; safe to share across threads."""

    def __init__(self, references: Mapping[str, EvidenceReference], *, version: str = "") -> None:
        self._references = MappingProxyType(dict(references))
        self.version = version

    def __getitem__(self, evidence_id: str) -> EvidenceReference:
        return self._references[evidence_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._references)

    def __len__(self) -> int:
        return len(self._references)

    def require(self, evidence_id: str) -> EvidenceReference:
        try:
            return self._references[evidence_id]
        except KeyError:
            raise KeyError(f"Unknown evidence id: {evidence_id}") from None

    def ids(self) -> tuple[str, ...]:
        return tuple(self._references)

    def by_kind(self, kind: str) -> tuple[EvidenceReference, ...]:
        return tuple(item for item in self._references.values() if item.kind == kind)


def default_evidence_path() -> Path:
    return Path(__file__).resolve().parent / "data" / "lipid_evidence.json"


def load_evidence_table(path: str | Path | None = None) -> EvidenceTable:
    target = Path(path).expanduser() if path else default_evidence_path()
    try:
        raw = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise EvidenceTableError(f"Cannot read evidence file {target}: {exc}") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EvidenceTableError(f"Invalid evidence JSON in {target}: {exc}") from exc

    table = parse_evidence_payload(payload)
    logger.info("evidence_table_loaded path=%s version=%s references=%s", target, table.version, len(table))
    return table


def parse_evidence_payload(payload: Any) -> EvidenceTable:
    if not isinstance(payload, dict) or not isinstance(payload.get("references"), list):
        raise EvidenceTableError("Evidence payload must be an object with a 'references' list.")

    references: dict[str, EvidenceReference] = {}
    for index, item in enumerate(payload["references"]):
        reference = _parse_reference(item, index=index)
        if reference.id in references:
            raise EvidenceTableError(f"Duplicate evidence id: {reference.id}")
        references[reference.id] = reference
    return EvidenceTable(references, version=str(payload.get("version") or ""))


@lru_cache(maxsize=1)
def default_evidence_table() -> EvidenceTable:
    return load_evidence_table()


def _parse_reference(item: Any, *, index: int) -> EvidenceReference:
    if not isinstance(item, dict):
        raise EvidenceTableError(f"Evidence entry #{index} must be an object.")
    evidence_id = str(item.get("id") or "").strip()
    if not evidence_id:
        raise EvidenceTableError(f"Evidence entry #{index} is missing an id.")
    kind = str(item.get("kind") or "").strip()
    if kind not in EVIDENCE_KINDS:
        raise EvidenceTableError(f"Evidence entry {evidence_id} has unknown kind: {kind!r}")
    guideline = str(item.get("guideline") or "").strip()
    if not guideline:
        raise EvidenceTableError(f"Evidence entry {evidence_id} is missing a guideline name.")

    year = item.get("year")
    if year is not None and (isinstance(year, bool) or not isinstance(year, int)):
        raise EvidenceTableError(f"Evidence entry {evidence_id} has a non-integer year: {year!r}")

    return EvidenceReference(
        id=evidence_id,
        kind=kind,
        guideline=guideline,
        year=year,
        section=_opt_str(item.get("section")),
        applies_to=_opt_str(item.get("applies_to")),
        summary=_opt_str(item.get("summary")),
        quote=_opt_str(item.get("quote")),
        note=_opt_str(item.get("note")),
    )


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
