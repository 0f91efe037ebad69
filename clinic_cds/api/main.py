from __future__ import annotations

"""
HTTP API for clinic lipid decision support.

Design intent:
- Keep API orchestration thin and typed.
- Delegate every decision to extraction/risk/eligibility modules.
- Return evidence ids with each result so reviewers can trace the rule used.
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from clinic_cds.annotation.pipeline import annotate_text
from clinic_cds.eligibility.reimbursement import evaluate_eligibility
from clinic_cds.evidence.table import EvidenceTable, default_evidence_table, load_evidence_table
from clinic_cds.extraction.extractor import extract_patient_state
from clinic_cds.internal_core.config import load_config
from clinic_cds.internal_core.contracts import (
    AnnotateRequest,
    AnnotateResponse,
    EligibilityInput,
    EligibilityResultModel,
    EvidenceReferenceModel,
    ExtractResponse,
    NoteTextRequest,
    RiskAssessmentModel,
    RiskProfileInput,
)
from clinic_cds.risk.stratify import RiskProfile, classify_risk


config = load_config()
logging.getLogger("clinic_cds").setLevel(getattr(logging, config.CDS_LOG_LEVEL, logging.INFO))

app = FastAPI(title="clinic decision support service")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.CDS_CORS_ALLOW_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_evidence_table() -> EvidenceTable:
    existing = getattr(app.state, "evidence_table", None)
    if isinstance(existing, EvidenceTable):
        return existing
    if config.uses_packaged_evidence():
        created = default_evidence_table()
    else:
        created = load_evidence_table(config.evidence_path())
    setattr(app.state, "evidence_table", created)
    return created


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/annotate", response_model=AnnotateResponse)
async def annotate(req: AnnotateRequest) -> dict[str, Any]:
    if not req.text.strip():
        raise HTTPException(status_code=400, detail="text is required and cannot be blank.")
    include_trace = config.CDS_INCLUDE_TRACE if req.include_trace is None else req.include_trace
    overrides = req.risk_overrides.model_dump(exclude_none=True) if req.risk_overrides else {}
    annotation = annotate_text(
        req.text,
        evidence=_get_evidence_table(),
        include_trace=include_trace,
        risk_overrides=overrides,
    )
    logger.info(
        "annotate_done chars=%s risk=%s eligible=%s",
        len(req.text),
        annotation.risk.category,
        annotation.eligibility.eligible,
    )
    return annotation.to_dict()


@app.post("/extract", response_model=ExtractResponse)
async def extract(req: NoteTextRequest) -> dict[str, Any]:
    result = extract_patient_state(req.text)
    return {"state": result.state.to_dict(), "trace": result.trace.to_dict()}


@app.post("/risk/classify", response_model=RiskAssessmentModel)
async def risk_classify(req: RiskProfileInput) -> dict[str, Any]:
    profile = RiskProfile.from_mapping(req.model_dump())
    return classify_risk(profile, evidence=_get_evidence_table()).to_dict()


@app.post("/eligibility/evaluate", response_model=EligibilityResultModel)
async def eligibility_evaluate(req: EligibilityInput) -> dict[str, Any]:
    return evaluate_eligibility(req.model_dump(), evidence=_get_evidence_table()).to_dict()


@app.get("/evidence/{evidence_id}", response_model=EvidenceReferenceModel)
async def evidence_lookup(evidence_id: str) -> dict[str, Any]:
    try:
        reference = _get_evidence_table().require(evidence_id.strip())
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown evidence id: {evidence_id}") from exc
    return reference.to_dict()
