# -*- coding: utf-8 -*-
"""Upload, analysis and comparison endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.analyzers.comparison import SnapshotValidationError, compare_snapshots, summarize_improvements
from app.analyzers.mock_analyzer import AnalysisError, MockVocalAnalyzer
from app.analyzers.recommendations import regression_recommendations
from app.config import ANALYSIS_DELAY_SECONDS, ANALYSIS_SEED, MAX_UPLOAD_BYTES, REPORT_TTL_SECONDS
from app.models import AnalysisResult, CompareRequest
from app.storage import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])

REPORT_STORE = ReportStore(ttl_seconds=REPORT_TTL_SECONDS)

_analyzer: Optional[MockVocalAnalyzer] = None


def get_analyzer() -> MockVocalAnalyzer:
    """Return the process-wide analyzer, built lazily from configuration."""
    global _analyzer
    if _analyzer is None:
        _analyzer = MockVocalAnalyzer(
            rng=np.random.default_rng(ANALYSIS_SEED),
            delay_seconds=ANALYSIS_DELAY_SECONDS,
        )
    return _analyzer


async def _read_audio_upload(upload: UploadFile) -> Tuple[str, int, str]:
    """Validate one upload and return ``(file_name, size, content_type)``."""

    file_name = upload.filename or "recording"
    content_type = upload.content_type or ""
    if not content_type.startswith("audio/"):
        raise HTTPException(status_code=400, detail=f"File {file_name} is not an audio file.")

    # Never buffer more than one byte past the limit.
    payload = await upload.read(MAX_UPLOAD_BYTES + 1)
    size = len(payload)
    if size == 0:
        raise HTTPException(status_code=400, detail=f"File {file_name} is empty.")
    if size > MAX_UPLOAD_BYTES:
        limit_mb = MAX_UPLOAD_BYTES / (1024 * 1024)
        raise HTTPException(
            status_code=400,
            detail=f"File {file_name} exceeds the {limit_mb:g}MB size limit.",
        )
    return file_name, size, content_type


def _store_analysis(result: AnalysisResult) -> str:
    return REPORT_STORE.save("analysis", result.model_dump(mode="json"))


@router.post("/analyze/upload")
async def analyze_upload(
    file: UploadFile = File(...),
    analyzer: MockVocalAnalyzer = Depends(get_analyzer),
):
    """Analyse a single recording."""

    file_name, size, content_type = await _read_audio_upload(file)
    try:
        result = await analyzer.analyze(file_name, size, content_type)
    except AnalysisError as exc:
        logger.exception("Analysis of %s failed", file_name)
        raise HTTPException(status_code=500, detail="Analysis failed, please retry.") from exc

    analysis_id = _store_analysis(result)
    return {"status": "success", "analysis_id": analysis_id, "result": result}


@router.post("/compare/upload")
async def compare_uploads(
    files: List[UploadFile] = File(...),
    analyzer: MockVocalAnalyzer = Depends(get_analyzer),
):
    """Analyse two recordings in parallel and compare the first (previous) with the second (current)."""

    if len(files) != 2:
        raise HTTPException(status_code=400, detail="Please select exactly two audio files to compare.")

    validated = [await _read_audio_upload(upload) for upload in files]
    logger.info("Comparing %s with %s", validated[0][0], validated[1][0])

    try:
        previous, current = await asyncio.gather(
            *(analyzer.analyze(name, size, content_type) for name, size, content_type in validated)
        )
    except AnalysisError as exc:
        logger.exception("Comparison abandoned because an analysis failed")
        raise HTTPException(status_code=500, detail="Analysis failed, please retry.") from exc

    try:
        comparison = compare_snapshots(previous.snapshot, current.snapshot)
    except SnapshotValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    summary = summarize_improvements(comparison)

    for result in (previous, current):
        _store_analysis(result)

    context: Dict[str, Any] = {
        "results": [previous.model_dump(mode="json"), current.model_dump(mode="json")],
        "comparison": [report.model_dump(mode="json") for report in comparison],
        "summary": summary,
        "advice": [item.model_dump(mode="json") for item in regression_recommendations(comparison)],
    }
    report_id = REPORT_STORE.save("comparison", context)

    return {"status": "success", "report_id": report_id, **context}


@router.post("/compare")
async def compare_runs(payload: CompareRequest):
    """Compare two snapshots supplied by the client."""

    try:
        comparison = compare_snapshots(payload.previous, payload.current)
    except SnapshotValidationError as exc:
        logger.warning("Rejected comparison request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return {
        "comparison": comparison,
        "summary": summarize_improvements(comparison),
        "advice": regression_recommendations(comparison),
    }
