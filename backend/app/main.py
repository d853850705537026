# -*- coding: utf-8 -*-

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from app.api.endpoints.analysis import REPORT_STORE, router as analysis_router
from app.config import CORS_ORIGINS, LOG_LEVEL
from app.reporting import generate_html_report, generate_pdf_report

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Vocal_Progress_Analyzer", version="1.0.0")

# CORS for the React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router)

# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    return {"message": "Vocal_Progress_Analyzer API", "version": "1.0.0"}


@app.get("/api/history")
async def get_history():
    """
    List stored analyses, newest first
    """
    return {"runs": REPORT_STORE.list_recent("analysis")}


@app.get("/api/report/{report_id}/export")
async def export_report(report_id: str, format: str = "html"):
    context = REPORT_STORE.get(report_id, kind="comparison")
    if context is None:
        raise HTTPException(status_code=404, detail="Report not found or expired.")

    format_normalized = (format or "html").lower()
    timestamp = datetime.now(timezone.utc).astimezone().strftime("%Y%m%d")
    filename_stem = f"vocal-progress-{timestamp}"

    if format_normalized == "html":
        html_content = generate_html_report(report_id, context)
        return Response(
            content=html_content,
            media_type="text/html; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename=\"{filename_stem}.html\""},
        )

    if format_normalized == "pdf":
        pdf_bytes = generate_pdf_report(report_id, context)
        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": f"attachment; filename=\"{filename_stem}.pdf\""},
        )

    logger.warning("Unsupported export format requested: %s", format)
    raise HTTPException(status_code=400, detail="Unsupported format. Use 'html' or 'pdf'.")
