"""
Reports API Routes

Generates the 30-day health report as JSON (``format: text``) or as a PDF
attachment (``format: pdf``). Errors are JSON bodies in both modes.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.dependencies import get_database, get_generative_client, get_pdf_renderer
from app.api.models import ReportRequest
from app.features.database.client import DatabaseClient
from app.features.reports.models import HealthReport, ReportFormat
from app.features.reports.renderer import PdfRenderer
from app.features.reports.service import generate_health_report, report_filename
from app.services.generative import GenerativeClient

router = APIRouter(tags=["Reports"])
logger = logging.getLogger("Plusnote.API.Reports")


@router.post(
    "/reports/health",
    response_model=HealthReport,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def create_health_report(
    request: ReportRequest,
    db: DatabaseClient = Depends(get_database),
    llm: GenerativeClient = Depends(get_generative_client),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
):
    report = await generate_health_report(
        request.user_id,
        db,
        llm,
        patient_name=request.patient_name,
    )

    if request.format is ReportFormat.PDF:
        pdf_bytes = await renderer.render(report.report)
        filename = report_filename(datetime.now(timezone.utc).date())
        logger.info("Health report rendered as PDF", extra={"bytes": len(pdf_bytes)})
        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return report
