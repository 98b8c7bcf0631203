"""
30-day health report generation.

Fetches the last 30 days of journal entries, asks the generative endpoint
for a physician-facing report and wraps whatever comes back in a fixed
header, medical disclaimer and generation timestamp.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.features.analysis.prompts import build_report_prompt
from app.features.database.client import DatabaseClient
from app.features.reports.models import DateRange, HealthReport
from app.services.generative import REPORT_CONFIG, GenerativeClient
from app.shared.constants import MEDICAL_DISCLAIMER, PRODUCT_NAME, REPORT_WINDOW_DAYS
from app.shared.errors import InsufficientDataError

logger = logging.getLogger("Plusnote.Reports")


def report_filename(on: date) -> str:
    return f"health-report-{on.isoformat()}.pdf"


def assemble_report(body: str, patient_name: str, generated_at: datetime) -> str:
    """Frame the model's text with the title, disclaimer and timestamp."""
    return f"""# Health Report for {patient_name}

{body.strip()}

---

**MEDICAL DISCLAIMER:**
{MEDICAL_DISCLAIMER}

*Report generated by {PRODUCT_NAME} on {generated_at:%Y-%m-%d %H:%M} UTC*"""


async def generate_health_report(
    user_id: str,
    db: DatabaseClient,
    llm: GenerativeClient,
    patient_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> HealthReport:
    """
    Build the 30-day report for a user.

    Args:
        user_id: Owner of the journal
        db: Database client
        llm: Generative client
        patient_name: Name to address the report to; resolved from the
                      profile when omitted
        now: Clock override (UTC)

    Raises:
        InsufficientDataError: No entries in the last 30 days
    """
    now = now or datetime.now(timezone.utc)
    since = now.date() - timedelta(days=REPORT_WINDOW_DAYS)

    entries = db.journals.list_since(user_id, since)
    if not entries:
        raise InsufficientDataError(
            f"No health logs found for the last {REPORT_WINDOW_DAYS} days",
            details={"since": since.isoformat()},
        )

    if not patient_name or not patient_name.strip():
        patient_name = db.profiles.display_name_for(user_id)
    patient_name = patient_name.strip()

    prompt = build_report_prompt(entries, patient_name)
    result = await llm.generate([prompt], REPORT_CONFIG, purpose="report")

    report = HealthReport(
        report=assemble_report(result.text, patient_name, now),
        data_points=len(entries),
        date_range=DateRange(start=entries[0].log_date, end=entries[-1].log_date),
    )
    logger.info(
        "Health report generated",
        extra={"user_id": user_id, "data_points": report.data_points},
    )
    return report
