"""Report result contract."""

import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReportFormat(str, Enum):
    TEXT = "text"
    PDF = "pdf"


class DateRange(BaseModel):
    start: datetime.date
    end: datetime.date


class HealthReport(BaseModel):
    """JSON-mode report: the assembled text plus what it was built from."""

    model_config = ConfigDict(populate_by_name=True)

    report: str
    data_points: int = Field(alias="dataPoints")
    date_range: DateRange = Field(alias="dateRange")
