from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.features.reports.models import ReportFormat


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)


class ReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    format: ReportFormat = ReportFormat.TEXT
    patient_name: Optional[str] = Field(default=None, alias="patientName", max_length=100)
