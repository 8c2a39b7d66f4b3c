"""
Pydantic schemas for API request/response models
"""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RiskLevel = Literal["low", "medium", "high"]

# Severity order used for counts and summaries
RISK_LEVELS = ("high", "medium", "low")


class Risk(BaseModel):
    """A single safety risk identified in the photo"""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, description="Short description of the risk")
    level: RiskLevel = Field(description="Risk severity")
    recommendation: str = Field(
        min_length=1, description="Specific action to address the risk"
    )


class AnalysisResult(BaseModel):
    """Safety analysis result, risks in model output order"""

    model_config = ConfigDict(frozen=True)

    risks: List[Risk] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Relay request body

    base64Image is checked by the service so that a missing or empty value
    yields the relay's own 400 response.
    """

    base64Image: Optional[Any] = Field(
        default=None, description="Photo as a base64 data URI"
    )


class ErrorResponse(BaseModel):
    """Error body returned by every relay endpoint"""

    error: str


class ReportRequest(BaseModel):
    """PDF report export request"""

    model_config = ConfigDict(populate_by_name=True)

    analysis_results: AnalysisResult = Field(alias="analysisResults")
    photo_name: str = Field(default="uploaded-photo", alias="photoName")
    analysis_date: Optional[datetime] = Field(default=None, alias="analysisDate")
    photo_base64: Optional[str] = Field(default=None, alias="photoBase64")


class HealthResponse(BaseModel):
    """Service health"""

    status: str
    service: str
    version: str
    provider_configured: bool
