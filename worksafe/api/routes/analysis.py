"""
API routes for safety analysis
"""

from typing import Optional

from fastapi import APIRouter, Depends

from worksafe.schemas.safety import AnalysisResult, AnalyzeRequest, ErrorResponse
from worksafe.services.analysis_service import AnalysisService
from worksafe.core.deps import get_analysis_service

router = APIRouter(tags=["analysis"])


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def analyze_photo(
    payload: Optional[AnalyzeRequest] = None,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze a workplace photo for safety risks

    - **base64Image**: Photo as a data URI (JPEG, PNG or WebP)

    Returns the risks found, each with a title, level and recommendation
    """
    base64_image = payload.base64Image if payload is not None else None
    return await service.analyze_image(base64_image)
