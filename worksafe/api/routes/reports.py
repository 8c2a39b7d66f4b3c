"""
API routes for report export
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Response

from worksafe.schemas.safety import ErrorResponse, ReportRequest
from worksafe.services.report_pdf import (
    ReportGenerationError,
    SafetyReportPdfBuilder,
    report_filename,
)
from worksafe.core.deps import get_report_builder
from worksafe.core.errors import PDF_GENERATION_FAILED, ErrorKind, RelayError

router = APIRouter(tags=["reports"])


@router.post(
    "/report",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}},
        500: {"model": ErrorResponse},
    },
)
async def export_report(
    request: ReportRequest,
    builder: SafetyReportPdfBuilder = Depends(get_report_builder),
):
    """
    Render an analysis result as a downloadable PDF report

    - **analysisResults**: Result returned by /api/analyze
    - **photoName**: Name used in the report and file name
    - **analysisDate**: Defaults to now
    - **photoBase64**: Optional data URI embedded in the report
    """
    analysis_date = request.analysis_date or datetime.now()
    try:
        pdf_bytes = builder.build_pdf(
            results=request.analysis_results,
            photo_name=request.photo_name,
            analysis_date=analysis_date,
            photo_base64=request.photo_base64,
        )
    except ReportGenerationError as e:
        raise RelayError(ErrorKind.GENERIC, 500, PDF_GENERATION_FAILED) from e

    filename = report_filename(request.photo_name, analysis_date)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
