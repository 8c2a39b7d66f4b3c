"""
HTTP client for the analysis relay
"""

from typing import Optional

import httpx

from worksafe.core.config import get_settings
from worksafe.core.errors import (
    AnalysisError,
    ErrorKind,
    analysis_error_from_exception,
    classify_failure_message,
)
from worksafe.core.logger import get_logger
from worksafe.schemas.safety import AnalysisResult

logger = get_logger(__name__)

ANALYZE_PATH = "/api/analyze"
REPORT_PATH = "/api/report"


class AnalysisClient:
    """
    Sends photos to the relay and interprets its answers

    One awaited request per call and no retries. Requests wait up to
    `relay_timeout` seconds, unbounded by default. Callers keep at most one
    analysis in flight.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.relay_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.relay_timeout
        self._http = http_client

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        if self._http is not None:
            return await self._http.post(f"{self.base_url}{path}", json=payload)
        async with httpx.AsyncClient(timeout=self.timeout) as http:
            return await http.post(f"{self.base_url}{path}", json=payload)

    async def analyze(self, photo) -> AnalysisResult:
        """Relay the photo and return the analysis result"""
        try:
            response = await self._post(
                ANALYZE_PATH, {"base64Image": photo.base64_payload}
            )
        except Exception as e:
            logger.error("Analysis error: %s", e)
            raise analysis_error_from_exception(e) from e

        if not response.is_success:
            raise self._error_from_response(response)

        try:
            return AnalysisResult.model_validate(response.json())
        except ValueError as e:
            logger.error("Unreadable analysis response: %s", e)
            raise AnalysisError(
                ErrorKind.GENERIC, str(e), status_code=response.status_code
            ) from e

    async def export_report(
        self,
        result: AnalysisResult,
        photo_name: Optional[str] = None,
        photo_base64: Optional[str] = None,
    ) -> bytes:
        """Ask the relay to render a PDF report of a result"""
        payload = {"analysisResults": result.model_dump(mode="json")}
        if photo_name:
            payload["photoName"] = photo_name
        if photo_base64:
            payload["photoBase64"] = photo_base64

        try:
            response = await self._post(REPORT_PATH, payload)
        except Exception as e:
            raise analysis_error_from_exception(e) from e

        if not response.is_success:
            raise self._error_from_response(response)
        return response.content

    @staticmethod
    def _error_from_response(response: httpx.Response) -> AnalysisError:
        message = None
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
        except ValueError:
            pass
        if message is None:
            message = f"HTTP error! status: {response.status_code}"

        kind = classify_failure_message(message)
        logger.error("Analysis error: %s (%s)", message, kind.value)
        return AnalysisError(kind, message, status_code=response.status_code)
