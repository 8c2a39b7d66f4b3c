"""
Single-photo analysis session

Holds one photo and at most one result, mirroring the upload -> analyze ->
results flow of the web UI. Only one analysis may be in flight at a time.
"""

from enum import Enum
from typing import Optional

from worksafe.client.analysis_client import AnalysisClient
from worksafe.client.ingestor import ImageIngestor, PhotoSource, UploadedPhoto
from worksafe.core.errors import AnalysisError, ErrorKind, PhotoValidationError
from worksafe.core.logger import get_logger
from worksafe.core.messages import translate
from worksafe.schemas.safety import AnalysisResult
from worksafe.services.renderer import ResultView, render_result

logger = get_logger(__name__)


class SessionState(str, Enum):
    EMPTY = "empty"
    PHOTO_READY = "photo_ready"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"


class AnalysisInProgress(RuntimeError):
    pass


class PhotoSession:
    def __init__(
        self,
        client: AnalysisClient,
        ingestor: Optional[ImageIngestor] = None,
        locale: Optional[str] = None,
    ):
        self.client = client
        self.locale = locale
        self.ingestor = ingestor or ImageIngestor(locale=locale)
        self.photo: Optional[UploadedPhoto] = None
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        self.error_kind: Optional[ErrorKind] = None
        self._analyzing = False
        self._generation = 0

    @property
    def state(self) -> SessionState:
        if self._analyzing:
            return SessionState.ANALYZING
        if self.photo is None:
            return SessionState.EMPTY
        if self.result is None:
            return SessionState.PHOTO_READY
        return SessionState.ANALYZED

    async def upload(self, file: PhotoSource) -> UploadedPhoto:
        """Ingest a new photo, replacing (and releasing) the current one"""
        if self._analyzing:
            raise AnalysisInProgress(translate("errors.analysis-in-progress", self.locale))

        try:
            photo = await self.ingestor.ingest(file)
        except PhotoValidationError as e:
            self.error = e.message
            self.error_kind = None
            raise

        self._release_photo()
        self.photo = photo
        self.result = None
        self.dismiss_error()
        return photo

    async def analyze(self) -> Optional[AnalysisResult]:
        """
        Run one analysis for the current photo

        Failures are recorded as a dismissible, localized error and None is
        returned; the session stays usable.
        """
        if self.photo is None:
            self.error_kind = ErrorKind.MISSING_INPUT
            self.error = translate("errors.missing-input", self.locale)
            return None
        if self._analyzing:
            raise AnalysisInProgress(translate("errors.analysis-in-progress", self.locale))

        generation = self._generation
        self._analyzing = True
        self.dismiss_error()
        try:
            result = await self.client.analyze(self.photo)
        except AnalysisError as e:
            if generation != self._generation:
                logger.debug("Discarding failure of a superseded analysis: %s", e)
                return None
            self.error_kind = e.kind
            self.error = translate(f"errors.{e.kind.value}", self.locale)
            return None
        finally:
            if generation == self._generation:
                self._analyzing = False

        if generation != self._generation:
            logger.debug("Discarding result of a superseded analysis")
            return None
        self.result = result
        return result

    def view(self) -> Optional[ResultView]:
        if self.result is None:
            return None
        return render_result(self.result, self.locale)

    def reset(self) -> None:
        """Drop photo, result and error; an analysis still running is abandoned"""
        self._generation += 1
        self._analyzing = False
        self._release_photo()
        self.photo = None
        self.result = None
        self.dismiss_error()

    def dismiss_error(self) -> None:
        self.error = None
        self.error_kind = None

    def _release_photo(self) -> None:
        if self.photo is not None:
            self.ingestor.previews.revoke(self.photo.preview_url)
