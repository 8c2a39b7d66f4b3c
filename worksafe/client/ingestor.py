"""
Photo ingestion: validate a user-selected image and encode it for the relay
"""

import asyncio
import base64
import mimetypes
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from worksafe.core.config import get_settings
from worksafe.core.errors import PhotoErrorCode, PhotoValidationError
from worksafe.core.logger import get_logger
from worksafe.core.messages import translate

logger = get_logger(__name__)


class PhotoSource(Protocol):
    """Anything shaped like an uploaded file (starlette UploadFile fits)"""

    filename: Optional[str]
    content_type: Optional[str]
    size: Optional[int]

    async def read(self) -> bytes: ...


@dataclass
class LocalPhoto:
    """A photo on disk, exposed through the PhotoSource interface"""

    path: Path
    content_type: Optional[str] = None
    size: Optional[int] = None
    filename: Optional[str] = None

    def __post_init__(self):
        self.path = Path(self.path)
        if self.filename is None:
            self.filename = self.path.name
        if self.content_type is None:
            self.content_type, _ = mimetypes.guess_type(self.path.name)
        if self.size is None and self.path.exists():
            self.size = self.path.stat().st_size

    async def read(self) -> bytes:
        return await asyncio.to_thread(self.path.read_bytes)


@dataclass(frozen=True)
class UploadedPhoto:
    raw_file: Any
    filename: str
    content_type: str
    preview_url: str
    base64_payload: str


@dataclass
class PreviewRegistry:
    """
    Revocable local references to photo bytes

    Stands in for browser object URLs: each reference stays resolvable until
    it is revoked.
    """

    _previews: Dict[str, bytes] = field(default_factory=dict)

    def create(self, data: bytes = b"") -> str:
        url = f"preview:{uuid.uuid4()}"
        self._previews[url] = data
        return url

    def attach(self, url: str, data: bytes) -> None:
        if url in self._previews:
            self._previews[url] = data

    def resolve(self, url: str) -> Optional[bytes]:
        return self._previews.get(url)

    def revoke(self, url: Optional[str]) -> None:
        if url:
            self._previews.pop(url, None)

    def __contains__(self, url: str) -> bool:
        return url in self._previews

    def __len__(self) -> int:
        return len(self._previews)


class ImageIngestor:
    """Validates photos and produces UploadedPhoto instances"""

    def __init__(
        self,
        previews: Optional[PreviewRegistry] = None,
        locale: Optional[str] = None,
    ):
        self.settings = get_settings()
        self.previews = previews if previews is not None else PreviewRegistry()
        self.locale = locale

    def _fail(self, code: PhotoErrorCode) -> PhotoValidationError:
        return PhotoValidationError(code, translate(f"errors.{code.value}", self.locale))

    def validate(self, file: PhotoSource) -> None:
        """Check type and declared size"""
        if file.content_type not in self.settings.accepted_image_types:
            raise self._fail(PhotoErrorCode.INVALID_FORMAT)
        size = getattr(file, "size", None)
        if size is not None and size >= self.settings.max_file_size:
            raise self._fail(PhotoErrorCode.FILE_TOO_LARGE)

    async def ingest(self, file: PhotoSource) -> UploadedPhoto:
        """
        Validate, preview and encode a user-selected photo

        The preview reference is issued before the read; if the read or the
        encoding fails it is revoked again.
        """
        self.validate(file)

        preview_url = self.previews.create()
        try:
            data = await file.read()
            if not isinstance(data, (bytes, bytearray)):
                raise TypeError(f"expected bytes, got {type(data).__name__}")
            encoded = base64.b64encode(bytes(data)).decode("ascii")
        except Exception as e:
            self.previews.revoke(preview_url)
            logger.warning("Photo processing error for %s: %s", file.filename, e)
            raise self._fail(PhotoErrorCode.PROCESSING_ERROR) from e

        if len(data) >= self.settings.max_file_size:
            self.previews.revoke(preview_url)
            raise self._fail(PhotoErrorCode.FILE_TOO_LARGE)

        self.previews.attach(preview_url, bytes(data))
        logger.debug("Ingested %s (%d bytes)", file.filename, len(data))

        return UploadedPhoto(
            raw_file=file,
            filename=file.filename or "uploaded-photo",
            content_type=file.content_type,
            preview_url=preview_url,
            base64_payload=f"data:{file.content_type};base64,{encoded}",
        )
