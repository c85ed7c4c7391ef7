from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional
from urllib.parse import quote

from ..config import settings
from .errors import ConfigurationError, UploadError, ValidationError
from .storage import BlobStorageService, get_blob_storage

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    url: str
    pathname: str
    content_type: str
    content_disposition: str
    size: int

    def to_response(self) -> dict:
        return {
            "url": self.url,
            "pathname": self.pathname,
            "contentType": self.content_type,
            "contentDisposition": self.content_disposition,
            "size": self.size,
        }


def _content_disposition(filename: str) -> str:
    return f"inline; filename*=UTF-8''{quote(filename)}"


class BlobUploadGateway:
    """Forwards raw file bytes to blob storage and returns the public URL.

    No business logic lives here beyond the credential check: content is
    stored byte-for-byte, with no size, type or content validation.
    """

    def __init__(self, storage_factory: Callable[[], BlobStorageService] = get_blob_storage) -> None:
        self._storage_factory = storage_factory

    def upload(
        self,
        filename: Optional[str],
        body: BinaryIO | bytes,
        content_type: Optional[str] = None,
    ) -> UploadResult:
        if not settings.blob.has_write_credentials:
            logger.error("blob_upload_misconfigured bucket=%s", settings.blob.s3_bucket)
            raise ConfigurationError("Missing blob storage credentials")

        clean_name = (filename or "").strip().lstrip("/")
        if not clean_name:
            raise ValidationError("Filename is required")

        resolved_type = content_type or "application/octet-stream"
        try:
            storage = self._storage_factory()
            stored = storage.put(clean_name, body, content_type=resolved_type)
        except RuntimeError as exc:
            logger.warning("blob_upload_failed filename=%s reason=%s", clean_name, exc)
            raise UploadError(str(exc)) from exc

        logger.info("blob_uploaded key=%s bytes=%s", stored.key, stored.size)
        return UploadResult(
            url=stored.url,
            pathname=stored.key,
            content_type=stored.content_type,
            content_disposition=_content_disposition(clean_name),
            size=stored.size,
        )


def get_upload_gateway() -> BlobUploadGateway:
    return BlobUploadGateway()
