from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
from starlette.concurrency import run_in_threadpool

from ..config import settings
from .errors import UploadError
from .upload_gateway import BlobUploadGateway, UploadResult, get_upload_gateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """Raw file as received from the user, before it reaches blob storage."""

    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


class Uploader(Protocol):
    async def upload(self, file: UploadedFile) -> UploadResult: ...


class GatewayUploader:
    """Runs the in-process gateway on the threadpool so boto3 never blocks the loop."""

    def __init__(self, gateway: Optional[BlobUploadGateway] = None) -> None:
        self.gateway = gateway or get_upload_gateway()

    async def upload(self, file: UploadedFile) -> UploadResult:
        # Configuration and validation failures keep their own type; the
        # facade decides how to report them.
        return await run_in_threadpool(self.gateway.upload, file.name, file.content, file.content_type)


class HttpUploader:
    """Posts raw bytes to a remote upload endpoint (``?filename=`` variant)."""

    def __init__(self, endpoint_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> None:
        self.endpoint_url = endpoint_url
        self._client = client
        self._timeout = timeout

    async def upload(self, file: UploadedFile) -> UploadResult:
        try:
            if self._client is not None:
                response = await self._post(self._client, file)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, file)
        except httpx.HTTPError as exc:
            logger.warning("remote_upload_unreachable endpoint=%s reason=%s", self.endpoint_url, exc)
            raise UploadError(f"Network error: {exc}") from exc

        if response.status_code != 200:
            raise UploadError(_error_message(response))

        try:
            payload = response.json()
            return UploadResult(
                url=payload["url"],
                pathname=payload.get("pathname", file.name),
                content_type=payload.get("contentType", file.content_type),
                content_disposition=payload.get("contentDisposition", ""),
                size=int(payload.get("size", file.size)),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise UploadError("Upload endpoint returned an unexpected response") from exc

    async def _post(self, client: httpx.AsyncClient, file: UploadedFile) -> httpx.Response:
        return await client.post(
            self.endpoint_url,
            params={"filename": file.name},
            content=file.content,
            headers={"Content-Type": file.content_type},
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"Upload failed with status {response.status_code}"


def get_uploader() -> Uploader:
    if settings.upload_endpoint_url:
        return HttpUploader(settings.upload_endpoint_url)
    return GatewayUploader()
