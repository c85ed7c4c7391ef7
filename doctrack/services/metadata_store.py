"""Whole-collection persistence for document metadata.

Both stores read and write the *entire* collection on every call. There is no
version token: concurrent writers race and the last ``replace_all`` wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from ..config import settings
from ..models.documents import Document, serialize_documents
from .errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


def _parse_documents(raw: Any) -> list[Document]:
    if not isinstance(raw, list):
        raise FetchError("Unexpected metadata payload: expected a list of documents")
    try:
        return [Document.model_validate(item) for item in raw]
    except PydanticValidationError as exc:
        raise FetchError(f"Stored metadata is malformed: {exc.error_count()} invalid field(s)") from exc


class MetadataStore:
    async def list_all(self) -> list[Document]:  # pragma: no cover - interface
        raise NotImplementedError

    async def replace_all(self, documents: list[Document]) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class RemoteMetadataStore(MetadataStore):
    """Hosted JSON document store addressed as one collection URL."""

    def __init__(
        self,
        collection_url: str,
        master_key: Optional[str] = None,
        key_header: str = "X-Master-Key",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.collection_url = collection_url.rstrip("/")
        self.master_key = master_key
        self.key_header = key_header
        self._timeout = timeout
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.master_key:
            headers[self.key_header] = self.master_key
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=self._headers(), **kwargs)
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("metadata_store_unreachable method=%s url=%s reason=%s", method, url, exc)
            raise FetchError(f"Network error: {exc}") from exc

    async def list_all(self) -> list[Document]:
        response = await self._request("GET", f"{self.collection_url}/latest")
        if response.status_code == 404:
            # Collection has never been written yet.
            return []
        if not response.is_success:
            raise _fetch_error(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("Metadata store returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise FetchError("Unexpected metadata payload: missing record")
        return _parse_documents(payload.get("record", []))

    async def replace_all(self, documents: list[Document]) -> None:
        response = await self._request("PUT", self.collection_url, json=serialize_documents(documents))
        if not response.is_success:
            raise _fetch_error(response)
        logger.info("metadata_replaced backend=remote documents=%s", len(documents))


def _fetch_error(response: httpx.Response) -> FetchError:
    message: Optional[str] = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
        message = body["message"]
    return FetchError(message or f"Request failed with status {response.status_code}", status_code=response.status_code)


class LocalMetadataStore(MetadataStore):
    """Keeps the serialised collection in a single JSON file.

    File access runs on the threadpool so the event loop never blocks on disk.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def list_all(self) -> list[Document]:
        return await run_in_threadpool(self._load)

    async def replace_all(self, documents: list[Document]) -> None:
        records = serialize_documents(documents)
        try:
            await run_in_threadpool(self._write, records)
        except OSError as exc:
            logger.error("metadata_save_failed path=%s reason=%s", self.path, exc)
            raise FetchError(f"Failed to save metadata: {exc}") from exc
        logger.info("metadata_replaced backend=local documents=%s", len(documents))

    def _load(self) -> list[Document]:
        try:
            if not self.path.exists():
                self._write([])
                return []
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return _parse_documents(raw)
        except (OSError, ValueError, FetchError):
            logger.exception("metadata_load_failed path=%s", self.path)
            return []

    def _write(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def get_metadata_store() -> MetadataStore:
    config = settings.metadata
    if config.backend == "remote":
        if not config.collection_url:
            raise ConfigurationError("METADATA_COLLECTION_URL is required for the remote metadata store")
        return RemoteMetadataStore(
            config.collection_url,
            master_key=config.master_key,
            key_header=config.key_header,
            timeout=config.timeout_seconds,
        )
    return LocalMetadataStore(config.local_path)
