from __future__ import annotations

import logging
from typing import Optional

from ..models.documents import DivisionEnum, Document, DocumentStatusEnum
from .errors import (
    ConfigurationError,
    DocTrackError,
    MetadataError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from .metadata_store import MetadataStore, get_metadata_store
from .metrics import record_document_created, record_document_deleted, record_failure
from .uploaders import UploadedFile, Uploader, get_uploader

logger = logging.getLogger(__name__)


def next_document_id(documents: list[Document]) -> int:
    return max((document.id for document in documents), default=0) + 1


def _coerce_division(value: DivisionEnum | str) -> DivisionEnum:
    try:
        return DivisionEnum(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown division: {value}") from exc


def _coerce_status(value: DocumentStatusEnum | str) -> DocumentStatusEnum:
    try:
        return DocumentStatusEnum(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown status: {value}") from exc


class DocumentRepository:
    """list/create/delete over blob storage plus the metadata collection.

    Deleting only removes metadata; the blob stays where it is. A metadata
    failure after a successful upload leaves the blob orphaned and is reported
    as :class:`MetadataError` so callers can tell it apart from an upload
    failure.
    """

    def __init__(self, metadata_store: MetadataStore, uploader: Uploader) -> None:
        self.metadata_store = metadata_store
        self.uploader = uploader

    async def list(self) -> list[Document]:
        return await self.metadata_store.list_all()

    async def create(
        self,
        name: str,
        division: DivisionEnum | str,
        status: DocumentStatusEnum | str,
        file: Optional[UploadedFile],
    ) -> Document:
        if file is None or file.size == 0:
            raise ValidationError("File is required and cannot be empty.")
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Document name is required.")
        division_value = _coerce_division(division)
        status_value = _coerce_status(status)

        try:
            uploaded = await self.uploader.upload(file)
        except (ConfigurationError, ValidationError, UploadError):
            record_failure("create", "upload")
            raise
        except DocTrackError as exc:
            record_failure("create", "upload")
            raise UploadError(exc.message) from exc

        try:
            documents = await self.metadata_store.list_all()
            document = Document(
                id=next_document_id(documents),
                name=clean_name,
                division=division_value,
                status=status_value,
                file_name=file.name,
                file_url=uploaded.url,
            )
            await self.metadata_store.replace_all([*documents, document])
        except DocTrackError as exc:
            record_failure("create", "metadata")
            logger.warning("document_metadata_failed orphaned_blob=%s reason=%s", uploaded.url, exc.message)
            raise MetadataError(
                f"File was uploaded but saving its details failed: {exc.message}",
                file_url=uploaded.url,
            ) from exc

        record_document_created(division_value.value)
        logger.info("document_created id=%s file_name=%s file_url=%s", document.id, document.file_name, document.file_url)
        return document

    async def delete(self, document_id: int) -> None:
        documents = await self.metadata_store.list_all()
        remaining = [document for document in documents if document.id != document_id]
        if len(remaining) == len(documents):
            raise NotFoundError("Document not found")

        try:
            await self.metadata_store.replace_all(remaining)
        except DocTrackError:
            record_failure("delete", "metadata")
            raise

        record_document_deleted()
        logger.info("document_deleted id=%s", document_id)


def get_repository() -> DocumentRepository:
    return DocumentRepository(get_metadata_store(), get_uploader())
