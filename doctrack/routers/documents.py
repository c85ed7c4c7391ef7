from __future__ import annotations

import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response

from ..dependencies.repository import get_document_repository
from ..models.documents import serialize_documents
from ..services.errors import (
    ConfigurationError,
    DocTrackError,
    FetchError,
    MetadataError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from ..services.repository import DocumentRepository
from ..services.uploaders import UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents")

_ERROR_STATUS: tuple[tuple[type[DocTrackError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (UploadError, status.HTTP_502_BAD_GATEWAY),
    (MetadataError, status.HTTP_502_BAD_GATEWAY),
    (FetchError, status.HTTP_502_BAD_GATEWAY),
)


def _raise_http(exc: DocTrackError) -> NoReturn:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            raise HTTPException(status_code=status_code, detail=exc.message) from exc
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc


async def read_upload(file: Optional[UploadFile]) -> Optional[UploadedFile]:
    if file is None:
        return None
    try:
        content = await file.read()
    finally:
        await file.close()
    return UploadedFile(
        name=file.filename or "",
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )


@router.get("")
async def list_documents(repository: DocumentRepository = Depends(get_document_repository)) -> dict:
    try:
        documents = await repository.list()
    except DocTrackError as exc:
        _raise_http(exc)
    return {"items": serialize_documents(documents)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_document(
    name: str = Form(default=""),
    division: str = Form(default=""),
    status_value: str = Form(default="", alias="status"),
    file: Optional[UploadFile] = File(default=None),
    repository: DocumentRepository = Depends(get_document_repository),
) -> dict:
    uploaded = await read_upload(file)
    try:
        document = await repository.create(name, division, status_value, uploaded)
    except DocTrackError as exc:
        if isinstance(exc, MetadataError):
            logger.error("document_create_orphaned file_url=%s", exc.file_url)
        _raise_http(exc)
    return document.to_record()


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    repository: DocumentRepository = Depends(get_document_repository),
) -> Response:
    try:
        await repository.delete(document_id)
    except DocTrackError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
