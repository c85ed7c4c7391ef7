from __future__ import annotations

from fastapi import HTTPException, status

from ..services.errors import ConfigurationError
from ..services.repository import DocumentRepository, get_repository


def get_document_repository() -> DocumentRepository:
    try:
        return get_repository()
    except ConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message) from exc
