from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..models.documents import DivisionEnum, Document, DocumentStatusEnum, ViewModeEnum

ALL = "all"

DIVISIONS: tuple[DivisionEnum, ...] = tuple(DivisionEnum)
STATUSES: tuple[DocumentStatusEnum, ...] = tuple(DocumentStatusEnum)


@dataclass
class FilterState:
    division: str = ALL
    status: str = ALL
    search: str = ""


@dataclass
class AppState:
    documents: list[Document] = field(default_factory=list)
    current_view: ViewModeEnum = ViewModeEnum.GRID
    filters: FilterState = field(default_factory=FilterState)
    show_upload_modal: bool = False
    document_to_delete: Optional[Document] = None
    delete_acknowledged: bool = False
    is_loading: bool = True
    error_message: Optional[str] = None
    is_submitting: bool = False
    notification: Optional[str] = None


def normalize_division_filter(value: str) -> str:
    if value == ALL:
        return ALL
    try:
        return DivisionEnum(value).value
    except ValueError as exc:
        raise ValueError(f"Unknown division filter: {value!r}") from exc


def normalize_status_filter(value: str) -> str:
    if value == ALL:
        return ALL
    try:
        return DocumentStatusEnum(value).value
    except ValueError as exc:
        raise ValueError(f"Unknown status filter: {value!r}") from exc


def document_matches(document: Document, filters: FilterState) -> bool:
    needle = filters.search.lower()
    search_ok = needle in document.name.lower() or needle in document.file_name.lower()
    division_ok = filters.division == ALL or document.division.value == filters.division
    status_ok = filters.status == ALL or document.status.value == filters.status
    return division_ok and status_ok and search_ok


def filter_documents(documents: list[Document], filters: FilterState) -> list[Document]:
    """Visible subset of ``documents``, original order preserved."""
    return [document for document in documents if document_matches(document, filters)]
