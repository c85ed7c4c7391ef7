from .documents import (
    DivisionEnum,
    Document,
    DocumentStatusEnum,
    ViewModeEnum,
    serialize_documents,
)

__all__ = [
    "DivisionEnum",
    "Document",
    "DocumentStatusEnum",
    "ViewModeEnum",
    "serialize_documents",
]
