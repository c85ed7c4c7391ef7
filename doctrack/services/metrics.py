from __future__ import annotations

from prometheus_client import Counter


DOCUMENTS_CREATED_COUNTER = Counter(
    "doctrack_documents_created_total",
    "Documents created",
    ["division"],
)

DOCUMENTS_DELETED_COUNTER = Counter(
    "doctrack_documents_deleted_total",
    "Documents deleted",
)

DOCUMENT_FAILURES_COUNTER = Counter(
    "doctrack_document_failures_total",
    "Create/delete failures by stage",
    ["operation", "stage"],
)


def record_document_created(division: str) -> None:
    DOCUMENTS_CREATED_COUNTER.labels(division=division).inc()


def record_document_deleted() -> None:
    DOCUMENTS_DELETED_COUNTER.inc()


def record_failure(operation: str, stage: str) -> None:
    DOCUMENT_FAILURES_COUNTER.labels(operation=operation, stage=stage).inc()
