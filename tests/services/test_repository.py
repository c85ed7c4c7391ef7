from __future__ import annotations

from typing import Optional

import pytest

from doctrack.models.documents import DivisionEnum, Document, DocumentStatusEnum
from doctrack.services.errors import FetchError, MetadataError, NotFoundError, UploadError, ValidationError
from doctrack.services.metadata_store import MetadataStore
from doctrack.services.repository import DocumentRepository, next_document_id
from doctrack.services.uploaders import UploadedFile


class InMemoryMetadataStore(MetadataStore):
    def __init__(self, documents: Optional[list[Document]] = None) -> None:
        self.documents = list(documents or [])
        self.reads = 0
        self.writes = 0
        self.write_error: Optional[Exception] = None

    async def list_all(self) -> list[Document]:
        self.reads += 1
        return list(self.documents)

    async def replace_all(self, documents: list[Document]) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.writes += 1
        self.documents = list(documents)


def _doc(doc_id: int, name: str = "Policy") -> Document:
    return Document(
        id=doc_id,
        name=name,
        division=DivisionEnum.HR,
        status=DocumentStatusEnum.APPROVED,
        file_name=f"{name.lower()}.pdf",
        file_url=f"https://blob.example.test/{doc_id}",
    )


def _file(name: str = "a.pdf", content: bytes = b"%PDF-1.7 body") -> UploadedFile:
    return UploadedFile(name=name, content=content, content_type="application/pdf")


def test_next_document_id_uses_max_plus_one() -> None:
    assert next_document_id([]) == 1
    assert next_document_id([_doc(1), _doc(7), _doc(3)]) == 8


@pytest.mark.asyncio
async def test_create_on_empty_collection_assigns_id_one(uploader) -> None:
    store = InMemoryMetadataStore()
    repo = DocumentRepository(store, uploader)

    document = await repo.create("Quarterly report", "Finance", "Pending", _file("a.pdf"))

    assert document.id == 1
    assert document.file_name == "a.pdf"
    assert document.division == DivisionEnum.FINANCE
    assert [doc.id for doc in store.documents] == [1]


@pytest.mark.asyncio
async def test_ids_follow_max_even_after_gaps(uploader) -> None:
    store = InMemoryMetadataStore([_doc(1), _doc(3)])
    repo = DocumentRepository(store, uploader)

    created = await repo.create("Next", "HR", "Approved", _file())
    assert created.id == 4

    await repo.delete(1)
    again = await repo.create("After delete", "HR", "Approved", _file())
    assert again.id == 5
    assert [doc.id for doc in store.documents] == [3, 4, 5]


@pytest.mark.asyncio
async def test_list_after_create_contains_uploaded_url(uploader) -> None:
    store = InMemoryMetadataStore()
    repo = DocumentRepository(store, uploader)

    created = await repo.create("Handbook", "HR", "Approved", _file("handbook.pdf"))
    listed = await repo.list()

    assert created in listed
    assert listed[0].file_url == "https://blob.example.test/documents/1/handbook.pdf"


@pytest.mark.asyncio
async def test_empty_file_is_rejected_without_upload(uploader) -> None:
    store = InMemoryMetadataStore([_doc(1)])
    repo = DocumentRepository(store, uploader)

    with pytest.raises(ValidationError, match="File is required"):
        await repo.create("Empty", "HR", "Approved", _file(content=b""))

    assert uploader.uploads == []
    assert store.reads == 0
    assert len(store.documents) == 1


@pytest.mark.asyncio
async def test_missing_file_is_rejected(uploader) -> None:
    repo = DocumentRepository(InMemoryMetadataStore(), uploader)

    with pytest.raises(ValidationError):
        await repo.create("No file", "HR", "Approved", None)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("name", "division", "status"),
    [("   ", "HR", "Approved"), ("Doc", "Legal", "Approved"), ("Doc", "HR", "Archived")],
)
async def test_invalid_fields_are_rejected_before_upload(uploader, name, division, status) -> None:
    repo = DocumentRepository(InMemoryMetadataStore(), uploader)

    with pytest.raises(ValidationError):
        await repo.create(name, division, status, _file())
    assert uploader.uploads == []


@pytest.mark.asyncio
async def test_upload_failure_leaves_metadata_untouched(uploader) -> None:
    store = InMemoryMetadataStore([_doc(1)])
    uploader.error = UploadError("Failed to upload to S3: boom")
    repo = DocumentRepository(store, uploader)

    with pytest.raises(UploadError):
        await repo.create("Doc", "HR", "Approved", _file())

    assert store.reads == 0
    assert store.writes == 0
    assert len(store.documents) == 1


@pytest.mark.asyncio
async def test_metadata_write_failure_is_reported_with_orphaned_url(uploader) -> None:
    store = InMemoryMetadataStore()
    store.write_error = FetchError("Request failed with status 503", status_code=503)
    repo = DocumentRepository(store, uploader)

    with pytest.raises(MetadataError) as excinfo:
        await repo.create("Doc", "HR", "Approved", _file("orphan.pdf"))

    assert excinfo.value.file_url == "https://blob.example.test/documents/1/orphan.pdf"
    assert "503" in excinfo.value.message
    assert len(uploader.uploads) == 1
    assert store.documents == []


@pytest.mark.asyncio
async def test_delete_removes_only_the_target(uploader) -> None:
    store = InMemoryMetadataStore([_doc(1, "One"), _doc(2, "Two"), _doc(3, "Three")])
    repo = DocumentRepository(store, uploader)

    await repo.delete(2)

    remaining = await repo.list()
    assert [doc.id for doc in remaining] == [1, 3]
    assert remaining[0] == _doc(1, "One")
    assert remaining[1] == _doc(3, "Three")


@pytest.mark.asyncio
async def test_delete_unknown_id_reports_not_found(uploader) -> None:
    store = InMemoryMetadataStore([_doc(1)])
    repo = DocumentRepository(store, uploader)

    with pytest.raises(NotFoundError, match="Document not found"):
        await repo.delete(99)

    assert store.writes == 0
    assert [doc.id for doc in store.documents] == [1]
