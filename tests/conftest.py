from __future__ import annotations

import json
import pathlib
import sys
from typing import Callable, Iterator, Optional

import boto3
import pytest
from fastapi.testclient import TestClient

ROOT_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from doctrack.config import settings
from doctrack.dependencies.repository import get_document_repository
from doctrack.main import app
from doctrack.services.metadata_store import LocalMetadataStore
from doctrack.services.repository import DocumentRepository
from doctrack.services.upload_gateway import UploadResult
from doctrack.services.uploaders import UploadedFile
from doctrack.ui.sessions import get_session_registry


class FakeUploader:
    """Stands in for blob storage and remembers every file it was given."""

    def __init__(self, base_url: str = "https://blob.example.test") -> None:
        self.base_url = base_url
        self.uploads: list[UploadedFile] = []
        self.error: Optional[Exception] = None

    async def upload(self, file: UploadedFile) -> UploadResult:
        if self.error is not None:
            raise self.error
        self.uploads.append(file)
        pathname = f"documents/{len(self.uploads)}/{file.name}"
        return UploadResult(
            url=f"{self.base_url}/{pathname}",
            pathname=pathname,
            content_type=file.content_type,
            content_disposition="inline",
            size=file.size,
        )


def _document_record(doc_id: int, name: str = "Policy", division: str = "HR", status: str = "Approved", file_name: Optional[str] = None) -> dict:
    file_name = file_name or f"doc-{doc_id}.pdf"
    return {
        "id": doc_id,
        "name": name,
        "division": division,
        "status": status,
        "fileName": file_name,
        "fileUrl": f"https://blob.example.test/seed/{file_name}",
    }


@pytest.fixture()
def document_record() -> Callable[..., dict]:
    """Build a stored metadata record in its camelCase wire form."""
    return _document_record


@pytest.fixture()
def metadata_path(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "doctrack_db.json"


@pytest.fixture()
def seed_documents(metadata_path: pathlib.Path) -> Callable[[list[dict]], None]:
    """Write raw records straight into the local metadata file."""

    def _seed(records: list[dict]) -> None:
        metadata_path.write_text(json.dumps(records), encoding="utf-8")

    return _seed


@pytest.fixture()
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture()
def repository(metadata_path: pathlib.Path, uploader: FakeUploader) -> DocumentRepository:
    return DocumentRepository(LocalMetadataStore(metadata_path), uploader)


@pytest.fixture()
def client(repository: DocumentRepository) -> Iterator[TestClient]:
    """FastAPI TestClient wired to a local metadata file and a fake uploader."""
    registry = get_session_registry()
    registry.clear()
    app.dependency_overrides[get_document_repository] = lambda: repository
    try:
        with TestClient(app) as _client:
            yield _client
    finally:
        app.dependency_overrides.pop(get_document_repository, None)
        registry.clear()


@pytest.fixture()
def blob_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.blob, "access_key_id", "testing")
    monkeypatch.setattr(settings.blob, "secret_access_key", "testing")
    monkeypatch.setattr(settings.blob, "region", "us-east-1")
    monkeypatch.setattr(settings.blob, "s3_endpoint_url", None)
    monkeypatch.setattr(settings.blob, "public_base_url", None)


@pytest.fixture()
def mock_s3(blob_credentials: None, monkeypatch: pytest.MonkeyPatch):
    from moto import mock_aws

    with mock_aws():
        s3 = boto3.client("s3", region_name="us-east-1")
        bucket = "test-doctrack-bucket"
        s3.create_bucket(Bucket=bucket)
        monkeypatch.setattr(settings.blob, "s3_bucket", bucket)
        yield s3
