from __future__ import annotations

import json

import pytest

from doctrack.services.errors import UploadError


def _create(client, name="Expense policy", division="Finance", status="Approved", file=("expenses.pdf", b"%PDF", "application/pdf")):
    files = {"file": file} if file is not None else None
    return client.post(
        "/documents",
        data={"name": name, "division": division, "status": status},
        files=files,
    )


@pytest.mark.integration
def test_create_then_list(client, uploader, metadata_path):
    response = _create(client)

    assert response.status_code == 201
    created = response.json()
    assert created == {
        "id": 1,
        "name": "Expense policy",
        "division": "Finance",
        "status": "Approved",
        "fileName": "expenses.pdf",
        "fileUrl": "https://blob.example.test/documents/1/expenses.pdf",
    }
    assert uploader.uploads[0].content == b"%PDF"

    listing = client.get("/documents")
    assert listing.status_code == 200
    assert listing.json() == {"items": [created]}
    assert json.loads(metadata_path.read_text()) == [created]


@pytest.mark.integration
def test_ids_follow_the_highest_existing_id(client, seed_documents, document_record):
    seed_documents([document_record(2), document_record(9)])

    response = _create(client)

    assert response.status_code == 201
    assert response.json()["id"] == 10


@pytest.mark.integration
def test_empty_file_is_rejected_before_upload(client, uploader):
    response = _create(client, file=("empty.pdf", b"", "application/pdf"))

    assert response.status_code == 400
    assert response.json() == {"detail": "File is required and cannot be empty."}
    assert uploader.uploads == []


@pytest.mark.integration
def test_missing_name_is_rejected(client, uploader):
    response = _create(client, name="   ")

    assert response.status_code == 400
    assert uploader.uploads == []


@pytest.mark.integration
def test_unknown_division_is_rejected(client, uploader):
    response = _create(client, division="Legal")

    assert response.status_code == 400
    assert uploader.uploads == []


@pytest.mark.integration
def test_upload_failure_leaves_collection_untouched(client, uploader, seed_documents, document_record):
    seed_documents([document_record(1)])
    uploader.error = UploadError("Failed to upload to S3: AccessDenied")

    response = _create(client)

    assert response.status_code == 502
    assert response.json() == {"detail": "Failed to upload to S3: AccessDenied"}
    assert [item["id"] for item in client.get("/documents").json()["items"]] == [1]


@pytest.mark.integration
def test_delete_removes_only_the_target(client, seed_documents, document_record):
    seed_documents([document_record(1), document_record(2), document_record(3)])

    response = client.delete("/documents/2")

    assert response.status_code == 204
    assert [item["id"] for item in client.get("/documents").json()["items"]] == [1, 3]

    again = client.delete("/documents/2")
    assert again.status_code == 404
    assert again.json() == {"detail": "Document not found"}
