from __future__ import annotations

import pytest

from doctrack.models.documents import Document
from doctrack.ui.state import FilterState, filter_documents, normalize_division_filter, normalize_status_filter


def _doc(doc_id: int, name: str, division: str, status: str, file_name: str) -> Document:
    return Document.model_validate(
        {
            "id": doc_id,
            "name": name,
            "division": division,
            "status": status,
            "fileName": file_name,
            "fileUrl": f"https://blob.example.test/{file_name}",
        }
    )


DOCUMENTS = [
    _doc(3, "Payroll Calendar", "Finance", "Approved", "payroll-2024.xlsx"),
    _doc(1, "Onboarding Guide", "HR", "Pending", "welcome.pdf"),
    _doc(2, "API Design Notes", "Engineering", "Rejected", "api-notes.md"),
    _doc(5, "Brand Book", "Marketing", "Approved", "BRAND.pdf"),
]


def test_default_filters_return_everything_in_order() -> None:
    assert filter_documents(DOCUMENTS, FilterState()) == DOCUMENTS


def test_division_and_status_are_combined() -> None:
    approved = filter_documents(DOCUMENTS, FilterState(status="Approved"))
    assert [doc.id for doc in approved] == [3, 5]

    finance_approved = filter_documents(DOCUMENTS, FilterState(division="Finance", status="Approved"))
    assert [doc.id for doc in finance_approved] == [3]

    assert filter_documents(DOCUMENTS, FilterState(division="HR", status="Approved")) == []


def test_search_matches_name_or_file_name_case_insensitively() -> None:
    by_name = filter_documents(DOCUMENTS, FilterState(search="guide"))
    assert [doc.id for doc in by_name] == [1]

    by_file_name = filter_documents(DOCUMENTS, FilterState(search="brand.PDF"))
    assert [doc.id for doc in by_file_name] == [5]

    by_extension = filter_documents(DOCUMENTS, FilterState(search=".pdf"))
    assert [doc.id for doc in by_extension] == [1, 5]


def test_search_combines_with_other_filters() -> None:
    result = filter_documents(DOCUMENTS, FilterState(division="Marketing", search="pdf"))
    assert [doc.id for doc in result] == [5]


def test_filter_values_are_validated() -> None:
    assert normalize_division_filter("all") == "all"
    assert normalize_division_filter("Engineering") == "Engineering"
    assert normalize_status_filter("Rejected") == "Rejected"
    with pytest.raises(ValueError):
        normalize_division_filter("Legal")
    with pytest.raises(ValueError):
        normalize_status_filter("approved")
