from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DivisionEnum(str, Enum):
    HR = "HR"
    FINANCE = "Finance"
    ENGINEERING = "Engineering"
    MARKETING = "Marketing"


class DocumentStatusEnum(str, Enum):
    APPROVED = "Approved"
    PENDING = "Pending"
    REJECTED = "Rejected"


class ViewModeEnum(str, Enum):
    GRID = "grid"
    LIST = "list"


class Document(BaseModel):
    """A tracked document as stored in the metadata collection.

    Records are serialised with camelCase keys (``fileName``, ``fileUrl``) so
    the stored collection stays readable by other clients of the same store.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, use_enum_values=False)

    id: int = Field(gt=0)
    name: str = Field(min_length=1)
    division: DivisionEnum
    status: DocumentStatusEnum
    file_name: str = Field(alias="fileName")
    file_url: str = Field(alias="fileUrl")

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def serialize_documents(documents: list[Document]) -> list[dict]:
    return [document.to_record() for document in documents]
