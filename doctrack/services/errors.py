from __future__ import annotations

from typing import Optional


class DocTrackError(Exception):
    """Base class for failures surfaced to API callers and the UI controller."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(DocTrackError):
    """Required storage configuration (credentials, endpoints) is missing."""


class ValidationError(DocTrackError):
    """Input rejected before any network call was made."""


class UploadError(DocTrackError):
    """The blob upload stage failed; no metadata was written."""


class MetadataError(DocTrackError):
    """Reading or writing metadata failed after the file was uploaded."""

    def __init__(self, message: str, file_url: Optional[str] = None) -> None:
        super().__init__(message)
        self.file_url = file_url


class NotFoundError(DocTrackError):
    pass


class FetchError(DocTrackError):
    """Network failure or non-2xx response from a storage collaborator."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
