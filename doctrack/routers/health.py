from fastapi import APIRouter

from ..config import settings

router = APIRouter()


@router.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@router.get("/healthz")
def healthz() -> dict[str, object]:
    return {
        "status": "ok",
        "metadata_backend": settings.metadata.backend,
        "blob_configured": settings.blob.has_write_credentials,
    }
