from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..services.errors import ConfigurationError, UploadError, ValidationError
from ..services.upload_gateway import BlobUploadGateway, get_upload_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/upload")
async def upload_blob(
    request: Request,
    filename: Optional[str] = Query(default=None),
    gateway: BlobUploadGateway = Depends(get_upload_gateway),
) -> JSONResponse:
    """Store the request payload in blob storage and return its public URL.

    Accepts either ``?filename=`` with the raw file as the body, or a
    multipart form whose ``file`` field carries the upload.
    """
    content_type = request.headers.get("content-type", "")
    if filename is None and content_type.startswith("multipart/form-data"):
        try:
            form = await request.form()
        except StarletteHTTPException as exc:
            return _error(400, str(exc.detail))
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            return _error(400, "File field is required")
        filename = upload.filename
        body = await upload.read()
        payload_type = upload.content_type
    else:
        body = await request.body()
        payload_type = content_type or None

    try:
        result = await run_in_threadpool(gateway.upload, filename, body, payload_type)
    except ConfigurationError as exc:
        return _error(500, exc.message)
    except ValidationError as exc:
        return _error(400, exc.message)
    except UploadError as exc:
        logger.error("upload_endpoint_failed filename=%s reason=%s", filename, exc.message)
        return _error(500, exc.message)

    return JSONResponse(status_code=200, content=result.to_response())


@router.api_route("/upload", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def upload_method_not_allowed() -> JSONResponse:
    response = _error(405, "Method not allowed")
    response.headers["Allow"] = "POST"
    return response
