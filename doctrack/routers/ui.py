from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from ..dependencies.repository import get_document_repository
from ..dependencies.session import (
    UiSession,
    attach_session_cookie,
    get_active_ui_session,
    get_optional_ui_session,
    get_ui_session,
)
from ..services.errors import DocTrackError
from ..services.repository import DocumentRepository
from .documents import read_upload

logger = logging.getLogger(__name__)

router = APIRouter()


# Form posts land back on the page without re-initialising it.
RESUME_URL = "/?resume=1"


def _back_to_page() -> Response:
    return RedirectResponse(RESUME_URL, status_code=303)


@router.get("/", response_class=HTMLResponse)
async def page(
    resume: bool = Query(default=False),
    ui_session: UiSession = Depends(get_ui_session),
) -> Response:
    """Render the document browser.

    A plain visit is a page load: state is reset and the collection fetched
    again. ``?resume=1`` (the target of every form post) shows the current
    state as it is.
    """
    controller = ui_session.controller
    if ui_session.is_new or not resume:
        await controller.initialize()
    markup = controller.renderer.render(controller.state)
    return attach_session_cookie(HTMLResponse(markup), ui_session)


@router.get("/ui/fragments/documents", response_class=HTMLResponse)
async def documents_fragment(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    controller = ui_session.controller
    return HTMLResponse(controller.renderer.render_documents(controller.state))


@router.post("/ui/reload")
async def reload(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    await ui_session.controller.load()
    return _back_to_page()


@router.post("/ui/filters")
async def update_filters(
    division: Optional[str] = Form(default=None),
    status: Optional[str] = Form(default=None),
    search: Optional[str] = Form(default=None),
    ui_session: UiSession = Depends(get_active_ui_session),
) -> Response:
    try:
        ui_session.controller.set_filters(division=division, status=status, search=search)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _back_to_page()


@router.post("/ui/view")
async def set_view(mode: str = Form(...), ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    try:
        ui_session.controller.set_view(mode)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown view mode: {mode}") from exc
    return _back_to_page()


@router.post("/ui/upload/open")
async def open_upload(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.open_upload_modal()
    return _back_to_page()


@router.post("/ui/upload/close")
async def close_upload(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.close_upload_modal()
    return _back_to_page()


@router.post("/ui/upload")
async def submit_upload(
    name: str = Form(default=""),
    division: str = Form(default=""),
    status: str = Form(default=""),
    file: Optional[UploadFile] = File(default=None),
    ui_session: UiSession = Depends(get_active_ui_session),
) -> Response:
    uploaded = await read_upload(file)
    await ui_session.controller.submit_upload(name, division, status, uploaded)
    return _back_to_page()


@router.post("/ui/documents/{document_id}/delete")
async def request_delete(document_id: int, ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.request_delete(document_id)
    return _back_to_page()


@router.post("/ui/delete/acknowledge")
async def acknowledge_delete(
    acknowledged: Optional[str] = Form(default=None),
    ui_session: UiSession = Depends(get_active_ui_session),
) -> Response:
    ui_session.controller.set_delete_acknowledged(acknowledged in {"on", "true", "1"})
    return _back_to_page()


@router.post("/ui/delete/confirm")
async def confirm_delete(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    await ui_session.controller.confirm_delete()
    return _back_to_page()


@router.post("/ui/delete/close")
async def close_delete(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.close_delete_modal()
    return _back_to_page()


@router.post("/ui/escape")
async def escape(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.handle_escape()
    return _back_to_page()


@router.post("/ui/backdrop")
async def backdrop(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.handle_backdrop_click()
    return _back_to_page()


@router.post("/ui/notification/dismiss")
async def dismiss_notification(ui_session: UiSession = Depends(get_active_ui_session)) -> Response:
    ui_session.controller.dismiss_notification()
    return _back_to_page()


@router.get("/ui/documents/{document_id}/open")
async def open_document(
    document_id: int,
    ui_session: Optional[UiSession] = Depends(get_optional_ui_session),
    repository: DocumentRepository = Depends(get_document_repository),
) -> Response:
    if ui_session is None:
        # No page state to consult; resolve the stored URL without starting a session.
        try:
            documents = await repository.list()
        except DocTrackError as exc:
            raise HTTPException(status_code=502, detail=exc.message) from exc
        document = next((doc for doc in documents if doc.id == document_id), None)
        if document is None:
            raise HTTPException(status_code=404, detail="Document not found")
        return RedirectResponse(document.file_url, status_code=307)

    target = ui_session.controller.open_document(document_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Document not found")

    if target.file is not None:
        logger.debug("document_opened_from_cache id=%s", document_id)
        return Response(
            content=target.file.content,
            media_type=target.file.content_type,
            headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(target.file.name)}"},
        )
    return RedirectResponse(target.url or "/", status_code=307)
