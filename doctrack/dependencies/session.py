from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from starlette.responses import Response

from ..config import settings
from ..services.repository import DocumentRepository
from ..ui.controller import AppController
from ..ui.sessions import SessionRegistry, get_session_registry
from .repository import get_document_repository


@dataclass
class UiSession:
    token: str
    controller: AppController
    is_new: bool


def _existing_session(request: Request, registry: SessionRegistry) -> Optional[UiSession]:
    token = request.cookies.get(settings.cookie_name)
    controller = registry.get(token)
    if token is None or controller is None:
        return None
    request.state.session_id = token[:8]
    return UiSession(token=token, controller=controller, is_new=False)


async def get_ui_session(
    request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
    repository: DocumentRepository = Depends(get_document_repository),
) -> UiSession:
    """Session for the page itself; starts one when the cookie is missing or stale."""
    existing = _existing_session(request, registry)
    if existing is not None:
        return existing
    token, controller = registry.create(repository)
    request.state.session_id = token[:8]
    return UiSession(token=token, controller=controller, is_new=True)


async def get_optional_ui_session(
    request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Optional[UiSession]:
    return _existing_session(request, registry)


async def get_active_ui_session(
    ui_session: Optional[UiSession] = Depends(get_optional_ui_session),
) -> UiSession:
    """Session for form posts and fragments; without one, send the browser to the page."""
    if ui_session is None:
        raise HTTPException(status_code=status.HTTP_303_SEE_OTHER, headers={"Location": "/"})
    return ui_session


def attach_session_cookie(response: Response, ui_session: UiSession) -> Response:
    if ui_session.is_new:
        response.set_cookie(
            key=settings.cookie_name,
            value=ui_session.token,
            max_age=settings.session_ttl_hours * 3600,
            httponly=True,
            secure=settings.environment == "production",
            samesite="lax",
            path="/",
        )
    return response
