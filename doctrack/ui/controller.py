from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..models.documents import Document, ViewModeEnum
from ..services.errors import DocTrackError
from ..services.repository import DocumentRepository
from ..services.uploaders import UploadedFile
from .render import ViewRenderer
from .state import AppState, filter_documents, normalize_division_filter, normalize_status_filter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenTarget:
    """Where ``open_document`` points: a cached upload or the stored URL."""

    url: Optional[str] = None
    file: Optional[UploadedFile] = None

    @property
    def is_cached(self) -> bool:
        return self.file is not None


class AppController:
    """Owns the UI state of one browser session.

    Handlers sequence the loading/submitting flags around repository calls
    and re-render after every change. Only one create or delete may be in
    flight at a time; extra submissions are ignored while ``is_submitting``.
    """

    def __init__(self, repository: DocumentRepository, renderer: Optional[ViewRenderer] = None) -> None:
        self.repository = repository
        self.renderer = renderer or ViewRenderer()
        self.state = AppState()
        # Files uploaded during this session, keyed by document id.
        self._preview_cache: dict[int, UploadedFile] = {}

    # --- rendering -------------------------------------------------------
    def _render(self) -> None:
        self.renderer.render(self.state)

    def _render_documents(self) -> None:
        self.renderer.render_documents(self.state)

    @property
    def visible_documents(self) -> list[Document]:
        return filter_documents(self.state.documents, self.state.filters)

    # --- loading ---------------------------------------------------------
    async def initialize(self) -> None:
        """Start the page afresh: default filters, no modals, empty preview cache."""
        self.state = AppState()
        self._preview_cache.clear()
        await self.load()

    async def load(self) -> None:
        state = self.state
        state.is_loading = True
        state.error_message = None
        self._render()
        try:
            state.documents = await self.repository.list()
        except DocTrackError as exc:
            logger.warning("documents_load_failed reason=%s", exc.message)
            state.error_message = exc.message
            state.documents = []
        finally:
            state.is_loading = False
            self._render()

    # --- filters & view --------------------------------------------------
    def set_filters(
        self,
        division: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> None:
        filters = self.state.filters
        new_division = normalize_division_filter(division) if division is not None else filters.division
        new_status = normalize_status_filter(status) if status is not None else filters.status
        filters.division = new_division
        filters.status = new_status
        if search is not None:
            filters.search = search
        self._render_documents()

    def set_view(self, mode: ViewModeEnum | str) -> None:
        self.state.current_view = ViewModeEnum(mode)
        self._render_documents()

    # --- upload modal ----------------------------------------------------
    def open_upload_modal(self) -> None:
        self.state.show_upload_modal = True
        self._render()

    def close_upload_modal(self) -> None:
        self.state.show_upload_modal = False
        self.state.is_submitting = False
        self._render()

    async def submit_upload(
        self,
        name: str,
        division: str,
        status: str,
        file: Optional[UploadedFile],
    ) -> bool:
        if self.state.is_submitting:
            return False

        self.state.is_submitting = True
        self._render()
        try:
            document = await self.repository.create(name, division, status, file)
        except DocTrackError as exc:
            self.state.notification = f"Upload failed: {exc.message}"
            return False
        finally:
            self.state.is_submitting = False
            self._render()

        if file is not None:
            self._preview_cache[document.id] = file
        self.close_upload_modal()
        await self.load()
        return True

    # --- delete modal ----------------------------------------------------
    def request_delete(self, document_id: int) -> None:
        self.state.document_to_delete = next(
            (document for document in self.state.documents if document.id == document_id),
            None,
        )
        self.state.delete_acknowledged = False
        self._render()

    def set_delete_acknowledged(self, acknowledged: bool) -> None:
        if self.state.document_to_delete is None:
            return
        self.state.delete_acknowledged = acknowledged
        self._render()

    def close_delete_modal(self) -> None:
        self.state.document_to_delete = None
        self.state.delete_acknowledged = False
        self.state.is_submitting = False
        self._render()

    async def confirm_delete(self) -> bool:
        target = self.state.document_to_delete
        if target is None or not self.state.delete_acknowledged or self.state.is_submitting:
            return False

        self.state.is_submitting = True
        self._render()
        try:
            await self.repository.delete(target.id)
        except DocTrackError as exc:
            self.state.notification = f"Deletion failed: {exc.message}"
            return False
        finally:
            self.state.is_submitting = False
            self._render()

        self._preview_cache.pop(target.id, None)
        self.close_delete_modal()
        await self.load()
        return True

    # --- dismissal -------------------------------------------------------
    def handle_escape(self) -> None:
        if self.state.show_upload_modal:
            self.close_upload_modal()
        if self.state.document_to_delete is not None:
            self.close_delete_modal()

    def handle_backdrop_click(self) -> None:
        self.handle_escape()

    def dismiss_notification(self) -> None:
        self.state.notification = None
        self._render()

    # --- preview ---------------------------------------------------------
    def open_document(self, document_id: int) -> Optional[OpenTarget]:
        document = next((doc for doc in self.state.documents if doc.id == document_id), None)
        if document is None:
            return None
        cached = self._preview_cache.get(document.id)
        if cached is not None:
            return OpenTarget(file=cached)
        return OpenTarget(url=document.file_url)
