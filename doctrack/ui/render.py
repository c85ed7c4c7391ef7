"""HTML rendering for the document browser.

Every ``render_*`` function is a pure function of :class:`AppState`; the
controller re-invokes them after each state change.
"""

from __future__ import annotations

from html import escape
from pathlib import PurePosixPath
from typing import Optional

from ..models.documents import Document, ViewModeEnum
from .state import ALL, DIVISIONS, STATUSES, AppState, filter_documents

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "svg", "webp"}
TEXT_EXTENSIONS = {"txt", "md", "doc", "docx"}

EMPTY_MESSAGE = "No documents found. Try uploading one!"


def file_icon_kind(file_name: str) -> str:
    extension = PurePosixPath(file_name).suffix.lstrip(".").lower()
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension == "pdf":
        return "pdf"
    if extension in TEXT_EXTENSIONS:
        return "text"
    return "file"


def _disabled(flag: bool) -> str:
    return " disabled" if flag else ""


def _selected(flag: bool) -> str:
    return " selected" if flag else ""


def _options(values, current: Optional[str], all_label: Optional[str] = None) -> str:
    parts = []
    if all_label is not None:
        parts.append(f'<option value="{ALL}"{_selected(current == ALL)}>{escape(all_label)}</option>')
    for value in values:
        parts.append(f'<option value="{escape(value.value)}"{_selected(current == value.value)}>{escape(value.value)}</option>')
    return "".join(parts)


def render_sidebar(state: AppState) -> str:
    filters = state.filters
    return (
        '<aside class="sidebar">'
        '<h1 class="sidebar-header">DocTrack</h1>'
        '<form class="sidebar-section" method="post" action="/ui/filters">'
        "<h3>Filters</h3>"
        '<label for="division-filter">Filter by Division</label>'
        f'<select id="division-filter" name="division"{_disabled(state.is_loading)}>'
        f"{_options(DIVISIONS, filters.division, 'All Divisions')}</select>"
        '<label for="status-filter">Filter by Status</label>'
        f'<select id="status-filter" name="status"{_disabled(state.is_loading)}>'
        f"{_options(STATUSES, filters.status, 'All Statuses')}</select>"
        f'<input type="hidden" name="search" value="{escape(filters.search)}">'
        f'<button type="submit" class="btn btn-secondary"{_disabled(state.is_loading)}>Apply</button>'
        "</form>"
        "</aside>"
    )


def render_header(state: AppState) -> str:
    filters = state.filters
    grid_active = " active" if state.current_view == ViewModeEnum.GRID else ""
    list_active = " active" if state.current_view == ViewModeEnum.LIST else ""
    return (
        '<header class="main-header">'
        '<form class="search-bar" method="post" action="/ui/filters">'
        f'<input type="hidden" name="division" value="{escape(filters.division)}">'
        f'<input type="hidden" name="status" value="{escape(filters.status)}">'
        '<input type="search" id="search-input" name="search" placeholder="Search documents..." '
        f'value="{escape(filters.search)}"{_disabled(state.is_loading)}>'
        "</form>"
        '<div class="header-actions">'
        '<form class="view-toggle" method="post" action="/ui/view">'
        f'<button name="mode" value="grid" class="view-btn{grid_active}" aria-label="Grid View"{_disabled(state.is_loading)}>Grid</button>'
        f'<button name="mode" value="list" class="view-btn{list_active}" aria-label="List View"{_disabled(state.is_loading)}>List</button>'
        "</form>"
        '<form method="post" action="/ui/upload/open">'
        f'<button id="upload-btn" class="btn btn-primary"{_disabled(state.is_loading)}>Upload Document</button>'
        "</form>"
        "</div>"
        "</header>"
    )


def _document_meta(document: Document) -> str:
    status_class = f"status-{document.status.value.lower()}"
    return (
        '<div class="doc-meta">'
        f'<span class="doc-division">{escape(document.division.value)}</span>'
        f'<span class="doc-status {status_class}">{escape(document.status.value)}</span>'
        "</div>"
    )


def _delete_button(document: Document) -> str:
    return (
        f'<form class="delete-form" method="post" action="/ui/documents/{document.id}/delete">'
        f'<button class="delete-btn" aria-label="Delete document {escape(document.name)}">Delete</button>'
        "</form>"
    )


def render_document_card(document: Document) -> str:
    return (
        f'<div class="document-card" data-doc-id="{document.id}">'
        f"{_delete_button(document)}"
        f'<a class="doc-open" href="/ui/documents/{document.id}/open" target="_blank" '
        f'aria-label="Open document {escape(document.name)}">'
        f'<div class="doc-icon icon-{file_icon_kind(document.file_name)}"></div>'
        f'<h4 class="doc-name">{escape(document.name)}</h4>'
        "</a>"
        f"{_document_meta(document)}"
        "</div>"
    )


def render_document_list_item(document: Document) -> str:
    return (
        f'<div class="document-list-item" data-doc-id="{document.id}">'
        f'<a class="doc-open" href="/ui/documents/{document.id}/open" target="_blank" '
        f'aria-label="Open document {escape(document.name)}">'
        f'<div class="doc-icon icon-{file_icon_kind(document.file_name)}"></div>'
        f'<div class="doc-name-div"><h4 class="doc-name">{escape(document.name)}</h4></div>'
        "</a>"
        f"{_document_meta(document)}"
        f"{_delete_button(document)}"
        "</div>"
    )


def render_documents(state: AppState) -> str:
    visible = filter_documents(state.documents, state.filters)
    if not visible:
        return f'<div class="message-container"><p class="no-documents-message">{EMPTY_MESSAGE}</p></div>'
    if state.current_view == ViewModeEnum.GRID:
        items = "".join(render_document_card(document) for document in visible)
        return f'<div class="documents-grid">{items}</div>'
    items = "".join(render_document_list_item(document) for document in visible)
    return f'<div class="documents-list">{items}</div>'


def render_main_content(state: AppState) -> str:
    if state.is_loading:
        return '<div class="message-container"><div class="loading-spinner"></div><p>Loading documents...</p></div>'
    if state.error_message:
        return (
            '<div class="message-container"><div class="error-message">'
            "<h4>Failed to load documents</h4>"
            f"<p>{escape(state.error_message)}</p>"
            "<p>Please try again later.</p>"
            '<form method="post" action="/ui/reload"><button class="btn btn-secondary">Retry</button></form>'
            "</div></div>"
        )
    return render_documents(state)


def _modal_backdrop() -> str:
    return (
        '<form class="modal-backdrop" method="post" action="/ui/backdrop">'
        '<button class="modal-backdrop-button" aria-label="Close"></button>'
        "</form>"
    )


def render_upload_modal(state: AppState) -> str:
    submit_label = "Uploading..." if state.is_submitting else "Upload"
    return (
        '<div class="modal-overlay visible" id="upload-modal-overlay">'
        f"{_modal_backdrop()}"
        '<div class="modal-content" role="dialog" aria-labelledby="upload-modal-title">'
        '<div class="modal-header">'
        '<h2 id="upload-modal-title">Upload New Document</h2>'
        '<form method="post" action="/ui/upload/close"><button class="modal-close" aria-label="Close">&times;</button></form>'
        "</div>"
        '<form id="upload-form" method="post" action="/ui/upload" enctype="multipart/form-data">'
        '<div class="form-group"><label for="doc-name">Document Name</label>'
        '<input type="text" id="doc-name" name="name" required></div>'
        '<div class="form-group"><label for="doc-division">Division</label>'
        f'<select id="doc-division" name="division" required>{_options(DIVISIONS, None)}</select></div>'
        '<div class="form-group"><label for="doc-status">Status</label>'
        f'<select id="doc-status" name="status" required>{_options(STATUSES, None)}</select></div>'
        '<div class="form-group"><label for="doc-file">File</label>'
        '<input type="file" id="doc-file" name="file" required></div>'
        '<div class="form-actions">'
        '<button type="submit" formaction="/ui/upload/close" formnovalidate class="btn btn-secondary" id="upload-cancel">Cancel</button>'
        f'<button type="submit" class="btn btn-primary" id="upload-submit-btn"{_disabled(state.is_submitting)}>{submit_label}</button>'
        "</div>"
        "</form>"
        "</div>"
        "</div>"
    )


def render_delete_modal(state: AppState) -> str:
    document = state.document_to_delete
    if document is None:
        return ""
    checked = " checked" if state.delete_acknowledged else ""
    confirm_disabled = _disabled(not state.delete_acknowledged or state.is_submitting)
    return (
        '<div class="modal-overlay visible" id="delete-modal-overlay">'
        f"{_modal_backdrop()}"
        '<div class="modal-content delete-modal-content" role="alertdialog" '
        'aria-labelledby="delete-modal-title" aria-describedby="delete-modal-desc">'
        '<div class="modal-header">'
        '<h2 id="delete-modal-title">Confirm Deletion</h2>'
        '<form method="post" action="/ui/delete/close"><button class="modal-close" aria-label="Close">&times;</button></form>'
        "</div>"
        '<p id="delete-modal-desc" class="delete-warning">Are you sure you want to permanently delete: '
        f'<strong>"{escape(document.name)}"</strong>? This action cannot be undone.</p>'
        '<form class="form-group confirmation-checkbox-group" method="post" action="/ui/delete/acknowledge">'
        f'<input type="checkbox" id="delete-confirm-checkbox" name="acknowledged" value="on"{checked}>'
        '<label for="delete-confirm-checkbox">I understand and wish to proceed.</label>'
        '<button type="submit" class="btn btn-link">Update</button>'
        "</form>"
        '<div class="form-actions">'
        '<form method="post" action="/ui/delete/close"><button class="btn btn-secondary" id="delete-cancel-btn">Cancel</button></form>'
        '<form id="delete-form" method="post" action="/ui/delete/confirm">'
        f'<button type="submit" class="btn btn-danger" id="delete-confirm-btn"{confirm_disabled}>Delete</button>'
        "</form>"
        "</div>"
        "</div>"
        "</div>"
    )


def render_notification(state: AppState) -> str:
    if not state.notification:
        return ""
    return (
        '<div class="notification" role="alert">'
        f"<p>{escape(state.notification)}</p>"
        '<form method="post" action="/ui/notification/dismiss"><button class="btn btn-secondary">OK</button></form>'
        "</div>"
    )


def render_page(state: AppState) -> str:
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8"><title>DocTrack</title></head><body>'
        '<div id="root">'
        f"{render_sidebar(state)}"
        '<main class="main-content">'
        f"{render_header(state)}"
        f'<div class="documents-container">{render_main_content(state)}</div>'
        "</main>"
        f"{render_upload_modal(state) if state.show_upload_modal else ''}"
        f"{render_delete_modal(state)}"
        f"{render_notification(state)}"
        "</div>"
        "</body></html>"
    )


class ViewRenderer:
    """Holds the most recent markup produced for one browser session."""

    def __init__(self) -> None:
        self.page: str = ""
        self.documents: str = ""
        self.render_count = 0

    def render(self, state: AppState) -> str:
        self.page = render_page(state)
        self.documents = render_main_content(state)
        self.render_count += 1
        return self.page

    def render_documents(self, state: AppState) -> str:
        self.documents = render_main_content(state)
        self.render_count += 1
        return self.documents
