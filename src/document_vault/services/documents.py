"""Document persistence with ownership and attachment handling."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol

from document_vault.domain.documents import (
    Document,
    DocumentDraft,
    DocumentPatch,
    ImageAttachment,
    SortField,
    SortOrder,
)
from document_vault.domain.errors import (
    AccessDenied,
    NotFound,
    UploadError,
    ValidationError,
)
from document_vault.domain.models import User
from document_vault.services.attachments import ImageAttachmentService
from document_vault.services.categories import CategoryProvider
from document_vault.services.sessions import SessionManager

_SORT_COLUMNS = {
    SortField.UPLOAD_DATE: "upload_date",
    SortField.TITLE: "title",
    SortField.EXPIRATION_DATE: "expiration_date",
}

_logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Remote document collection working on raw rows."""

    def list_documents(
        self, owner_id: str, order_by: str, descending: bool
    ) -> list[dict[str, object]]:
        """Return rows owned by ``owner_id``, ordered by a column."""

    def get_document(self, document_id: str) -> dict[str, object] | None:
        """Return a row by id, if present."""

    def create_document(self, payload: dict[str, object]) -> dict[str, object]:
        """Insert a row and return it."""

    def update_document(
        self, document_id: str, payload: dict[str, object]
    ) -> dict[str, object]:
        """Update the given columns of a row and return it."""

    def delete_document(self, document_id: str) -> None:
        """Delete a row."""


def assert_owned(document: Document, user: User) -> None:
    """Raise ``AccessDenied`` unless ``user`` owns ``document``."""
    if document.owner_id != user.id:
        raise AccessDenied(f"Access denied to document {document.id}")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DocumentRepository:
    """CRUD over the current user's documents."""

    store: DocumentStore
    session_manager: SessionManager
    attachments: ImageAttachmentService
    categories: CategoryProvider
    purge_detached_images: bool = False
    clock: Callable[[], datetime] = _utc_now

    async def list_for_current_user(
        self,
        sort_by: SortField | str = SortField.UPLOAD_DATE,
        sort_order: SortOrder | str = SortOrder.DESC,
    ) -> list[Document]:
        """Return the signed-in user's documents in the requested order.

        Documents without an expiration date always come last when sorting by
        expiration date, whatever the direction.
        """
        sort_field, order = _parse_sort(sort_by, sort_order)
        user = await self.session_manager.current_user()
        rows = self.store.list_documents(
            user.id,
            order_by=_SORT_COLUMNS[sort_field],
            descending=order is SortOrder.DESC,
        )
        documents = [self._to_document(row) for row in rows]
        if sort_field is SortField.EXPIRATION_DATE:
            return _missing_expiration_last(documents)
        return documents

    async def get_by_id(self, document_id: str) -> Document:
        """Return a document owned by the signed-in user."""
        user = await self.session_manager.current_user()
        document = self._fetch(document_id)
        assert_owned(document, user)
        return document

    async def create(self, draft: DocumentDraft) -> Document:
        """Upload the optional image, then persist a new document."""
        self._validate(draft.title, draft.category_id)
        user = await self.session_manager.current_user()
        attachment = await self.attachments.upload(draft.image) if draft.image else None
        upload_date = draft.upload_date or self.clock()
        payload: dict[str, object] = {
            "owner_id": user.id,
            "title": draft.title,
            "category_id": draft.category_id,
            "store": draft.store or "",
            "upload_date": upload_date.isoformat(),
            "expiration_date": _to_text(draft.expiration_date),
            "notes": draft.notes or "",
            "revision": 0,
            **_attachment_columns(attachment),
        }
        row = await self._persist(
            lambda: self.store.create_document(payload), attachment
        )
        document = self._to_document(row)
        _logger.info("Created document %s for %s", document.id, user.id)
        return document

    async def update(self, document_id: str, patch: DocumentPatch) -> Document:
        """Apply a patch to a document owned by the signed-in user."""
        user = await self.session_manager.current_user()
        existing = self._fetch(document_id)
        assert_owned(existing, user)

        changes = patch.changes()
        if "title" in changes:
            self._validate_title(changes["title"])
        if "category_id" in changes:
            self._validate_category(changes["category_id"])
        payload: dict[str, object] = {
            column: _to_text(value) for column, value in changes.items()
        }

        attachment: ImageAttachment | None = None
        if patch.image_changed:
            if patch.image is not None:
                attachment = await self.attachments.upload(patch.image)
            payload.update(_attachment_columns(attachment))
        payload["revision"] = existing.revision + 1

        row = await self._persist(
            lambda: self.store.update_document(document_id, payload), attachment
        )
        if patch.image_changed and existing.has_image:
            await self._purge_detached(existing.image_file_id)
        return self._to_document(row)

    async def delete(self, document_id: str) -> None:
        """Delete a document owned by the signed-in user."""
        user = await self.session_manager.current_user()
        existing = self._fetch(document_id)
        assert_owned(existing, user)
        self.store.delete_document(document_id)
        _logger.info("Deleted document %s", document_id)
        if existing.has_image:
            await self._purge_detached(existing.image_file_id)

    def _fetch(self, document_id: str) -> Document:
        row = self.store.get_document(document_id)
        if row is None:
            raise NotFound(f"Document {document_id} not found")
        return self._to_document(row)

    async def _persist(
        self,
        write: Callable[[], dict[str, object]],
        attachment: ImageAttachment | None,
    ) -> dict[str, object]:
        """Run a record write, removing a fresh upload if the write fails."""
        try:
            return write()
        except Exception:
            if attachment is not None:
                _logger.warning(
                    "Persisting document failed, removing uploaded blob %s",
                    attachment.file_id,
                )
                try:
                    await self.attachments.delete(attachment.file_id)
                except UploadError:
                    _logger.exception("Blob %s is orphaned", attachment.file_id)
            raise

    async def _purge_detached(self, file_id: str) -> None:
        if not self.purge_detached_images:
            return
        try:
            await self.attachments.delete(file_id)
        except UploadError:
            _logger.exception("Failed to purge detached blob %s", file_id)

    def _validate(self, title: str | None, category_id: str | None) -> None:
        self._validate_title(title)
        self._validate_category(category_id)

    @staticmethod
    def _validate_title(title: object) -> None:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required")

    def _validate_category(self, category_id: object) -> None:
        if not self.categories.has_categories():
            return
        if not isinstance(category_id, str) or not category_id.strip():
            raise ValidationError("Category is required")

    def _to_document(self, row: dict[str, object]) -> Document:
        image_url = _optional_text(row.get("image_url"))
        image_file_id = _optional_text(row.get("image_file_id"))
        if (image_url is None) != (image_file_id is None):
            _logger.warning(
                "Document %s has a partial attachment reference, ignoring it",
                row.get("id"),
            )
            image_url = image_file_id = None
        category_id = str(row.get("category_id") or "")
        upload_date = (
            _parse_datetime(row.get("upload_date"))
            or _parse_datetime(row.get("created_at"))
            or self.clock()
        )
        return Document(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]),
            title=str(row.get("title") or ""),
            category_id=category_id,
            category_name=self.categories.resolve_name(category_id),
            upload_date=upload_date,
            store=_optional_text(row.get("store")),
            expiration_date=_parse_date(row.get("expiration_date")),
            notes=_optional_text(row.get("notes")),
            image_url=image_url,
            image_file_id=image_file_id,
            revision=int(row.get("revision") or 0),
        )


def _parse_sort(
    sort_by: SortField | str, sort_order: SortOrder | str
) -> tuple[SortField, SortOrder]:
    try:
        return SortField(sort_by), SortOrder(sort_order)
    except ValueError as exc:
        raise ValidationError(f"Unsupported sort: {sort_by} {sort_order}") from exc


def _attachment_columns(attachment: ImageAttachment | None) -> dict[str, str]:
    if attachment is None:
        return {"image_url": "", "image_file_id": ""}
    return {"image_url": attachment.url, "image_file_id": attachment.file_id}


def _missing_expiration_last(documents: list[Document]) -> list[Document]:
    dated = [document for document in documents if document.expiration_date]
    undated = [document for document in documents if not document.expiration_date]
    return dated + undated


def _to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            _logger.warning("Ignoring unparseable timestamp %r", value)
    return None


def _parse_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            _logger.warning("Ignoring unparseable date %r", value)
    return None
