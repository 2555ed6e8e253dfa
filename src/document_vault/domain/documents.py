"""Domain models for vault documents and their attachments."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, field_validator

_PATCHABLE_FIELDS = ("title", "category_id", "store", "expiration_date", "notes")


class SortField(StrEnum):
    """Fields the document list can be ordered by."""

    UPLOAD_DATE = "uploadDate"
    TITLE = "title"
    EXPIRATION_DATE = "expirationDate"


class SortOrder(StrEnum):
    """Ordering direction."""

    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class ImageAttachment:
    """An image stored in the blob store."""

    file_id: str
    url: str
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class Document:
    """A receipt, warranty or record owned by a single user."""

    id: str
    owner_id: str
    title: str
    category_id: str
    category_name: str
    upload_date: datetime
    store: str | None = None
    expiration_date: date | None = None
    notes: str | None = None
    image_url: str | None = None
    image_file_id: str | None = None
    revision: int = 0

    @property
    def has_image(self) -> bool:
        """Return whether an attachment is referenced."""
        return self.image_file_id is not None


@dataclass(frozen=True)
class DocumentFilter:
    """Predicate for the in-memory document view."""

    text: str | None = None
    category_id: str | None = None


class ImageAsset(BaseModel):
    """A local image picked by the user."""

    path: Path
    file_name: str | None = None
    mime_type: str | None = None


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class DocumentDraft(BaseModel):
    """Fields for a new document."""

    title: str = ""
    category_id: str = ""
    store: str | None = None
    upload_date: datetime | None = None
    expiration_date: date | None = None
    notes: str | None = None
    image: ImageAsset | None = None

    @field_validator("upload_date", "expiration_date", mode="before")
    @classmethod
    def blank_dates_to_none(cls, value: object) -> object:
        """Treat empty date strings as missing."""
        return _blank_to_none(value)


class DocumentPatch(BaseModel):
    """Changes to an existing document.

    Only fields passed explicitly are written; a field passed as ``None`` or
    an empty string is stored as an empty string. ``image_changed`` switches
    the attachment handling: with ``image`` set the attachment is replaced,
    without it the attachment is cleared.
    """

    title: str | None = None
    category_id: str | None = None
    store: str | None = None
    expiration_date: date | None = None
    notes: str | None = None
    image_changed: bool = False
    image: ImageAsset | None = None

    @field_validator("expiration_date", mode="before")
    @classmethod
    def blank_date_to_none(cls, value: object) -> object:
        """Treat an empty date string as missing."""
        return _blank_to_none(value)

    def changes(self) -> dict[str, object]:
        """Return the scalar fields that were supplied."""
        return {
            name: getattr(self, name)
            for name in _PATCHABLE_FIELDS
            if name in self.model_fields_set
        }
