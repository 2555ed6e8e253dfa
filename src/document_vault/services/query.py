"""In-memory derived views over fetched documents."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from document_vault.domain.documents import Document, DocumentFilter


@dataclass(frozen=True)
class QueryEngine:
    """Pure filtering helpers; inputs are never mutated."""

    def filter(
        self, documents: Sequence[Document], predicate: DocumentFilter | None = None
    ) -> list[Document]:
        """Return documents matching the text and category predicates."""
        predicate = predicate or DocumentFilter()
        needle = (predicate.text or "").lower()
        return [
            document
            for document in documents
            if _matches_text(document, needle)
            and _matches_category(document, predicate.category_id)
        ]

    def expired(self, documents: Iterable[Document], today: date) -> list[Document]:
        """Return documents whose expiration date has passed."""
        return [document for document in documents if is_expired(document, today)]


def is_expired(document: Document, today: date) -> bool:
    """Return whether the document expired strictly before ``today``."""
    return document.expiration_date is not None and document.expiration_date < today


def _matches_text(document: Document, needle: str) -> bool:
    if not needle:
        return True
    fields = (document.title, document.store, document.notes)
    return any(needle in field.lower() for field in fields if field)


def _matches_category(document: Document, category_id: str | None) -> bool:
    if not category_id:
        return True
    return document.category_id == category_id
