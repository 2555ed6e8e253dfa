"""Supabase-backed document collection."""

from dataclasses import dataclass

import httpx
from supabase import Client, PostgrestAPIError

from document_vault.domain.errors import NetworkError, NotFound
from document_vault.services.documents import DocumentStore

_COLUMNS = (
    "id, owner_id, title, category_id, store, upload_date, expiration_date, "
    "notes, image_url, image_file_id, revision, created_at"
)
_INVALID_TEXT_REPRESENTATION = "22P02"


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Supabase implementation for the documents table."""

    client: Client
    table_name: str = "documents"

    def list_documents(
        self, owner_id: str, order_by: str, descending: bool
    ) -> list[dict[str, object]]:
        """Return a user's rows, oldest first among equal sort keys."""
        return _execute(
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("owner_id", owner_id)
            .order(order_by, desc=descending)
            .order("created_at", desc=False)
        )

    def get_document(self, document_id: str) -> dict[str, object] | None:
        """Return a row by id, if present."""
        rows = _execute(
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("id", document_id)
            .limit(1),
            empty_on_codes={_INVALID_TEXT_REPRESENTATION},
        )
        return rows[0] if rows else None

    def create_document(self, payload: dict[str, object]) -> dict[str, object]:
        """Insert a row and return it."""
        rows = _execute(self.client.table(self.table_name).insert(payload))
        if not rows:
            raise NetworkError("Failed to create document")
        return rows[0]

    def update_document(
        self, document_id: str, payload: dict[str, object]
    ) -> dict[str, object]:
        """Update a row and return it."""
        rows = _execute(
            self.client.table(self.table_name).update(payload).eq("id", document_id)
        )
        if not rows:
            raise NotFound(f"Document {document_id} not found")
        return rows[0]

    def delete_document(self, document_id: str) -> None:
        """Delete a row."""
        _execute(self.client.table(self.table_name).delete().eq("id", document_id))


def _execute(
    query: object, empty_on_codes: set[str] | None = None
) -> list[dict[str, object]]:
    """Run a query; ``empty_on_codes`` lists Postgres codes that mean "no rows"."""
    try:
        response = query.execute()
    except PostgrestAPIError as exc:
        if empty_on_codes and exc.code in empty_on_codes:
            return []
        raise NetworkError(exc.message or str(exc)) from exc
    except httpx.HTTPError as exc:
        raise NetworkError(str(exc)) from exc
    return list(response.data or [])
