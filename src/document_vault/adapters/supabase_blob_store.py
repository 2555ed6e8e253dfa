"""Supabase Storage blob store."""

from dataclasses import dataclass

import httpx
from supabase import Client, StorageException

from document_vault.domain.errors import NetworkError, UploadError
from document_vault.services.attachments import BlobStore


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores attachments as objects keyed by their file id."""

    client: Client

    def create_file(
        self,
        bucket_id: str,
        file_id: str,
        content: bytes,
        mime_type: str,
        file_name: str,
    ) -> str:
        """Upload bytes and return the file id.

        The object path is the file id; the display name travels as object
        metadata.
        """
        try:
            self.client.storage.from_(bucket_id).upload(
                path=file_id,
                file=content,
                file_options={
                    "content-type": mime_type,
                    "metadata": {"name": file_name},
                },
            )
        except StorageException as exc:
            raise UploadError(f"Upload of {file_id} failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc)) from exc
        return file_id

    def delete_file(self, bucket_id: str, file_id: str) -> None:
        """Remove an object from the bucket."""
        try:
            self.client.storage.from_(bucket_id).remove([file_id])
        except StorageException as exc:
            raise UploadError(f"Removal of {file_id} failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc)) from exc
