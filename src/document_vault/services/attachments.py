"""Image attachment uploads to blob storage."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from document_vault.domain.documents import ImageAsset, ImageAttachment
from document_vault.domain.errors import NetworkError, UploadError

DEFAULT_FILE_NAME = "document.jpg"
DEFAULT_MIME_TYPE = "image/jpeg"

_logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Remote object storage."""

    def create_file(
        self,
        bucket_id: str,
        file_id: str,
        content: bytes,
        mime_type: str,
        file_name: str,
    ) -> str:
        """Store bytes under ``file_id``, labelled with a display name."""

    def delete_file(self, bucket_id: str, file_id: str) -> None:
        """Remove a stored file."""


def _unique_file_id() -> str:
    return uuid4().hex


@dataclass
class ImageAttachmentService:
    """Uploads local images and derives their public view URL."""

    blob_store: BlobStore
    endpoint: str
    project_id: str
    bucket_id: str
    id_factory: Callable[[], str] = _unique_file_id

    async def upload(self, asset: ImageAsset) -> ImageAttachment:
        """Upload an image and return the stored attachment."""
        file_name = asset.file_name or DEFAULT_FILE_NAME
        mime_type = asset.mime_type or DEFAULT_MIME_TYPE
        try:
            size_bytes = asset.path.stat().st_size
            content = asset.path.read_bytes()
        except OSError as exc:
            raise UploadError(f"Cannot read image {asset.path}: {exc}") from exc

        try:
            file_id = self.blob_store.create_file(
                self.bucket_id, self.id_factory(), content, mime_type, file_name
            )
        except NetworkError as exc:
            raise UploadError(str(exc)) from exc
        _logger.info(
            "Uploaded %s as %s (%s bytes, %s)", file_name, file_id, size_bytes, mime_type
        )
        return ImageAttachment(
            file_id=file_id,
            url=self.view_url(file_id),
            mime_type=mime_type,
            size_bytes=size_bytes,
        )

    async def delete(self, file_id: str) -> None:
        """Remove a stored image. Never called implicitly by uploads."""
        try:
            self.blob_store.delete_file(self.bucket_id, file_id)
        except NetworkError as exc:
            raise UploadError(str(exc)) from exc
        _logger.info("Deleted blob %s", file_id)

    def view_url(self, file_id: str) -> str:
        """Return the public view URL for a stored file."""
        return (
            f"{self.endpoint.rstrip('/')}/storage/buckets/{self.bucket_id}"
            f"/files/{file_id}/view?project={self.project_id}"
        )
