"""Dependency container wiring for the vault."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from document_vault.adapters.ping_client import HttpxPingClient, PingClient
from document_vault.adapters.supabase_auth_gateway import SupabaseAuthGateway
from document_vault.adapters.supabase_blob_store import SupabaseBlobStore
from document_vault.adapters.supabase_document_store import SupabaseDocumentStore
from document_vault.adapters.token_stores import InMemoryTokenStore, JsonFileTokenStore
from document_vault.config import Settings
from document_vault.services.attachments import ImageAttachmentService
from document_vault.services.auth_flow import AuthFlowService, TokenStore
from document_vault.services.categories import CategoryProvider
from document_vault.services.documents import DocumentRepository
from document_vault.services.query import QueryEngine
from document_vault.services.sessions import SessionManager


@dataclass
class VaultContainer:
    """Holds the process-wide session, configuration and services."""

    settings: Settings
    category_provider: CategoryProvider
    session_manager: SessionManager
    auth_flow: AuthFlowService
    attachment_service: ImageAttachmentService
    document_repository: DocumentRepository
    query_engine: QueryEngine
    ping_client: PingClient
    close_resources: Callable[[], Awaitable[None]]


def build_token_store(settings: Settings) -> TokenStore:
    """Return a file-backed store when a path is configured."""
    if settings.token_store_path:
        return JsonFileTokenStore(Path(settings.token_store_path))
    return InMemoryTokenStore()


def build_container(settings: Settings | None = None) -> VaultContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    category_provider = CategoryProvider()
    session_manager = SessionManager(
        gateway=SupabaseAuthGateway(supabase_client),
        retry_delay_seconds=resolved_settings.login_retry_delay_seconds,
    )
    attachment_service = ImageAttachmentService(
        blob_store=SupabaseBlobStore(supabase_client),
        endpoint=resolved_settings.storage_endpoint,
        project_id=resolved_settings.storage_project_id,
        bucket_id=resolved_settings.storage_bucket_id,
    )
    document_repository = DocumentRepository(
        store=SupabaseDocumentStore(
            supabase_client, table_name=resolved_settings.documents_table
        ),
        session_manager=session_manager,
        attachments=attachment_service,
        categories=category_provider,
        purge_detached_images=resolved_settings.purge_detached_images,
    )
    auth_flow = AuthFlowService(
        session_manager=session_manager,
        token_store=build_token_store(resolved_settings),
    )
    ping_client = HttpxPingClient.create(
        endpoint=resolved_settings.storage_endpoint,
        project_id=resolved_settings.storage_project_id,
    )

    async def close_resources() -> None:
        await ping_client.close()

    return VaultContainer(
        settings=resolved_settings,
        category_provider=category_provider,
        session_manager=session_manager,
        auth_flow=auth_flow,
        attachment_service=attachment_service,
        document_repository=document_repository,
        query_engine=QueryEngine(),
        ping_client=ping_client,
        close_resources=close_resources,
    )
