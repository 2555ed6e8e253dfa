"""Connectivity probe for the storage endpoint."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from document_vault.domain.errors import NetworkError


class PingClient(Protocol):
    """Interface for checking that the backend is reachable."""

    async def ping(self) -> None:
        """Raise ``NetworkError`` if the backend cannot be reached."""


@dataclass
class HttpxPingClient(PingClient):
    """Ping client using httpx."""

    endpoint: str
    project_id: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, endpoint: str, project_id: str) -> "HttpxPingClient":
        """Create a ping client with a managed httpx session."""
        return cls(
            endpoint=endpoint, project_id=project_id, http_client=httpx.AsyncClient()
        )

    async def ping(self) -> None:
        """Call the endpoint's ping route."""
        url = f"{self.endpoint.rstrip('/')}/ping"
        try:
            response = await self.http_client.get(
                url, headers={"X-Project": self.project_id}, timeout=10
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NetworkError("Connection failed") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
