"""Authenticated session lifecycle."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from document_vault.domain.errors import RateLimited, SessionConflict
from document_vault.domain.models import Session, User

_logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    """Remote auth endpoint.

    Implementations raise the typed errors from ``document_vault.domain.errors``.
    """

    def create_identity(self, name: str, email: str, password: str) -> User:
        """Register a new identity."""

    def create_session(self, email: str, password: str) -> Session:
        """Open a session with email and password."""

    def restore_session(self, token: str) -> Session:
        """Re-open a session from a persisted token."""

    def get_current_session(self) -> Session:
        """Return the active session."""

    def get_current_identity(self) -> User:
        """Return the identity behind the active session."""

    def update_name(self, name: str) -> User:
        """Rename the current identity."""

    def update_password(self, new_password: str, current_password: str) -> None:
        """Change the password of the current identity."""

    def delete_session(self) -> None:
        """Invalidate the active session."""


@dataclass
class SessionManager:
    """Creates, resumes and destroys the authenticated session."""

    gateway: AuthGateway
    retry_delay_seconds: float = 1.5
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def login(self, email: str, password: str) -> Session:
        """Open a session, retrying once if the endpoint is rate limited."""
        try:
            return self._open_session(email, password)
        except RateLimited:
            _logger.warning(
                "Login rate limited, retrying once in %ss", self.retry_delay_seconds
            )
        await self.sleep(self.retry_delay_seconds)
        return self._open_session(email, password)

    async def register(self, name: str, email: str, password: str) -> Session:
        """Create an identity and sign it in."""
        user = self.gateway.create_identity(name, email, password)
        _logger.info("Registered identity %s", user.id)
        return await self.login(email, password)

    async def resume(self, token: str) -> Session:
        """Resume a session from a persisted token."""
        return self.gateway.restore_session(token)

    async def current_user(self) -> User:
        """Return the signed-in user or raise ``Unauthenticated``."""
        return self.gateway.get_current_identity()

    async def logout(self) -> None:
        """Invalidate the remote session."""
        self.gateway.delete_session()

    async def change_password(self, current_password: str, new_password: str) -> None:
        """Change the password of the signed-in user."""
        self.gateway.update_password(new_password, current_password)

    async def update_name(self, name: str) -> User:
        """Rename the signed-in user."""
        return self.gateway.update_name(name)

    def _open_session(self, email: str, password: str) -> Session:
        try:
            return self.gateway.create_session(email, password)
        except SessionConflict:
            _logger.info("Session already active, reusing it")
            return self.gateway.get_current_session()
