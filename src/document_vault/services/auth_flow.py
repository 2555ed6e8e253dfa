"""Sign-in flow that keeps the persisted session token in step."""

import logging
from dataclasses import dataclass
from typing import Protocol

from document_vault.domain.errors import (
    AuthenticationError,
    Unauthenticated,
    ValidationError,
)
from document_vault.domain.models import Session
from document_vault.services.sessions import SessionManager

SESSION_TOKEN_KEY = "userToken"
MIN_PASSWORD_LENGTH = 6

_logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Local key/value storage for the session token."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value."""

    def remove(self, key: str) -> None:
        """Remove a value if present."""


@dataclass
class AuthFlowService:
    """Login, registration and sign-out as seen by the presentation layer."""

    session_manager: SessionManager
    token_store: TokenStore

    def is_signed_in(self) -> bool:
        """Return whether a session token is stored."""
        return self.token_store.get(SESSION_TOKEN_KEY) is not None

    async def restore(self) -> Session | None:
        """Resume the persisted session at process start."""
        token = self.token_store.get(SESSION_TOKEN_KEY)
        if token is None:
            return None
        try:
            return await self.session_manager.resume(token)
        except (Unauthenticated, AuthenticationError):
            _logger.info("Stored session token is no longer valid, discarding it")
            self.token_store.remove(SESSION_TOKEN_KEY)
            return None

    async def login(self, email: str, password: str) -> Session:
        """Sign in and persist the session token."""
        session = await self.session_manager.login(email, password)
        self.token_store.set(SESSION_TOKEN_KEY, session.token)
        return session

    async def register(self, name: str, email: str, password: str) -> Session:
        """Register, sign in and persist the session token."""
        session = await self.session_manager.register(name, email, password)
        self.token_store.set(SESSION_TOKEN_KEY, session.token)
        return session

    async def sign_out(self) -> None:
        """Invalidate the remote session and forget the local token."""
        try:
            await self.session_manager.logout()
        except Unauthenticated:
            _logger.info("Remote session already gone")
        finally:
            self.token_store.remove(SESSION_TOKEN_KEY)

    async def change_password(self, current_password: str, new_password: str) -> None:
        """Change the password, then sign out so the user logs in again."""
        if not current_password or not new_password:
            raise ValidationError("All password fields are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        await self.session_manager.change_password(current_password, new_password)
        await self.sign_out()
