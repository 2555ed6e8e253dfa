"""Supabase-backed auth gateway."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TypeVar

import httpx
from supabase import (
    AuthError,
    AuthRetryableError,
    AuthSessionMissingError,
    AuthUnknownError,
    Client,
)

from document_vault.domain.errors import (
    AuthenticationError,
    NetworkError,
    RateLimited,
    SessionConflict,
    Unauthenticated,
    VaultError,
)
from document_vault.domain.models import Session, User
from document_vault.services.sessions import AuthGateway

_HTTP_CONFLICT = 409
_HTTP_TOO_MANY_REQUESTS = 429
_RATE_LIMIT_CODES = {
    "over_request_rate_limit",
    "over_email_send_rate_limit",
    "over_sms_send_rate_limit",
}
_SESSION_GONE_CODES = {
    "bad_jwt",
    "refresh_token_not_found",
    "session_expired",
    "session_not_found",
}

T = TypeVar("T")


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Supabase Auth implementation.

    The refresh token doubles as the opaque session token, since it is what
    ``restore_session`` needs to re-open the session on the next start.
    """

    client: Client

    def create_identity(self, name: str, email: str, password: str) -> User:
        """Sign up a new identity with a display name."""
        response = _call(
            lambda: self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"name": name}},
                }
            )
        )
        if response.user is None:
            raise AuthenticationError("Registration failed")
        return _to_user(response.user)

    def create_session(self, email: str, password: str) -> Session:
        """Sign in with email and password."""
        response = _call(
            lambda: self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        )
        if response.session is None or response.user is None:
            raise AuthenticationError("Login failed")
        return _to_session(response.session.refresh_token, response.user)

    def restore_session(self, token: str) -> Session:
        """Re-open a session from a stored refresh token."""
        response = _call(lambda: self.client.auth.refresh_session(token))
        if response.session is None or response.user is None:
            raise Unauthenticated("Stored session has expired")
        return _to_session(response.session.refresh_token, response.user)

    def get_current_session(self) -> Session:
        """Return the session held by the client."""
        session = _call(self.client.auth.get_session)
        if session is None:
            raise Unauthenticated("No active session")
        return _to_session(session.refresh_token, session.user)

    def get_current_identity(self) -> User:
        """Return the user behind the current session."""
        response = _call(self.client.auth.get_user)
        if response is None or response.user is None:
            raise Unauthenticated("No active session")
        return _to_user(response.user)

    def update_name(self, name: str) -> User:
        """Store a new display name in the user metadata."""
        response = _call(lambda: self.client.auth.update_user({"data": {"name": name}}))
        return _to_user(response.user)

    def update_password(self, new_password: str, current_password: str) -> None:
        """Verify the current password, then set the new one."""
        user = self.get_current_identity()
        _call(
            lambda: self.client.auth.sign_in_with_password(
                {"email": user.email, "password": current_password}
            )
        )
        _call(lambda: self.client.auth.update_user({"password": new_password}))

    def delete_session(self) -> None:
        """Sign out the current session."""
        if _call(self.client.auth.get_session) is None:
            raise Unauthenticated("No active session")
        _call(self.client.auth.sign_out)


def _call(func: Callable[[], T]) -> T:
    try:
        return func()
    except AuthError as exc:
        raise classify_auth_error(exc) from exc
    except httpx.HTTPError as exc:
        raise NetworkError(str(exc)) from exc


def classify_auth_error(exc: AuthError) -> VaultError:
    """Map a Supabase auth error onto the vault error taxonomy."""
    message = str(exc)
    if isinstance(exc, AuthSessionMissingError):
        return Unauthenticated(message)
    if isinstance(exc, AuthRetryableError):
        return NetworkError(message)
    status = getattr(exc, "status", None)
    code = getattr(exc, "code", None)
    if status == _HTTP_TOO_MANY_REQUESTS or code in _RATE_LIMIT_CODES:
        return RateLimited(message)
    if status == _HTTP_CONFLICT:
        return SessionConflict(message)
    if code in _SESSION_GONE_CODES:
        return Unauthenticated(message)
    if isinstance(exc, AuthUnknownError):
        return NetworkError(message)
    return AuthenticationError(message)


def _to_user(user: object) -> User:
    metadata = getattr(user, "user_metadata", None) or {}
    return User(
        id=str(user.id),
        name=str(metadata.get("name", "")),
        email=str(getattr(user, "email", None) or ""),
        registration_date=_parse_timestamp(getattr(user, "created_at", None)),
    )


def _to_session(token: str, user: object) -> Session:
    return Session(token=token, user_id=str(user.id), created_at=datetime.now(tz=UTC))


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
