"""Domain models for identities and categories."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents the signed-in principal."""

    id: str
    name: str
    email: str
    registration_date: datetime | None


@dataclass(frozen=True)
class Session:
    """Represents an authenticated session."""

    token: str
    user_id: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Static document category."""

    id: str
    name: str
