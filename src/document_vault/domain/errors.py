"""Typed failures raised by the vault layer.

Adapters translate raw remote errors into these classes once, at the
boundary, so services never inspect remote error messages.
"""


class VaultError(Exception):
    """Base class for every vault failure."""


class AuthenticationError(VaultError):
    """Credentials were rejected by the auth endpoint."""


class RateLimited(VaultError):
    """The auth endpoint asked the client to slow down."""


class SessionConflict(VaultError):
    """A session is already active for this identity."""


class Unauthenticated(VaultError):
    """No signed-in session could be resolved."""


class AccessDenied(VaultError):
    """The document belongs to another user."""


class NotFound(VaultError):
    """The requested document does not exist."""


class ValidationError(VaultError):
    """Input is missing a required field."""


class UploadError(VaultError):
    """An attachment could not be read, stored or removed."""


class NetworkError(VaultError):
    """Generic transport or remote failure."""
