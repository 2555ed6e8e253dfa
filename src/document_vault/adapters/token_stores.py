"""Local key/value stores for the session token."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from document_vault.services.auth_flow import TokenStore

_logger = logging.getLogger(__name__)


@dataclass
class InMemoryTokenStore(TokenStore):
    """Process-local token store."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class JsonFileTokenStore(TokenStore):
    """Token store persisted as a small JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value, creating the file if needed."""
        values = self._load()
        values[key] = value
        self._save(values)

    def remove(self, key: str) -> None:
        """Remove a value if present."""
        values = self._load()
        if values.pop(key, None) is not None:
            self._save(values)

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError):
            _logger.warning("Token file %s is unreadable, ignoring it", self.path)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _save(self, values: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values), encoding="utf-8")
