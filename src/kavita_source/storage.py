"""Local key-value storage for credentials and the cached session."""

import json
import os
from pathlib import Path
from typing import Any

from kavita_source.models import Credentials


URL_KEY = "url"
API_KEY_KEY = "apiKey"
USER_KEY = "user"


def default_base_path() -> Path:
    """Resolve the storage directory, honouring KAVITA_HOME."""
    override = os.environ.get("KAVITA_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".kavita"


class Storage:
    """Persists a small JSON document of plugin settings and session state."""

    def __init__(self, base_path: Path | None = None) -> None:
        self.base_path = base_path or default_base_path()
        self.storage_path = self.base_path / "storage.json"

    def _ensure_dirs(self) -> None:
        """Create base directory if it doesn't exist."""
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, Any]:
        if not self.storage_path.exists():
            return {}

        data = json.loads(self.storage_path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        self._ensure_dirs()
        self.storage_path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default."""
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store value under key and write through to disk."""
        data = self._load()
        data[key] = value
        self._dump(data)

    def get_credentials(self) -> Credentials:
        """Load the configured URL and API key (empty strings when unset)."""
        return Credentials(
            url=self.get(URL_KEY) or "",
            api_key=self.get(API_KEY_KEY) or "",
        )

    def save_credentials(self, credentials: Credentials) -> None:
        """Save credentials and drop the session issued for the old ones."""
        data = self._load()
        data[URL_KEY] = credentials.url
        data[API_KEY_KEY] = credentials.api_key
        data.pop(USER_KEY, None)
        self._dump(data)
