# ==============================================================================
# File-Backed Identity Store
# ==============================================================================
"""
IdentityStore backed by a small JSON document on disk.

Writes go to a temporary file that is then renamed over the target, so a
crash mid-write leaves the previous document intact.
"""

import json
import logging
import os
import threading
from pathlib import Path

from sitepulse.base.identity_store import IdentityStore

logger = logging.getLogger(__name__)


class FileIdentityStore(IdentityStore):
    """JSON file key-value store, safe for use from multiple threads."""

    def __init__(self, path: Path | str):
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable identity file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get(self, key: str) -> str | None:
        with self._lock:
            value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._dump(data)
            return True
