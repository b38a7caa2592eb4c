"""JSON-file backed key-value storage for device-local state."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from workout_tracker.services.snapshots import KeyValueStorage

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileStorage(KeyValueStorage):
    """Stores every key in a single JSON document on disk."""

    path: Path

    def get(self, key: str) -> object | None:
        """Return the value stored under a key."""
        return self._read().get(key)

    def set(self, key: str, value: object) -> None:
        """Store a value under a key."""
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            _logger.warning("Ignoring unreadable local storage file: %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=True), encoding="utf-8")
        tmp_path.replace(self.path)
