"""File-backed key/value storage (get_item/set_item/remove_item, string values)."""
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)


class ThemePreferences:
    """Per-user dark mode flag, stored as the string "true"/"false"."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    @staticmethod
    def _key(user_id: str) -> str:
        return f"darkMode:{user_id}"

    def is_dark(self, user_id: str) -> bool:
        return self.storage.get_item(self._key(user_id)) == "true"

    def set_dark(self, user_id: str, dark: bool) -> bool:
        self.storage.set_item(self._key(user_id), "true" if dark else "false")
        return dark

    def toggle(self, user_id: str) -> bool:
        return self.set_dark(user_id, not self.is_dark(user_id))
