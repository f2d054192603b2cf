"""
JSON File Storage Implementation

DESIGN DECISION: The default backend is a single JSON document on disk
holding a flat {key: value} object. It behaves like browser local storage:
- Values are strings (the repository puts JSON inside them)
- Every write rewrites the whole document
- No locking: the last writer wins

Writes go to a temporary file first and are moved into place, so a crash
mid-write leaves the previous document intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from finance_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """Key-value storage persisted to one JSON file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not contain a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {self._path}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        self._write_all(data)
        return True

    def clear(self) -> None:
        self._write_all({})

    def keys(self) -> list[str]:
        return list(self._read_all())
