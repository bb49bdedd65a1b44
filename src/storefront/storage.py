"""Persistence ports for client-side cart state.

A storage maps a namespace key to one JSON-serialisable value. The cart
store writes through on every change and reads once at startup.
"""

import json
import threading
from pathlib import Path
from typing import Any, Protocol


class CartStorage(Protocol):
    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, value: Any) -> None: ...


class MemoryCartStorage:
    """Keeps values in a dict. Values are copied through JSON so callers can't alias them."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._records: dict[str, str] = {key: json.dumps(value) for key, value in (initial or {}).items()}

    def load(self, key: str) -> Any | None:
        raw = self._records.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> None:
        self._records[key] = json.dumps(value)

    def put_raw(self, key: str, raw: str) -> None:
        """Store raw text, valid JSON or not."""
        self._records[key] = raw


class JsonFileCartStorage:
    """One JSON document on disk holding a record per namespace.

    Writes go to a temporary file that replaces the original, so a crash
    mid-write leaves the previous state intact.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        content = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(content, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return content

    def load(self, key: str) -> Any | None:
        with self._lock:
            return self._read_all().get(key)

    def save(self, key: str, value: Any) -> None:
        with self._lock:
            try:
                records = self._read_all()
            except ValueError:
                records = {}
            records[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
            tmp.replace(self.path)
