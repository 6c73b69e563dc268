"""Key-value substrate: string keys mapped to JSON-serialisable values."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract string-keyed store of JSON-serialisable values.

    Implementations must be safe to call from several threads.  Writes
    that fail raise; callers decide whether a failure is fatal.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None``."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any existing value.

        Raises:
            TypeError: If *value* is not JSON-serialisable.
            OSError: If a durable store cannot write.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key* if present."""

    @abstractmethod
    def keys(self, prefix: str = "") -> Iterator[str]:
        """Iterate over the stored keys that start with *prefix*."""


class MemoryKeyValueStore(KeyValueStore):
    """In-process store.  Values are round-tripped through JSON on write so
    behaviour matches :class:`JsonFileKeyValueStore`."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._lock = threading.RLock()
        self._data: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = raw

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> Iterator[str]:
        with self._lock:
            snapshot = [k for k in self._data if k.startswith(prefix)]
        return iter(snapshot)


class JsonFileKeyValueStore(KeyValueStore):
    """Durable store backed by a single JSON document on disk.

    The whole document is loaded once on construction and rewritten
    atomically (temp file + ``os.replace``) on every mutation.  A missing
    file starts empty; an unreadable file is logged and also starts empty
    so a corrupt store never prevents start-up.

    Args:
        path: Location of the JSON document.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = threading.RLock()
        self._data: dict[str, Any] = self._read()

    def get(self, key: str) -> Any | None:
        with self._lock:
            value = self._data.get(key)
        # Hand out copies so callers cannot mutate the cached document.
        return json.loads(json.dumps(value)) if value is not None else None

    def set(self, key: str, value: Any) -> None:
        encoded = json.loads(json.dumps(value))
        with self._lock:
            previous = self._data.get(key)
            self._data[key] = encoded
            try:
                self._flush()
            except OSError:
                if previous is None:
                    self._data.pop(key, None)
                else:
                    self._data[key] = previous
                raise

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            previous = self._data.pop(key)
            try:
                self._flush()
            except OSError:
                self._data[key] = previous
                raise

    def keys(self, prefix: str = "") -> Iterator[str]:
        with self._lock:
            snapshot = [k for k in self._data if k.startswith(prefix)]
        return iter(snapshot)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, Any]:
        if not os.path.exists(self._path):
            logger.info("Store %s does not exist yet; starting empty.", self._path)
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Failed to read store %s; starting empty.", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store %s is not a JSON object; starting empty.", self._path)
            return {}
        logger.info("Loaded %d keys from %s.", len(data), self._path)
        return data

    def _flush(self) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".moodinsights-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
