"""
Persistence for the last used sheet link, user details and records.

The controller talks to a small key-value interface so the core never
reaches for ambient state.  ``JsonFileStore`` keeps everything in one
pretty-printed JSON file; ``MemoryStore`` is used by tests and one-shot
CLI runs.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)

SHEET_LINK_KEY = "sheet_link"
USER_DETAILS_KEY = "user_details"
RECORDS_KEY = "records"


class KeyValueStore(ABC):
    """Minimal interface: missing keys read as *default*."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """Key-value store backed by a single JSON file.

    A missing or corrupt file reads as empty; the next ``set`` rewrites it.
    """

    def __init__(self, path: str):
        self.path = path
        self._data = self._load()

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {self.path}: not a JSON object")
            return {}
        return data

    def _save(self) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, default=str)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value
        self._save()
