"""
Key-value storage for the signed-in user record.

Mirrors browser local storage: string keys, JSON-serializable object
values, no schema versioning. ``JsonFileStorage`` keeps the record across
process restarts; ``InMemoryStorage`` lasts for the process only.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    def __init__(self) -> None:
        self._items: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> Optional[dict[str, Any]]:
        value = self._items.get(key)
        return dict(value) if value is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        self._items[key] = dict(value)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """All keys in one JSON file, rewritten atomically on every change."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.warning("Session file %s is unreadable, starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[dict[str, Any]]:
        return self._load().get(key)

    def set(self, key: str, value: dict[str, Any]) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
