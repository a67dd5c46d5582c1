"""
Client-side key-value storage with an in-memory fallback.

SafeStorage fronts a persistent store (a JSON file by default) and keeps
working when that store is missing, read-only or corrupt: every operation
falls back to a per-instance dict and logs a warning instead of raising.
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

STORAGE_TEST_KEY = "__storage_test__"


class KeyValueStore(ABC):
    """String-to-string store. Implementations may raise on any call."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class MemoryStore(KeyValueStore):
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class FileStore(KeyValueStore):
    """
    Keeps the whole mapping in one JSON file, rewritten on every change.

    Raises OSError when the file cannot be read or written and ValueError
    when its content is not a JSON object.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object")
        return data

    def _save(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def clear(self) -> None:
        self._save({})


class SafeStorage:
    """
    Never-raising facade over a KeyValueStore.

    The backing store is resolved through ``provider`` on every call; a
    provider returning None means "no store right now" and the in-memory
    mapping is used. Availability is probed once, at construction.
    """

    def __init__(self, provider: Callable[[], Optional[KeyValueStore]]):
        self._provider = provider
        self._memory: Dict[str, str] = {}
        self.available = self._probe()

    @classmethod
    def for_store(cls, store: KeyValueStore) -> "SafeStorage":
        return cls(lambda: store)

    def _probe(self) -> bool:
        try:
            store = self._provider()
            if store is None:
                return False
            store.set_item(STORAGE_TEST_KEY, STORAGE_TEST_KEY)
            store.remove_item(STORAGE_TEST_KEY)
            return True
        except Exception as e:
            logger.warning(f"Persistent storage unavailable, using in-memory fallback: {e}")
            return False

    def _resolve(self) -> Optional[KeyValueStore]:
        try:
            return self._provider()
        except Exception as e:
            logger.warning(f"Could not resolve storage: {e}")
            return None

    def get(self, key: str) -> Optional[str]:
        if not self.available:
            return self._memory.get(key)
        try:
            store = self._resolve()
            return store.get_item(key) if store else self._memory.get(key)
        except Exception as e:
            logger.warning(f"Storage access blocked for key: {key} ({e})")
            return self._memory.get(key)

    def set(self, key: str, value: str) -> None:
        if not self.available:
            self._memory[key] = value
            return
        try:
            store = self._resolve()
            if store:
                store.set_item(key, value)
            else:
                self._memory[key] = value
        except Exception as e:
            logger.warning(f"Storage access blocked. Could not set key: {key} ({e})")
            self._memory[key] = value

    def remove(self, key: str) -> None:
        if not self.available:
            self._memory.pop(key, None)
            return
        try:
            store = self._resolve()
            if store:
                store.remove_item(key)
            else:
                self._memory.pop(key, None)
        except Exception as e:
            logger.warning(f"Storage access blocked. Could not remove key: {key} ({e})")
            self._memory.pop(key, None)

    def clear(self) -> None:
        if not self.available:
            self._memory.clear()
            return
        try:
            store = self._resolve()
            if store:
                store.clear()
            else:
                self._memory.clear()
        except Exception as e:
            logger.warning(f"Storage access blocked. Could not clear storage ({e})")
            self._memory.clear()
