"""
Baseline Store - Key-value persistence for baseline anchors

Backends:
- InMemoryBaselineStore: process-local dict (default, tests)
- JsonFileBaselineStore: single JSON file, survives restarts
- RedisBaselineStore: Redis with TTL, shared across service instances

Values must be JSON-serializable. Writes are not transactional.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class BaselineStore(ABC):
    """Minimal key-value interface used by the baseline manager"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value or None if absent"""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key (no-op if absent)"""


class InMemoryBaselineStore(BaselineStore):

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return json.loads(value) if value is not None else None

    def set(self, key: str, value: Any) -> None:
        # Serialize so callers never share mutable state with the store
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBaselineStore(BaselineStore):
    """Stores all keys in one JSON document on disk"""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[BASELINE] Could not read {self.path}: {e}")
            return {}

    def _save(self, data: Dict[str, Any]):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class RedisBaselineStore(BaselineStore):
    """
    Redis-backed store with TTL.

    Usage:
        store = RedisBaselineStore("redis://localhost:6379/0")
        store.set("MON_1A2B3C:referenceNosePosition", {"x": 0.5, "y": 0.5})
    """

    KEY_PREFIX = "examwatch:baseline:"

    def __init__(self, redis_url: str, ttl: int = 86400):
        self.redis_url = redis_url
        self.ttl = ttl
        self._client = None

    @property
    def client(self):
        """Lazy load Redis client"""
        if self._client is None:
            import redis

            self._client = redis.from_url(self.redis_url, decode_responses=True)
            logger.info(f"[BASELINE] Connected to Redis: {self.redis_url}")
        return self._client

    def get(self, key: str) -> Optional[Any]:
        value = self.client.get(f"{self.KEY_PREFIX}{key}")
        return json.loads(value) if value else None

    def set(self, key: str, value: Any) -> None:
        self.client.setex(f"{self.KEY_PREFIX}{key}", self.ttl, json.dumps(value))

    def delete(self, key: str) -> None:
        self.client.delete(f"{self.KEY_PREFIX}{key}")


def create_store(backend: str, path: str = "", redis_url: str = "", ttl: int = 86400) -> BaselineStore:
    """
    Build a store from configuration.

    Args:
        backend: 'memory', 'file' or 'redis'
        path: JSON file path (file backend)
        redis_url: Redis connection URL (redis backend)
        ttl: Key TTL in seconds (redis backend)
    """
    backend = backend.lower()
    if backend == "memory":
        return InMemoryBaselineStore()
    if backend == "file":
        return JsonFileBaselineStore(path)
    if backend == "redis":
        return RedisBaselineStore(redis_url, ttl=ttl)
    raise ValueError(f"Unknown baseline store backend: {backend}")
