"""Key-value persistence gateways for dashboard snapshots."""

from __future__ import annotations

from typing import Protocol

from django.core.cache import BaseCache, caches


class PersistenceGateway(Protocol):
    """Minimal key-value store read at session start and written on autosave."""

    def read(self, key: str) -> str | None:
        """Return the stored text for `key`, or None when absent."""

    def write(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove `key`; a missing key is not an error."""


class CachePersistenceGateway:
    """PersistenceGateway backed by a Django cache.

    Args:
        cache: Django cache instance. Defaults to `caches["default"]`.
        key_prefix: Optional prefix scoping keys (e.g. per user).
    """

    def __init__(self, cache: BaseCache | None = None, *, key_prefix: str = "") -> None:
        self._cache = cache if cache is not None else caches["default"]
        self._key_prefix = key_prefix

    @classmethod
    def for_user(cls, user_id: int | str, *, cache: BaseCache | None = None) -> "CachePersistenceGateway":
        """Return a gateway whose keys are scoped to one user."""

        return cls(cache, key_prefix=f"user:{user_id}:")

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def read(self, key: str) -> str | None:
        value = self._cache.get(self._key(key))
        return None if value is None else str(value)

    def write(self, key: str, value: str) -> None:
        self._cache.set(self._key(key), value, timeout=None)

    def delete(self, key: str) -> None:
        self._cache.delete(self._key(key))


class InMemoryPersistenceGateway:
    """Dict-backed PersistenceGateway for a single process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
