"""Disk-based caching of FRC API GET responses.

Uses :mod:`diskcache` to persist decoded JSON bodies on the filesystem with
a configurable time-to-live. Schedules and results change during an event,
so the default TTL is short (see :class:`~frccli.models.CacheConfig`);
season and event listings benefit the most.

Cache keys are SHA-256 hashes of ``URL|sorted_params`` so that identical
requests resolve to the same entry regardless of parameter ordering.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Optional

import diskcache

from frccli.models import CacheConfig


class ResponseCache:
    """Disk-backed cache of decoded API response bodies.

    Args:
        cache_dir: Root directory for the cache. A ``responses/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        cache = ResponseCache(get_cache_dir(), CacheConfig())
        cache.set("https://frc-api.firstinspires.org/v3.0/2024/events", None, body)
        body = cache.get("https://frc-api.firstinspires.org/v3.0/2024/events")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._directory = Path(cache_dir) / "responses"
        self._cache: Optional[diskcache.Cache] = None
        if config.enabled:
            self._cache = diskcache.Cache(str(self._directory))

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    def get(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Return the cached body for ``url`` + ``params``, or ``None`` on a miss."""
        if self._cache is None:
            return None
        return self._cache.get(self._make_key(url, params))

    def set(self, url: str, params: Optional[dict[str, Any]], body: Any) -> None:
        """Store *body*; ``None`` bodies are not cached."""
        if self._cache is None or body is None:
            return
        self._cache.set(self._make_key(url, params), body, expire=self._config.ttl_seconds)

    def invalidate(self, url: str, params: Optional[dict[str, Any]] = None) -> None:
        """Remove a single entry."""
        if self._cache is not None:
            self._cache.delete(self._make_key(url, params))

    def clear(self) -> int:
        """Remove all entries, returning how many were dropped."""
        if self._cache is None:
            return 0
        return self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``enabled`` plus, when enabled, ``size``, ``directory`` and ``ttl_seconds``."""
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._directory),
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        if self._cache is not None:
            self._cache.close()

    def __enter__(self) -> ResponseCache:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @staticmethod
    def _make_key(url: str, params: Optional[dict[str, Any]]) -> str:
        parts = [url]
        if params:
            parts.append(json.dumps(params, sort_keys=True, default=str))
        return hashlib.sha256("|".join(parts).encode()).hexdigest()
