"""Disk-based response caching for frccli.

Provides :class:`ResponseCache`, consumed by
:class:`~frccli.client.sync_client.SyncClient` and controlled by the
``cache`` section of :class:`~frccli.models.GlobalConfig`.
"""

from frccli.cache.cache import ResponseCache

__all__ = ["ResponseCache"]
