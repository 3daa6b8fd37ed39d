"""Construction of a ready-to-use :class:`~frccli.client.api.FrcApi` from config."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import httpx

from frccli.cache import ResponseCache
from frccli.client.api import FrcApi
from frccli.client.sync_client import SyncClient
from frccli.config import get_cache_dir, resolve_api_token
from frccli.models import GlobalConfig


@contextmanager
def open_api(
    config: GlobalConfig,
    use_cache: bool = True,
    dry_run: bool = False,
    transport: Optional[httpx.BaseTransport] = None,
) -> Iterator[FrcApi]:
    """Yield an :class:`FrcApi` bound to a fresh client, closing it afterwards.

    The API token is resolved eagerly so that a missing token fails before
    any request is attempted; dry runs need no token.

    Raises:
        AuthError: If no token can be resolved.
    """
    token = None if dry_run else resolve_api_token(config)
    cache = None
    if use_cache and config.cache.enabled:
        cache = ResponseCache(get_cache_dir(), config.cache)
    try:
        with SyncClient(config.api, token=token, cache=cache, dry_run=dry_run, transport=transport) as client:
            yield FrcApi(client)
    finally:
        if cache is not None:
            cache.close()
