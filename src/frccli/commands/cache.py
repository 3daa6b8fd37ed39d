"""Cache commands -- inspect and clear cached API responses."""

from __future__ import annotations

import typer

from frccli.output import format_response, success


cache_app = typer.Typer(no_args_is_help=True)


def _open_cache():  # noqa: ANN202
    from frccli.cache import ResponseCache
    from frccli.config import get_cache_dir, resolve_config

    return ResponseCache(get_cache_dir(), resolve_config().cache)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show the cache location, entry count and TTL."""
    with _open_cache() as cache:
        format_response(cache.stats())


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached response."""
    with _open_cache() as cache:
        removed = cache.clear()
    success(f"Removed {removed} cached response(s).")
