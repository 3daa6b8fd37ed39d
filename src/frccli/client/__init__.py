"""HTTP client module for frccli.

Classes:
    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`
    with auth, retry, caching and error mapping.
    :class:`FrcApi` -- season, event, schedule, score and result endpoints.

Example::

    from frccli.client import FrcApi, SyncClient

    with SyncClient(config.api, token=token) as client:
        events = FrcApi(client).events(2024, 254)
"""

from frccli.client.api import FrcApi, flatten_alliance_scores, parse_team_or_level
from frccli.client.session import open_api
from frccli.client.sync_client import SyncClient

__all__ = [
    "FrcApi",
    "SyncClient",
    "flatten_alliance_scores",
    "open_api",
    "parse_team_or_level",
]
