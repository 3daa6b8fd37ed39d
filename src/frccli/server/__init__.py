"""Web front end: FastAPI routes rendering match tables as HTML pages."""

from frccli.server.app import create_app
from frccli.server.assets import Asset, AssetCache

__all__ = ["Asset", "AssetCache", "create_app"]
