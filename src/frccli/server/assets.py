"""Write-once cache of packaged static asset text.

Stylesheets are inlined into every generated page, so they are read from
disk once per process and kept for its lifetime. Entries are never
evicted; population is guarded by a lock so concurrent requests read the
same entry.
"""

from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from frccli.exceptions import NotFoundError

STATIC_DIR = Path(__file__).parent / "static"


@dataclass(frozen=True)
class Asset:
    name: str
    content: str
    hash: str


class AssetCache:
    """Text assets under *root*, keyed by relative name.

    Args:
        root: Directory the asset names are resolved against.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = (root or STATIC_DIR).resolve()
        self._entries: dict[str, Asset] = {}
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, name: str) -> Path:
        """Absolute path of asset *name*.

        Raises:
            NotFoundError: If *name* escapes the asset root or does not exist.
        """
        path = (self._root / name.lstrip("/")).resolve()
        if self._root not in path.parents or not path.is_file():
            raise NotFoundError(f"Static asset not found: {name}")
        return path

    def entry(self, name: str) -> Asset:
        """Return the cached :class:`Asset`, reading it from disk on first use."""
        asset = self._entries.get(name)
        if asset is not None:
            return asset
        with self._lock:
            asset = self._entries.get(name)
            if asset is None:
                content = self.resolve(name).read_text(encoding="utf-8")
                digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
                asset = Asset(name=name, content=content, hash=digest)
                self._entries[name] = asset
        return asset

    def include(self, name: str) -> str:
        """Text content of asset *name*."""
        return self.entry(name).content

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
