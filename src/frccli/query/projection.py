"""Shallow field projection of records.

Only top-level keys are filtered. Nested values are carried over by
reference and are never filtered themselves; ``"teams.station"`` does not
reach into ``teams``. Use :func:`~frccli.query.paths.pluck` for dotted
selections.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

from frccli.query.paths import parse_path


def project(record: Mapping[str, Any], fields: Iterable[str], exclude: bool = False) -> dict[str, Any]:
    """Return a new record with the top-level keys of *record* kept or dropped.

    Args:
        record: Source record; never mutated.
        fields: Top-level key names.
        exclude: When ``False`` keep only keys listed in *fields*; when
            ``True`` keep every key *not* listed.

    Returns:
        A new ``dict`` preserving *record*'s key order. Listed keys that
        *record* lacks are simply absent from the result.
    """
    wanted = set(fields)
    return {key: value for key, value in record.items() if (key in wanted) != exclude}


def project_all(
    records: Iterable[Mapping[str, Any]], fields: Iterable[str], exclude: bool = False
) -> list[dict[str, Any]]:
    """Apply :func:`project` to every record of a collection."""
    fields = list(fields)
    return [project(record, fields, exclude) for record in records]


def split_prefixed(paths: Iterable[str], prefix: str) -> tuple[list[str], list[str]]:
    """Partition *paths* into those under ``prefix.`` (with the prefix removed) and the rest.

    >>> split_prefixed(["Event.name", "matchNumber"], "Event")
    (['name'], ['matchNumber'])
    """
    scoped: list[str] = []
    rest: list[str] = []
    for path in paths:
        segments = parse_path(path)
        if len(segments) > 1 and segments[0] == prefix:
            scoped.append(".".join(segments[1:]))
        else:
            rest.append(path)
    return scoped, rest
