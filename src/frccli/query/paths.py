"""Property-path access on schema-less records.

A *record* is whatever the FRC API hands back after JSON decoding: nested
``dict`` / ``list`` values ending in primitives. A *path* is a sequence of
segments -- mapping keys or sequence indices -- that addresses one location
inside such a graph.

All four accessors share one traversal rule:

* every segment except the last must resolve to an existing container;
  hitting a missing key, ``None`` or a primitive raises
  :class:`~frccli.exceptions.PathTraversalError`;
* the last segment is looked up leniently -- a missing terminal key reads
  as ``None`` (:func:`get_property`) or ``False`` (:func:`has_property`).

A bare string is always a *single* segment. Dotted strings coming from the
command line or query string are split with :func:`parse_path` first.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Iterable, Union

from frccli.exceptions import PathTraversalError

Segment = Union[str, int]
PathLike = Union[Segment, Sequence[Segment]]

_MISSING = object()


def parse_path(path: str, separator: str = ".") -> list[str]:
    """Split a dotted path string into segments.

    Numeric segments are kept as strings; they are matched against sequence
    indices during traversal.

    Raises:
        PathTraversalError: If *path* is empty or contains an empty segment
            (``"a..b"``, ``".a"``).
    """
    if not path:
        raise PathTraversalError("Empty property path", ())
    segments = path.split(separator)
    for i, segment in enumerate(segments):
        if segment == "":
            raise PathTraversalError(f"Empty segment in property path '{path}'", segments, i)
    return segments


def parse_paths(paths: str) -> list[list[str]]:
    """Split a comma-separated list of dotted paths (``"name,teams.0.station"``)."""
    return [parse_path(p.strip()) for p in paths.split(",") if p.strip()]


def _segments(path: PathLike) -> list[Segment]:
    if isinstance(path, (str, int)):
        segments: list[Segment] = [path]
    else:
        segments = list(path)
    if not segments:
        raise PathTraversalError("Empty property path", ())
    return segments


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping) or _is_sequence(value)


def _index(segment: Segment) -> int | None:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment
    if segment.isdigit():
        return int(segment)
    return None


def _mapping_key(container: Mapping, segment: Segment) -> Any:
    """Return the key actually stored in *container* for *segment*, or ``_MISSING``."""
    if segment in container:
        return segment
    if isinstance(segment, int) and str(segment) in container:
        return str(segment)
    return _MISSING


def _lookup(container: Any, segment: Segment) -> Any:
    """Look *segment* up on *container*; ``_MISSING`` when absent."""
    if isinstance(container, Mapping):
        key = _mapping_key(container, segment)
        return _MISSING if key is _MISSING else container[key]
    index = _index(segment)
    if index is None or not 0 <= index < len(container):
        return _MISSING
    return container[index]


def _require_container(value: Any, segments: Sequence[Segment], i: int) -> None:
    if not _is_container(value):
        kind = "None" if value is None else type(value).__name__
        raise PathTraversalError(
            f"Cannot read '{segments[i]}' of {kind} at '{_format(segments[: i])}'",
            segments,
            i,
        )


def _format(segments: Sequence[Segment]) -> str:
    return ".".join(str(s) for s in segments) or "<root>"


def _parent(record: Any, segments: Sequence[Segment]) -> Any:
    """Walk every segment but the last, returning the container that holds it."""
    current = record
    for i, segment in enumerate(segments[:-1]):
        _require_container(current, segments, i)
        value = _lookup(current, segment)
        if value is _MISSING:
            raise PathTraversalError(
                f"Property '{segment}' not found at '{_format(segments[: i])}'",
                segments,
                i,
            )
        current = value
    _require_container(current, segments, len(segments) - 1)
    return current


def get_property(record: Any, path: PathLike) -> Any:
    """Return the value at *path*, or ``None`` when only the last segment is missing.

    >>> get_property({"teams": [{"teamNumber": 254}]}, ["teams", "0", "teamNumber"])
    254
    """
    segments = _segments(path)
    value = _lookup(_parent(record, segments), segments[-1])
    return None if value is _MISSING else value


def set_property(record: Any, path: PathLike, value: Any) -> Any:
    """Assign *value* at *path*, mutating the owning container in place.

    Sequence indices may address an existing element or the position just
    past the end (append). Returns *record* so calls can be chained.
    """
    segments = _segments(path)
    parent = _parent(record, segments)
    last = segments[-1]
    if isinstance(parent, MutableMapping):
        key = _mapping_key(parent, last)
        parent[last if key is _MISSING else key] = value
        return record
    if isinstance(parent, MutableSequence):
        index = _index(last)
        if index is not None and index == len(parent):
            parent.append(value)
            return record
        if index is not None and 0 <= index < len(parent):
            parent[index] = value
            return record
        raise PathTraversalError(
            f"Index '{last}' out of range at '{_format(segments[:-1])}'",
            segments,
            len(segments) - 1,
        )
    raise PathTraversalError(
        f"Cannot assign '{last}' on immutable {type(parent).__name__}",
        segments,
        len(segments) - 1,
    )


def delete_property(record: Any, path: PathLike) -> Any:
    """Remove the value at *path*. Deleting a missing terminal key is a no-op.

    Sequences only give up their last element; removing an earlier index
    would shift its successors into the deleted position, so it raises
    :class:`~frccli.exceptions.PathTraversalError`.
    """
    segments = _segments(path)
    parent = _parent(record, segments)
    last = segments[-1]
    if isinstance(parent, MutableMapping):
        key = _mapping_key(parent, last)
        if key is not _MISSING:
            del parent[key]
        return record
    if isinstance(parent, MutableSequence):
        index = _index(last)
        if index is None or not 0 <= index < len(parent):
            return record
        if index != len(parent) - 1:
            raise PathTraversalError(
                f"Cannot delete index '{last}' at '{_format(segments[:-1])}': "
                "only the last element of a sequence can be removed",
                segments,
                len(segments) - 1,
            )
        parent.pop()
        return record
    raise PathTraversalError(
        f"Cannot delete '{last}' on immutable {type(parent).__name__}",
        segments,
        len(segments) - 1,
    )


def has_property(record: Any, path: PathLike) -> bool:
    """Return whether the last segment of *path* exists on its container."""
    segments = _segments(path)
    return _lookup(_parent(record, segments), segments[-1]) is not _MISSING


def pluck(record: Any, paths: Iterable[str]) -> dict[str, Any]:
    """Build a flat record keyed by dotted path with the value found at each path.

    Used for ``--props`` selections such as ``"name,teams.0.teamNumber"``;
    paths whose last segment is absent map to ``None``.
    """
    return {path: get_property(record, parse_path(path)) for path in paths}
