"""Helpers shared by the text and HTML renderers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Iterable, Optional, Union

EMPTY = "none"
"""Rendered in place of an empty record or sequence."""

Properties = Union[str, Iterable[Union[str, int]], None]


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_container(value: Any) -> bool:
    return isinstance(value, Mapping) or is_sequence(value)


def allow_list(properties: Properties) -> Optional[set[str]]:
    """Normalise an allow-list of property names; ``None`` means everything.

    Numeric entries are compared as strings so that sequence indices can be
    selected with either ``0`` or ``"0"``.
    """
    if properties is None:
        return None
    if isinstance(properties, str):
        properties = properties.split(",")
    return {str(p).strip() for p in properties}


def table_columns(records: Iterable[Mapping[str, Any]], properties: Properties = None) -> list[str]:
    """Union of the keys of *records* in first-seen order, filtered by *properties*."""
    allowed = allow_list(properties)
    columns: list[str] = []
    seen: set[str] = set()
    for record in records:
        for key in record:
            if key in seen:
                continue
            seen.add(key)
            if allowed is None or str(key) in allowed:
                columns.append(key)
    return columns
