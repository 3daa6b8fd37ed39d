"""Plain-text rendering of records: indented lists and box-drawn tables.

Both renderers pass leaf values through :func:`format_leaf`, so API
timestamps (``2024-03-02T15:04:00Z``) come out in the local time zone and
the platform's locale format rather than as raw ISO strings.

List output nests two spaces per level::

    - Event Count: 2
    - Frc Championships:
      * - Name: FIRST Championship
        - Start Date: ...

Table output uses box-drawing glyphs and pads every column to its widest
cell::

    ┌──────────────┬─────────┐
    │ Match Number │ Field   │
    ├──────────────┼─────────┤
    │ 1            │ Primary │
    └──────────────┴─────────┘
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Iterable, Sequence

import httpx
from rich.cells import cell_len

from frccli.display.common import (
    EMPTY,
    Properties,
    allow_list,
    is_container,
    is_sequence,
    table_columns,
)
from frccli.display.labels import id_to_word
from frccli.query.paths import get_property, parse_path

INDENT = "  "

ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?Z$")


def parse_timestamp(text: str) -> datetime:
    """Parse an API UTC timestamp (``YYYY-MM-DDTHH:MM:SS[.ffffff]Z``)."""
    body = text[:-1] if text.endswith("Z") else text
    fmt = "%Y-%m-%dT%H:%M:%S.%f" if "." in body else "%Y-%m-%dT%H:%M:%S"
    return datetime.strptime(body, fmt).replace(tzinfo=timezone.utc)


def format_datetime(value: date) -> str:
    """Locale-aware rendering of a date or datetime in the local time zone."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.strftime("%c")
    return value.strftime("%x")


def format_leaf(value: Any) -> str:
    """Render a single non-container value."""
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, str):
        if ISO_TIMESTAMP.match(value):
            return format_datetime(parse_timestamp(value))
        return value
    if isinstance(value, date):
        return format_datetime(value)
    if isinstance(value, httpx.URL):
        return str(value)
    return str(value)


def display(value: Any, indent: int = 0, skip_first_indent: bool = False) -> str:
    """Render any value: containers as nested lists, everything else as a leaf."""
    if is_container(value):
        return render_list(value, None, indent, skip_first_indent)
    return format_leaf(value)


def _prefix(indent: int, skip: bool) -> str:
    return "" if skip else INDENT * indent


def render_list(
    record: Any,
    properties: Properties = None,
    indent: int = 0,
    skip_first_indent: bool = False,
) -> str:
    """Render a record or sequence as an indented, bulleted list.

    Args:
        record: Mapping, sequence, or leaf value.
        properties: Allow-list of keys (or indices for sequences). A single
            dotted path string instead renders only the value at that path.
        indent: Starting indentation level.
        skip_first_indent: Omit the indentation of the first line, for
            embedding right after an inline bullet.

    Returns:
        The rendered text; ``"none"`` for an empty record or sequence, or
        when the allow-list leaves nothing to show.
    """
    if isinstance(properties, str):
        return display(get_property(record, parse_path(properties)), indent, skip_first_indent)
    allowed = allow_list(properties)

    if is_sequence(record):
        items = [v for i, v in enumerate(record) if allowed is None or str(i) in allowed]
        if not items:
            return EMPTY
        return "\n".join(
            f"{_prefix(indent, skip_first_indent and i == 0)}* {display(v, indent + 1, True)}"
            for i, v in enumerate(items)
        )

    if isinstance(record, Mapping):
        keys = [k for k in record if allowed is None or str(k) in allowed]
        if not keys:
            return EMPTY
        lines = []
        for i, key in enumerate(keys):
            value = record[key]
            head = f"{_prefix(indent, skip_first_indent and i == 0)}- {id_to_word(str(key))}:"
            if is_container(value) and len(value) > 0:
                lines.append(f"{head}\n{render_list(value, None, indent + 1)}")
            elif is_container(value):
                lines.append(f"{head} {EMPTY}")
            else:
                lines.append(f"{head} {format_leaf(value)}")
        return "\n".join(lines)

    return format_leaf(record)


def format_cell(value: Any) -> str:
    """Render a table cell; ``None`` and missing values are empty."""
    if value is None:
        return ""
    if is_container(value):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return format_leaf(value)


def table_cells(
    records: Sequence[Mapping[str, Any]], properties: Properties = None
) -> tuple[list[str], list[list[str]]]:
    """Return ``(columns, rows)`` of formatted cell strings for *records*."""
    columns = table_columns(records, properties)
    rows = [[format_cell(record.get(key)) for key in columns] for record in records]
    return columns, rows


def _pad(text: str, width: int) -> str:
    return text + " " * (width - cell_len(text))


def _rule(widths: Iterable[int], left: str, middle: str, right: str) -> str:
    return f"{left}─" + f"─{middle}─".join("─" * w for w in widths) + f"─{right}"


def _row(cells: Sequence[str], widths: Sequence[int]) -> str:
    return "│ " + " │ ".join(_pad(c, w) for c, w in zip(cells, widths)) + " │"


def render_table(records: Sequence[Mapping[str, Any]], properties: Properties = None) -> str:
    """Render *records* as a box-drawn text table.

    Columns are the union of all record keys in first-seen order, optionally
    filtered by *properties*; headers go through
    :func:`~frccli.display.labels.id_to_word`. Records lacking a column get
    an empty cell. An empty collection yields the frame and header row only.
    """
    columns, rows = table_cells(records, properties)
    headers = [id_to_word(str(k)) or "" for k in columns]
    widths = [
        max([cell_len(h)] + [cell_len(row[i]) for row in rows]) for i, h in enumerate(headers)
    ]
    lines = [
        _rule(widths, "┌", "┬", "┐"),
        _row(headers, widths),
        _rule(widths, "├", "┼", "┤"),
    ]
    lines.extend(_row(row, widths) for row in rows)
    lines.append(_rule(widths, "└", "┴", "┘"))
    return "\n".join(lines)
