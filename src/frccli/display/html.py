"""HTML rendering of records: definition lists and tables.

Unlike :mod:`frccli.display.text`, cell and list values are emitted as
their raw string form (timestamps stay ISO-8601); every value and key is
HTML-escaped. Header cells carry a ``k-<key>`` class and body cells a
``v-<key>`` class so stylesheets can target individual columns.
"""

from __future__ import annotations

from collections.abc import Mapping
from html import escape
from typing import Any, Optional, Sequence

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


def raw_value(value: Any) -> str:
    """Stringify *value* without leaf formatting; ``None`` is empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_list_html(record: Any, properties: Properties = None) -> str:
    """Render a record as a ``<dl>`` (sequences as ``<ul>``), recursing into containers.

    *properties* works as in :func:`~frccli.display.text.render_list`.
    """
    if isinstance(properties, str):
        value = get_property(record, parse_path(properties))
        return render_list_html(value) if is_container(value) else escape(raw_value(value))
    allowed = allow_list(properties)

    if is_sequence(record):
        items = [v for i, v in enumerate(record) if allowed is None or str(i) in allowed]
        if not items:
            return EMPTY
        body = "\n".join(f"\t<li>{_html_value(v)}</li>" for v in items)
        return f"<ul>\n{body}\n</ul>"

    if isinstance(record, Mapping):
        keys = [k for k in record if allowed is None or str(k) in allowed]
        if not keys:
            return EMPTY
        body = "\n".join(
            f"\t<dt>{escape(id_to_word(str(k)) or '')}</dt><dd>{_html_value(record[k])}</dd>" for k in keys
        )
        return f"<dl>\n{body}\n</dl>"

    return escape(raw_value(record))


def _html_value(value: Any) -> str:
    if is_container(value):
        return render_list_html(value)
    return escape(raw_value(value))


def render_table_html(
    records: Sequence[Mapping[str, Any]],
    properties: Properties = None,
    table_id: Optional[str] = None,
) -> str:
    """Render *records* as an HTML ``<table>`` with a ``<thead>`` and ``<tbody>``.

    Columns follow the same first-seen key union as
    :func:`~frccli.display.text.render_table`; missing values become empty
    ``<td>`` cells.
    """
    columns = table_columns(records, properties)
    header = "\n".join(
        f'\t\t<th class="k-{escape(str(k))}">{escape(id_to_word(str(k)) or "")}</th>' for k in columns
    )
    rows = "\n".join(
        "\t<tr>\n"
        + "\n".join(
            f'\t\t<td class="v-{escape(str(k))}">{escape(raw_value(record.get(k)))}</td>'
            for k in columns
        )
        + "\n\t</tr>"
        for record in records
    )
    opening = f'<table id="{escape(table_id)}">' if table_id else "<table>"
    return (
        f"{opening}<thead>\n\t<tr>\n{header}\n\t</tr>\n</thead>"
        f"<tbody>\n{rows}\n</tbody></table>"
    )
