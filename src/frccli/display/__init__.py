"""Schema-less rendering of records as text or HTML.

Modules:
    labels: identifier-to-label conversion for headers and list keys.
    text: indented lists and box-drawn tables with leaf formatting.
    html: definition lists and ``<table>`` markup.
"""

from frccli.display.html import render_list_html, render_table_html
from frccli.display.labels import id_to_word
from frccli.display.text import display, format_leaf, render_list, render_table

__all__ = [
    "display",
    "format_leaf",
    "id_to_word",
    "render_list",
    "render_list_html",
    "render_table",
    "render_table_html",
]
