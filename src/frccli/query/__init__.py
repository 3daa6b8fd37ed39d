"""Generic query primitives over schema-less API records.

Modules:
    paths: get/set/delete/has by property path, dotted-path parsing.
    compare: natural ordering, multi-key comparator, stable sorter.
    projection: shallow include/exclude projection of records.
"""

from frccli.query.compare import (
    SortSpec,
    compare,
    natural_compare,
    parse_sort_keys,
    sort_collection,
)
from frccli.query.paths import (
    delete_property,
    get_property,
    has_property,
    parse_path,
    parse_paths,
    pluck,
    set_property,
)
from frccli.query.projection import project, project_all, split_prefixed

__all__ = [
    "SortSpec",
    "compare",
    "delete_property",
    "get_property",
    "has_property",
    "natural_compare",
    "parse_path",
    "parse_paths",
    "parse_sort_keys",
    "pluck",
    "project",
    "project_all",
    "set_property",
    "sort_collection",
    "split_prefixed",
]
