"""Multi-key comparison and stable sorting of records.

Key selectors are either a path (a dotted string, or a sequence of
segments) resolved with :func:`~frccli.query.paths.get_property`, or a
one-argument extractor function. :func:`compare` walks the selectors left to
right and returns on the first difference, so later keys only break ties.

Descending order is not a per-key property. A sort specification such as
``"-startTime,matchNumber"`` carries one direction flag, read from the
sigil on the *first* key, and that flag flips the sign of the entire
comparison -- ties on ``startTime`` are then also broken by descending
``matchNumber``. Sigils on later keys are stripped and ignored.

Natural ordering between extracted values is deterministic across types::

    None < bool/int/float < str < date/datetime < anything else

Values of the same rank that cannot be ordered (two dicts, say) compare
equal, which leaves them in insertion order under the stable sort.
"""

from __future__ import annotations

import numbers
from collections.abc import MutableSequence
from dataclasses import dataclass, field
from datetime import date, datetime, time
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from frccli.query.paths import Segment, get_property, parse_path

KeySelector = Union[str, Sequence[Segment], Callable[[Any], Any]]
Comparator = Callable[[Any, Any], int]


def _rank(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, numbers.Real):
        return 1
    if isinstance(value, str):
        return 2
    if isinstance(value, date):
        return 3
    return 4


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


def natural_compare(a: Any, b: Any) -> int:
    """Compare two values by natural order, returning -1, 0 or 1."""
    ra, rb = _rank(a), _rank(b)
    if ra != rb:
        return -1 if ra < rb else 1
    if ra == 0:
        return 0
    if ra == 3:
        a, b = _as_datetime(a), _as_datetime(b)
        if (a.tzinfo is None) != (b.tzinfo is None):
            a, b = a.isoformat(), b.isoformat()
    try:
        if a < b:
            return -1
        if a > b:
            return 1
    except TypeError:
        return 0
    return 0


def extract(record: Any, key: KeySelector) -> Any:
    """Return the value *key* selects from *record*."""
    if callable(key):
        return key(record)
    if isinstance(key, str):
        return get_property(record, parse_path(key))
    return get_property(record, key)


def compare(a: Any, b: Any, keys: Optional[Sequence[KeySelector]] = None) -> int:
    """Lexicographic comparison of *a* and *b* over *keys*.

    With no keys (or when every key ties) the records themselves are
    compared by :func:`natural_compare`; records are incomparable without
    keys, so two mappings fall through to ``0``.
    """
    for key in keys or ():
        result = natural_compare(extract(a, key), extract(b, key))
        if result:
            return result
    return natural_compare(a, b)


def make_comparator(keys: Sequence[KeySelector], inverse: bool = False) -> Comparator:
    """Build a two-argument comparator over *keys*, negated when *inverse* is set."""
    if inverse:
        return lambda a, b: -compare(a, b, keys)
    return lambda a, b: compare(a, b, keys)


def sort_collection(
    collection: MutableSequence[Any] | Sequence[Any],
    criteria: Union[Comparator, Sequence[KeySelector], str, None] = None,
    copy: bool = False,
    inverse: bool = False,
) -> list[Any] | MutableSequence[Any]:
    """Order *collection* by *criteria* using a stable sort.

    Args:
        collection: The records to order.
        criteria: A two-argument comparator, a sequence of key selectors,
            a single dotted-path string, or ``None`` for natural order.
        copy: When ``True`` a new list is returned and *collection* is left
            untouched; otherwise *collection* is sorted in place and returned.
        inverse: Negate the whole comparison (descending order).

    Returns:
        The sorted sequence -- *collection* itself unless *copy* is set.
    """
    if criteria is None:
        comparator: Comparator = make_comparator((), inverse)
    elif isinstance(criteria, str):
        comparator = make_comparator([criteria], inverse)
    elif callable(criteria):
        if inverse:
            base = criteria
            comparator = lambda a, b: -base(a, b)  # noqa: E731
        else:
            comparator = criteria
    else:
        comparator = make_comparator(list(criteria), inverse)

    key = cmp_to_key(comparator)
    if copy:
        return sorted(collection, key=key)
    if isinstance(collection, list):
        collection.sort(key=key)
    else:
        collection[:] = sorted(collection, key=key)  # type: ignore[index]
    return collection


@dataclass
class SortSpec:
    """Parsed form of a ``--sort`` / ``sortkey`` string.

    Attributes:
        keys: One segment list per comma-separated key, sigils removed.
        inverse: ``True`` when the first key carried a ``-`` sigil.
    """

    keys: list[list[str]] = field(default_factory=list)
    inverse: bool = False

    def apply(self, collection: Any, copy: bool = False) -> Any:
        """Sort *collection* by this specification."""
        if not self.keys:
            return list(collection) if copy else collection
        return sort_collection(collection, self.keys, copy=copy, inverse=self.inverse)


def parse_sort_keys(spec: Union[str, Iterable[str], None]) -> SortSpec:
    """Parse ``"-startTime,matchNumber"`` into a :class:`SortSpec`.

    Accepts a comma-separated string or an already split iterable of keys.
    """
    if spec is None:
        return SortSpec()
    raw = spec.split(",") if isinstance(spec, str) else list(spec)
    raw = [k.strip() for k in raw if k and k.strip()]
    if not raw:
        return SortSpec()
    inverse = raw[0].startswith("-")
    keys = [parse_path(k[1:] if k[0] in "+-" else k) for k in raw]
    return SortSpec(keys=keys, inverse=inverse)
