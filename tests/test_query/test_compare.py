"""Tests for frccli.query.compare -- natural ordering, comparators, sorting."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from frccli.exceptions import PathTraversalError
from frccli.query.compare import (
    SortSpec,
    compare,
    make_comparator,
    natural_compare,
    parse_sort_keys,
    sort_collection,
)


@pytest.fixture
def matches() -> list[dict]:
    return [
        {"id": "a", "level": "Qualification", "matchNumber": 2, "startTime": "2024-04-18T09:07:00"},
        {"id": "b", "level": "Playoff", "matchNumber": 1, "startTime": "2024-04-20T13:00:00"},
        {"id": "c", "level": "Qualification", "matchNumber": 1, "startTime": "2024-04-18T09:00:00"},
        {"id": "d", "level": "Playoff", "matchNumber": 2, "startTime": "2024-04-20T13:15:00"},
    ]


def _ids(records: list[dict]) -> list[str]:
    return [r["id"] for r in records]


class TestNaturalCompare:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            (1, 2, -1),
            (2, 1, 1),
            (1.5, 1.5, 0),
            ("Blue1", "Red1", -1),
            (None, 0, -1),
            (0, "0", -1),
            ("z", date(2024, 1, 1), -1),
            (date(2024, 1, 1), {"x": 1}, -1),
            (None, None, 0),
        ],
    )
    def test_ordering(self, a, b, expected) -> None:
        assert natural_compare(a, b) == expected

    def test_date_against_datetime(self) -> None:
        assert natural_compare(date(2024, 4, 18), datetime(2024, 4, 18, 9, 0)) == -1

    def test_naive_and_aware_datetimes_do_not_raise(self) -> None:
        naive = datetime(2024, 4, 18, 9, 0)
        aware = datetime(2024, 4, 18, 9, 0, tzinfo=timezone.utc)
        assert natural_compare(naive, aware) in (-1, 0, 1)

    def test_incomparable_values_are_equal(self) -> None:
        assert natural_compare({"a": 1}, {"b": 2}) == 0


class TestCompare:
    def test_first_key_decides(self, matches: list[dict]) -> None:
        a, b = matches[0], matches[1]
        assert compare(a, b, ["level"]) == 1

    def test_later_keys_break_ties(self, matches: list[dict]) -> None:
        a, c = matches[0], matches[2]
        assert compare(a, c, ["level", "matchNumber"]) == 1

    def test_function_keys(self, matches: list[dict]) -> None:
        assert compare(matches[0], matches[2], [lambda m: -m["matchNumber"]]) == -1

    def test_segment_list_keys(self) -> None:
        a = {"teams": [{"teamNumber": 254}]}
        b = {"teams": [{"teamNumber": 118}]}
        assert compare(a, b, [["teams", "0", "teamNumber"]]) == 1

    def test_all_keys_tie(self, matches: list[dict]) -> None:
        assert compare(matches[0], matches[2], ["level"]) == 0

    def test_missing_intermediate_raises(self) -> None:
        with pytest.raises(PathTraversalError):
            compare({"a": 1}, {"a": 2}, ["b.c"])

    def test_inverse_comparator(self, matches: list[dict]) -> None:
        cmp = make_comparator(["matchNumber"], inverse=True)
        assert cmp(matches[1], matches[0]) == 1


class TestSortCollection:
    def test_sorts_in_place_and_returns_same_list(self, matches: list[dict]) -> None:
        result = sort_collection(matches, ["startTime"])
        assert result is matches
        assert _ids(matches) == ["c", "a", "b", "d"]

    def test_copy_leaves_input_untouched(self, matches: list[dict]) -> None:
        result = sort_collection(matches, ["startTime"], copy=True)
        assert _ids(result) == ["c", "a", "b", "d"]
        assert _ids(matches) == ["a", "b", "c", "d"]

    def test_single_string_criterion(self, matches: list[dict]) -> None:
        assert _ids(sort_collection(matches, "matchNumber", copy=True)) == ["b", "c", "a", "d"]

    def test_stable_for_ties(self, matches: list[dict]) -> None:
        assert _ids(sort_collection(matches, ["level"], copy=True)) == ["b", "d", "a", "c"]

    def test_inverse_flips_every_key(self, matches: list[dict]) -> None:
        result = sort_collection(matches, ["level", "matchNumber"], copy=True, inverse=True)
        assert _ids(result) == ["a", "c", "d", "b"]

    def test_comparator_criterion(self, matches: list[dict]) -> None:
        by_number = lambda a, b: a["matchNumber"] - b["matchNumber"]  # noqa: E731
        assert _ids(sort_collection(matches, by_number, copy=True)) == ["b", "c", "a", "d"]

    def test_natural_order_without_criteria(self) -> None:
        assert sort_collection([3, None, "x", 1]) == [None, 1, 3, "x"]

    def test_non_list_mutable_sequence(self) -> None:
        from collections import UserList

        values = UserList([3, 1, 2])
        sort_collection(values)
        assert list(values) == [1, 2, 3]

    def test_missing_terminal_sorts_first(self) -> None:
        rows = [{"n": 2}, {}, {"n": 1}]
        assert sort_collection(rows, ["n"], copy=True) == [{}, {"n": 1}, {"n": 2}]

    @pytest.mark.parametrize(
        "criteria, inverse",
        [
            (["level"], False),
            (["level", "matchNumber"], False),
            (["startTime"], True),
            ("matchNumber", False),
        ],
    )
    def test_sorting_sorted_output_changes_nothing(self, matches: list[dict], criteria, inverse) -> None:
        once = sort_collection(matches, criteria, copy=True, inverse=inverse)
        twice = sort_collection(once, criteria, copy=True, inverse=inverse)
        assert _ids(twice) == _ids(once)


class TestParseSortKeys:
    def test_plain_keys(self) -> None:
        spec = parse_sort_keys("startTime,matchNumber")
        assert spec == SortSpec(keys=[["startTime"], ["matchNumber"]], inverse=False)

    def test_leading_minus_inverts(self) -> None:
        spec = parse_sort_keys("-teams.0.teamNumber")
        assert spec.keys == [["teams", "0", "teamNumber"]]
        assert spec.inverse is True

    def test_leading_plus_is_stripped(self) -> None:
        spec = parse_sort_keys("+name")
        assert spec == SortSpec(keys=[["name"]], inverse=False)

    def test_sigils_on_later_keys_are_ignored(self) -> None:
        spec = parse_sort_keys("name,-code")
        assert spec == SortSpec(keys=[["name"], ["code"]], inverse=False)

    def test_accepts_iterable(self) -> None:
        assert parse_sort_keys(["-a", "b"]).inverse is True

    @pytest.mark.parametrize("value", [None, "", " , "])
    def test_empty(self, value) -> None:
        assert parse_sort_keys(value) == SortSpec()

    def test_apply(self, matches: list[dict]) -> None:
        result = parse_sort_keys("-startTime").apply(matches, copy=True)
        assert _ids(result) == ["d", "b", "a", "c"]

    def test_empty_spec_apply_keeps_order(self, matches: list[dict]) -> None:
        assert _ids(SortSpec().apply(matches)) == ["a", "b", "c", "d"]
