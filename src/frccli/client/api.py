"""Typed entry points for the FRC Events API (v3.0).

:class:`FrcApi` turns query arguments into endpoint paths and parameters
and returns the decoded JSON unchanged, apart from the ``"All"`` level
selector, which concatenates the Practice, Qualification and Playoff
responses into a single record of the same shape.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence, Tuple, Union

from frccli.client.sync_client import SyncClient
from frccli.exceptions import InvalidUsageError
from frccli.models import ALL_LEVELS, PLAYED_LEVELS, EventQuery, TournamentLevel

LevelSelector = Union[TournamentLevel, str]
TeamOrLevel = Union[int, LevelSelector, Tuple[int, LevelSelector]]


def parse_team_or_level(value: Union[str, int, Sequence[str], None]) -> TeamOrLevel:
    """Interpret a CLI/query selector.

    ``"254"`` → team 254, ``"qualification"`` → a level, ``"all"`` (or
    nothing) → every level, and ``"254/playoff"`` (also split on space,
    comma, semicolon or dash) → a ``(team, level)`` pair.

    Raises:
        InvalidUsageError: If a part is neither a team number nor a level.
    """
    if value is None or value == "":
        return ALL_LEVELS
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        for sep in ("/", ",", ";", "-", " "):
            if sep in value.strip():
                value = value.strip().split(sep, 1)
                break
    if not isinstance(value, str):
        parts = [p.strip() for p in value if p.strip()]
        if len(parts) != 2:
            raise InvalidUsageError(f"Expected TEAM/LEVEL, got: {'/'.join(parts)}")
        team, level = parts
        return (_parse_team(team), _parse_level(level))
    value = value.strip()
    if value.isdigit():
        return int(value)
    if value.lower() == ALL_LEVELS.lower():
        return ALL_LEVELS
    return _parse_level(value)


def _parse_team(value: str) -> int:
    if not value.isdigit():
        raise InvalidUsageError(f"Not a team number: {value}")
    return int(value)


def _parse_level(value: str) -> TournamentLevel:
    try:
        return TournamentLevel.parse(value)
    except ValueError:
        choices = ", ".join(level.value for level in TournamentLevel)
        raise InvalidUsageError(f"Unknown tournament level '{value}' (choose from {choices}, All)") from None


def _level_value(level: LevelSelector) -> str:
    return level.value if isinstance(level, TournamentLevel) else str(level)


def _is_all(selector: Any) -> bool:
    return isinstance(selector, str) and not isinstance(selector, TournamentLevel) and selector.lower() == "all"


class FrcApi:
    """Endpoint methods over a :class:`~frccli.client.sync_client.SyncClient`.

    Args:
        client: An *entered* client.
    """

    def __init__(self, client: SyncClient) -> None:
        self._client = client

    def get_data(self, year: int, path: str = "", params: Optional[dict[str, Any]] = None) -> Any:
        """GET ``/{year}/{path}`` and return the decoded body."""
        suffix = f"/{path.lstrip('/')}" if path else ""
        return self._client.get_json(f"/{year}{suffix}", params)

    def season(self, year: int) -> dict[str, Any]:
        """Season summary (``frcChampionships``, ``eventCount``, ...)."""
        return self.get_data(year)

    def events(
        self, year: int, query: Union[str, int, EventQuery, None] = None
    ) -> dict[str, Any]:
        """Event listing filtered by event code, team number, or an :class:`EventQuery`."""
        if query is None:
            params: dict[str, Any] = {}
        elif isinstance(query, EventQuery):
            params = query.to_params()
        elif isinstance(query, int):
            params = {"teamNumber": query}
        else:
            params = {"eventCode": query}
        return self.get_data(year, "events", params)

    def _matches(
        self,
        endpoint: str,
        field: str,
        year: int,
        event_code: str,
        selector: TeamOrLevel,
    ) -> dict[str, Any]:
        if _is_all(selector):
            combined: list[Any] = []
            for level in PLAYED_LEVELS:
                combined.extend(self._matches(endpoint, field, year, event_code, level)[field] or [])
            return {field: combined}
        if isinstance(selector, tuple):
            team, level = selector
            params = {"tournamentLevel": _level_value(level), "teamNumber": team}
        elif isinstance(selector, int):
            params = {"teamNumber": selector}
        else:
            params = {"tournamentLevel": _level_value(selector)}
        data = self.get_data(year, f"{endpoint}/{event_code}", params)
        if not isinstance(data, dict):
            return {field: []}
        data.setdefault(field, [])
        return data

    def schedule(self, year: int, event_code: str, selector: TeamOrLevel = ALL_LEVELS) -> dict[str, Any]:
        """Match schedule (``Schedule``) for a team, a level, both, or all levels."""
        return self._matches("schedule", "Schedule", year, event_code, selector)

    def results(self, year: int, event_code: str, selector: TeamOrLevel = ALL_LEVELS) -> dict[str, Any]:
        """Match results (``Matches``) for a team, a level, both, or all levels."""
        return self._matches("matches", "Matches", year, event_code, selector)

    def scores(
        self,
        year: int,
        event_code: str,
        level: LevelSelector = ALL_LEVELS,
        flatten_alliances: bool = False,
    ) -> dict[str, Any]:
        """Detailed score breakdowns (``MatchScores``) for one level or all levels.

        The scores endpoint cannot filter by team. With *flatten_alliances*
        each score gains an ``Alliances`` list of ``"<alliance>: <json>"``
        strings, which fits in a single table cell.
        """
        if isinstance(level, (tuple, int)):
            raise InvalidUsageError("Scores can only be filtered by tournament level")
        data = self._matches("scores", "MatchScores", year, event_code, level)
        if flatten_alliances:
            data["MatchScores"] = [flatten_alliance_scores(m) for m in data["MatchScores"]]
        return data


def flatten_alliance_scores(score: dict[str, Any]) -> dict[str, Any]:
    """Copy of *score* with an ``Alliances`` list of one-line alliance summaries."""
    alliances = score.get("alliances") or []
    return {
        **score,
        "Alliances": [
            f"{a.get('alliance')}: {json.dumps(a, separators=(',', ':'))}" for a in alliances
        ],
    }
