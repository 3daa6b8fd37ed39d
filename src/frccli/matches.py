"""Shaping helpers for match schedule, result and score records.

The API returns one record per match with a nested ``teams`` list. The web
tables and the human-readable schedule want one flat row per match with a
column per driver station, which is what the ``*_row`` functions build.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence

from frccli.display.labels import id_to_word
from frccli.models import TournamentLevel
from frccli.query import get_property, set_property, sort_collection

STATIONS = ("Red1", "Red2", "Red3", "Blue1", "Blue2", "Blue3")

_API_DATETIME = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})?$"
)


def parse_api_datetime(text: str) -> datetime:
    """Parse the API's ISO-8601 timestamps.

    Accepts any number of fractional digits and an optional ``Z`` or
    ``±HH:MM`` offset; timestamps without an offset stay naive (event
    local time).

    Raises:
        ValueError: If *text* is not an ISO-8601 timestamp.
    """
    match = _API_DATETIME.match(text.strip())
    if not match:
        raise ValueError(f"Not an ISO-8601 timestamp: {text!r}")
    value = datetime.strptime(match.group(1), "%Y-%m-%dT%H:%M:%S")
    if match.group(2):
        value = value.replace(microsecond=int(match.group(2)[:6].ljust(6, "0")))
    offset = match.group(3)
    if offset == "Z":
        value = value.replace(tzinfo=timezone.utc)
    elif offset:
        sign = -1 if offset[0] == "-" else 1
        delta = timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6]))
        value = value.replace(tzinfo=timezone(sign * delta))
    return value


def format_date(value: date) -> str:
    """``Saturday, March 2, 2024``."""
    return f"{value:%A, %B} {value.day}, {value.year}"


def format_date_range(start: date, end: date) -> str:
    """Single date when *start* and *end* fall on the same day, otherwise ``start - end``."""
    if start.timetuple()[:3] == end.timetuple()[:3]:
        return format_date(start)
    return f"{format_date(start)} - {format_date(end)}"


def format_match_time(value: datetime) -> str:
    """``Sat, Mar 02, 09:30 AM``."""
    return value.strftime("%a, %b %d, %I:%M %p")


# --- Teams ---


def team_display(team: Optional[Mapping[str, Any]], include_station: bool = False) -> str:
    """Render a match team entry.

    Surrogate teams get a ``*`` prefix and disqualified teams a ``!``
    prefix; with *include_station* the station is prepended
    (``Red 1: *254``). A missing team renders as an empty string.
    """
    if not team:
        return ""
    prefix = ""
    if include_station:
        prefix = f"{id_to_word(str(team.get('station', '')))}: "
    marks = ("*" if team.get("surrogate") else "") + ("!" if team.get("dq") else "")
    return f"{prefix}{marks}{team.get('teamNumber', '')}"


def station_team(teams: Iterable[Mapping[str, Any]], station: str) -> str:
    """Display string of the team in *station*, or ``""``."""
    for team in teams or ():
        if team.get("station") == station:
            return team_display(team)
    return ""


def order_teams(teams: Sequence[Mapping[str, Any]], width: int = 0) -> dict[str, list[str]]:
    """Split *teams* by alliance, ordered by station and right-aligned to *width*."""
    ordered = sort_collection(list(teams or ()), ["station"], copy=True)
    alliances: dict[str, list[str]] = {"red": [], "blue": []}
    for team in ordered:
        station = str(team.get("station", ""))
        for colour in alliances:
            if station.lower().startswith(colour):
                alliances[colour].append(team_display(team).rjust(width))
    return alliances


def _station_columns(teams: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    teams = list(teams or ())
    return {station.lower(): station_team(teams, station) for station in STATIONS}


# --- Rows ---


def schedule_row(match: Mapping[str, Any]) -> dict[str, Any]:
    """Flat table row for a ``Schedule`` entry."""
    return {
        "description": match.get("description"),
        "level": match.get("tournamentLevel"),
        "matchNumber": match.get("matchNumber"),
        "startTime": match.get("startTime"),
        "field": match.get("field"),
        **_station_columns(match.get("teams")),
    }


def result_row(match: Mapping[str, Any]) -> dict[str, Any]:
    """Flat table row for a ``Matches`` (results) entry."""
    return {
        "description": match.get("description"),
        "level": match.get("tournamentLevel"),
        "matchNumber": match.get("matchNumber"),
        "startTime": match.get("actualStartTime"),
        "resultsPosted": match.get("postResultTime"),
        **_station_columns(match.get("teams")),
        "redScore": match.get("scoreRedFinal"),
        "redAutoScore": match.get("scoreRedAuto"),
        "redFoulScore": match.get("scoreRedFoul"),
        "blueScore": match.get("scoreBlueFinal"),
        "blueAutoScore": match.get("scoreBlueAuto"),
        "blueFoulScore": match.get("scoreBlueFoul"),
    }


_ALLIANCE_FIELDS = (
    ("totalPoints", "Score"),
    ("autoPoints", "AutoPoints"),
    ("teleopPoints", "TeleopPoints"),
    ("foulPoints", "FoulPoints"),
    ("foulCount", "FoulCount"),
)


def score_row(score: Mapping[str, Any]) -> dict[str, Any]:
    """Flat table row for a ``MatchScores`` entry.

    Score breakdowns differ per season; only the point totals present in
    every season are lifted into ``red*`` / ``blue*`` columns.
    """
    row: dict[str, Any] = {
        "level": score.get("matchLevel"),
        "matchNumber": score.get("matchNumber"),
    }
    for alliance in score.get("alliances") or ():
        colour = str(alliance.get("alliance", "")).lower()
        for field, suffix in _ALLIANCE_FIELDS:
            if field in alliance:
                row[f"{colour}{suffix}"] = alliance[field]
    return row


# --- Schedule listing ---


def fix_start_times(matches: Iterable[Mapping[str, Any]], year: int, fallback: str) -> list[dict[str, Any]]:
    """Copies of *matches* whose unusable ``startTime`` is replaced by *fallback*.

    Unscheduled matches come back with epoch or missing start times; they
    are pinned to *fallback* (the event end) so that they sort last.
    """
    fixed = []
    for match in matches:
        row = dict(match)
        start = get_property(row, "startTime")
        try:
            valid = start is not None and parse_api_datetime(str(start)).year == year
        except ValueError:
            valid = False
        if not valid:
            set_property(row, "startTime", fallback)
        fixed.append(row)
    return fixed


def describe_selector(event_code: str, selector: Any) -> str:
    """Heading such as ``Schedule for CMPTX team 254 round Playoff``."""
    if isinstance(selector, tuple):
        team, level = selector
        return f"Schedule for {event_code} round {_level(level)} team {team}"
    if isinstance(selector, int):
        return f"Schedule for {event_code} team {selector}"
    if str(_level(selector)).lower() == "all":
        return f"Schedule for {event_code}"
    return f"Schedule for {event_code} round {_level(selector)}"


def _level(level: Any) -> str:
    return level.value if isinstance(level, TournamentLevel) else str(level)


def schedule_lines(
    event: Mapping[str, Any],
    matches: Sequence[Mapping[str, Any]],
    year: int,
    selector: Any,
) -> list[str]:
    """Human-readable schedule: event header followed by one line per match.

    Matches are ordered by start time; each line shows the description,
    local start time and the red and blue alliances.
    """
    code = event.get("code", "")
    lines = [f"> FRC Season of {year} | {code}"]
    start = _event_datetime(event.get("dateStart"))
    end = _event_datetime(event.get("dateEnd"))
    location = ", ".join(str(event[k]) for k in ("city", "stateprov", "country") if event.get(k))
    when = format_date_range(start, end) if start and end else ""
    lines.append(str(event.get("name", code)))
    lines.append(" | ".join(part for part in (location, when) if part))
    lines.append(describe_selector(code, selector))

    if not matches:
        lines.append("No matches.")
        return lines

    lines.append(f"Total matches: {len(matches)}")
    lines.append("=" * 109)
    fallback = str(event.get("dateEnd") or "")
    ordered = sort_collection(
        fix_start_times(matches, year, fallback),
        [lambda m: _event_datetime(m.get("startTime"))],
    )
    for match in ordered:
        when_ = _event_datetime(match.get("startTime"))
        teams = order_teams(match.get("teams") or [], 6)
        lines.append(
            f"{str(match.get('description', '')):<17} @ "
            f"{(format_match_time(when_) if when_ else ''):<21} - "
            f"Red [ {', '.join(teams['red'])} ] vs Blue [ {', '.join(teams['blue'])} ]"
        )
    return lines


def _event_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parse_api_datetime(str(value))
    except ValueError:
        return None
