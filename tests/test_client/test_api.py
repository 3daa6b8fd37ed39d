"""Tests for frccli.client.api -- endpoint mapping and selector parsing."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from frccli.client.api import FrcApi, flatten_alliance_scores, parse_team_or_level
from frccli.client.sync_client import SyncClient
from frccli.exceptions import InvalidUsageError
from frccli.models import ApiConfig, EventQuery, TournamentLevel, TournamentType


@pytest.fixture
def seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def api(seen: list[httpx.Request], plain_output):
    """An FrcApi whose transport echoes the tournament level back as one match."""

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        params = dict(request.url.params)
        level = params.get("tournamentLevel", "Any")
        path = request.url.path
        if path.endswith("/events"):
            body: Any = {"Events": [{"code": params.get("eventCode", "X")}]}
        elif "/schedule/" in path:
            body = {"Schedule": [{"tournamentLevel": level}]}
        elif "/matches/" in path:
            body = {"Matches": [{"tournamentLevel": level}]}
        elif "/scores/" in path:
            body = {"MatchScores": [{"matchLevel": level, "alliances": [{"alliance": "Red", "totalPoints": 10}]}]}
        else:
            body = {"path": path}
        return httpx.Response(200, content=json.dumps(body).encode())

    with SyncClient(ApiConfig(), transport=httpx.MockTransport(handler)) as client:
        yield FrcApi(client)


def _params(request: httpx.Request) -> dict[str, str]:
    return dict(request.url.params)


class TestParseTeamOrLevel:
    @pytest.mark.parametrize("value", [None, "", "all", "ALL"])
    def test_all(self, value) -> None:
        assert parse_team_or_level(value) == "All"

    def test_team_number(self) -> None:
        assert parse_team_or_level("254") == 254
        assert parse_team_or_level(254) == 254

    def test_level(self) -> None:
        assert parse_team_or_level("qualification") is TournamentLevel.QUALIFICATION

    @pytest.mark.parametrize("value", ["254/playoff", "254 playoff", "254,playoff", "254;playoff", "254-playoff"])
    def test_team_and_level(self, value: str) -> None:
        assert parse_team_or_level(value) == (254, TournamentLevel.PLAYOFF)

    def test_pair_from_sequence(self) -> None:
        assert parse_team_or_level(["118", "Practice"]) == (118, TournamentLevel.PRACTICE)

    @pytest.mark.parametrize("value", ["finals", "abc/playoff", "254/nope"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(InvalidUsageError):
            parse_team_or_level(value)


class TestEndpoints:
    def test_season(self, api: FrcApi, seen) -> None:
        assert api.season(2024) == {"path": "/v3.0/2024"}

    def test_get_data_path(self, api: FrcApi, seen) -> None:
        api.get_data(2023, "/districts")
        assert seen[0].url.path == "/v3.0/2023/districts"

    def test_events_by_code(self, api: FrcApi, seen) -> None:
        api.events(2024, "CMPTX")
        assert _params(seen[0]) == {"eventCode": "CMPTX"}

    def test_events_by_team(self, api: FrcApi, seen) -> None:
        api.events(2024, 254)
        assert _params(seen[0]) == {"teamNumber": "254"}

    def test_events_unfiltered(self, api: FrcApi, seen) -> None:
        api.events(2024)
        assert _params(seen[0]) == {}

    def test_events_query(self, api: FrcApi, seen) -> None:
        query = EventQuery(
            districtCode="FIM",
            excludeDistrict=False,
            tournamentType=TournamentType.DISTRICT_EVENT,
        )
        api.events(2024, query)
        assert _params(seen[0]) == {
            "districtCode": "FIM",
            "excludeDistrict": "false",
            "tournamentType": "DistrictEvent",
        }


class TestMatches:
    def test_all_levels_are_concatenated_in_order(self, api: FrcApi, seen) -> None:
        data = api.schedule(2024, "CMPTX")
        assert [m["tournamentLevel"] for m in data["Schedule"]] == [
            "Practice",
            "Qualification",
            "Playoff",
        ]
        assert len(seen) == 3

    def test_team_only(self, api: FrcApi, seen) -> None:
        api.results(2024, "CMPTX", 254)
        assert seen[0].url.path == "/v3.0/2024/matches/CMPTX"
        assert _params(seen[0]) == {"teamNumber": "254"}

    def test_team_and_level(self, api: FrcApi, seen) -> None:
        api.schedule(2024, "CMPTX", (254, TournamentLevel.PLAYOFF))
        assert _params(seen[0]) == {"tournamentLevel": "Playoff", "teamNumber": "254"}

    def test_scores_by_level(self, api: FrcApi, seen) -> None:
        data = api.scores(2024, "CMPTX", TournamentLevel.QUALIFICATION)
        assert seen[0].url.path == "/v3.0/2024/scores/CMPTX"
        assert data["MatchScores"][0]["matchLevel"] == "Qualification"

    @pytest.mark.parametrize("level", [254, (254, TournamentLevel.PLAYOFF)])
    def test_scores_reject_team(self, api: FrcApi, level) -> None:
        with pytest.raises(InvalidUsageError):
            api.scores(2024, "CMPTX", level)

    def test_scores_flatten_alliances(self, api: FrcApi) -> None:
        data = api.scores(2024, "CMPTX", "Playoff", flatten_alliances=True)
        assert data["MatchScores"][0]["Alliances"] == ['Red: {"alliance":"Red","totalPoints":10}']


class TestFlattenAllianceScores:
    def test_does_not_mutate_input(self) -> None:
        score = {"matchNumber": 1, "alliances": [{"alliance": "Blue", "autoPoints": 3}]}
        flat = flatten_alliance_scores(score)
        assert "Alliances" not in score
        assert flat["Alliances"] == ['Blue: {"alliance":"Blue","autoPoints":3}']
        assert flat["matchNumber"] == 1

    def test_missing_alliances(self) -> None:
        assert flatten_alliance_scores({"matchNumber": 1})["Alliances"] == []
