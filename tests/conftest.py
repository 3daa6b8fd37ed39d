"""Shared test fixtures for frccli.

Provides reusable fixtures for isolated config environments, managing
output state, sample FRC API payloads, a mocked API transport and running
CLI commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from frccli.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears the environment variables frccli reads and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("frccli.config._is_xdg_platform", lambda: True)

    for var in ["FRC_API_TOKEN", "FRCCLI_BASE_URL", "USER_TEAM", "USER_DISTRICT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Sample API payloads
# ---------------------------------------------------------------------------


def _team(station: str, number: int, **extra: Any) -> dict[str, Any]:
    return {"teamNumber": number, "station": station, "surrogate": False, **extra}


@pytest.fixture
def event_record() -> dict[str, Any]:
    """A single ``Events`` entry as returned by ``/{year}/events``."""
    return {
        "code": "CMPTX",
        "divisionCode": None,
        "name": "FIRST Championship - Houston",
        "type": "ChampionshipSubdivision",
        "districtCode": None,
        "venue": "George R. Brown Convention Center",
        "city": "Houston",
        "stateprov": "TX",
        "country": "USA",
        "website": "https://www.firstchampionship.org",
        "timezone": "Central Standard Time",
        "dateStart": "2024-04-17T00:00:00",
        "dateEnd": "2024-04-20T23:59:59",
    }


@pytest.fixture
def schedule_matches() -> list[dict[str, Any]]:
    """Two ``Schedule`` entries, deliberately out of start-time order."""
    return [
        {
            "description": "Qualification 2",
            "tournamentLevel": "Qualification",
            "matchNumber": 2,
            "startTime": "2024-04-18T09:07:00",
            "field": "Primary",
            "teams": [
                _team("Blue1", 1678),
                _team("Red1", 254),
                _team("Red2", 971, surrogate=True),
                _team("Red3", 1323),
                _team("Blue2", 118),
                _team("Blue3", 2056),
            ],
        },
        {
            "description": "Qualification 1",
            "tournamentLevel": "Qualification",
            "matchNumber": 1,
            "startTime": "2024-04-18T09:00:00",
            "field": "Primary",
            "teams": [
                _team("Red1", 4414),
                _team("Red2", 6328),
                _team("Red3", 3476),
                _team("Blue1", 1114),
                _team("Blue2", 2910),
                _team("Blue3", 195),
            ],
        },
    ]


# ---------------------------------------------------------------------------
# Mocked FRC API
# ---------------------------------------------------------------------------


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def api_routes() -> dict[str, Any]:
    """Mutable ``path -> JSON body`` table served by :func:`mock_transport`.

    Keys are request paths relative to the API root (``/2024/events``).
    A value may also be a callable taking the :class:`httpx.Request`.
    """
    return {}


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def mock_transport(api_routes: dict[str, Any], requests_seen: list[httpx.Request]) -> httpx.MockTransport:
    """An :class:`httpx.MockTransport` answering from :func:`api_routes`."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        path = request.url.path.removeprefix("/v3.0")
        body = api_routes.get(path)
        if body is None:
            return httpx.Response(404, json={"Message": f"No route for {path}"})
        if callable(body):
            return body(request)
        return httpx.Response(200, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})

    return httpx.MockTransport(handler)


@pytest.fixture
def mocked_api(
    isolated_config: Path, monkeypatch: pytest.MonkeyPatch, mock_transport: httpx.MockTransport
) -> httpx.MockTransport:
    """Route every :func:`frccli.client.open_api` session through the mock transport.

    Provides a token and disables the response cache.
    """
    from frccli.client import session

    monkeypatch.setenv("FRC_API_TOKEN", "user:key")
    real_open_api = session.open_api

    def fake_open_api(config, use_cache=True, dry_run=False, transport=None):
        return real_open_api(config, use_cache=False, dry_run=dry_run, transport=mock_transport)

    monkeypatch.setattr("frccli.client.open_api", fake_open_api)
    return mock_transport


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
