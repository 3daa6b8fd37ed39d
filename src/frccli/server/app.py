"""FastAPI application serving match tables as HTML pages.

Routes:

- ``GET /frc/{year}/schedule/{event}``
- ``GET /frc/{year}/scores/{event}``
- ``GET /frc/{year}/results/{event}``

accept the query parameters ``team``, ``level``, ``sortkey``, ``include``
and ``exclude``. Include/exclude paths starting with ``Event.`` project the
event header record; all other paths project the match rows.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from html import escape
from typing import Any, Callable, Optional, Union

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse, Response

from frccli import __version__
from frccli.client import FrcApi, open_api
from frccli.display import render_table_html
from frccli.exceptions import FrccliError, NotFoundError, PathTraversalError
from frccli.matches import result_row, schedule_row, score_row
from frccli.models import ALL_LEVELS, GlobalConfig, TournamentLevel
from frccli.output import info, warning
from frccli.query import (
    SortSpec,
    parse_paths,
    parse_sort_keys,
    project,
    project_all,
    split_prefixed,
)
from frccli.server.assets import AssetCache
from frccli.server.pages import (
    DEFAULT_STYLES,
    SCHEDULE_STYLES,
    basic_header,
    event_header,
    generate_html,
    message_page,
)

ApiFactory = Callable[[], AbstractContextManager]

TABLE_ID = "frc-schedule"

# mode -> (title word, response field, row mapper)
_MODES: dict[str, tuple[str, str, Callable[[Any], dict[str, Any]]]] = {
    "schedule": ("Schedule", "Schedule", schedule_row),
    "scores": ("Scores", "MatchScores", score_row),
    "results": ("Results", "Matches", result_row),
}


class BadRequest(ValueError):
    pass


@dataclass
class MatchQuery:
    """Validated query parameters of a match route."""

    team: Optional[int]
    level: Any
    sort: Optional[SortSpec]
    include: Optional[list[str]]
    exclude: Optional[list[str]]

    @classmethod
    def parse(
        cls,
        team: Optional[str],
        level: Optional[str],
        sortkey: Optional[str],
        include: Optional[str],
        exclude: Optional[str],
    ) -> "MatchQuery":
        if include is not None and exclude is not None:
            raise BadRequest("Cannot include and exclude properties at the same time.")
        team_number = None
        if team:
            if not team.strip().isdigit():
                raise BadRequest(f"Not a team number: {team}")
            team_number = int(team)
        parsed_level: Any = None
        if level:
            if level.strip().lower() == ALL_LEVELS.lower():
                parsed_level = ALL_LEVELS
            else:
                try:
                    parsed_level = TournamentLevel.parse(level)
                except ValueError as exc:
                    raise BadRequest(str(exc)) from None
        try:
            sort = parse_sort_keys(sortkey) if sortkey else None
            for paths in (include, exclude):
                if paths is not None:
                    parse_paths(paths)
        except PathTraversalError as exc:
            raise BadRequest(str(exc)) from None
        return cls(
            team=team_number,
            level=parsed_level,
            sort=sort,
            include=_split(include),
            exclude=_split(exclude),
        )

    def selector(self, mode: str) -> Any:
        """API selector: a level, a team, ``(team, level)``, or ``"All"``."""
        if mode == "scores" or self.level == ALL_LEVELS:
            return self.level or ALL_LEVELS
        if self.team is not None and self.level is not None:
            return (self.team, self.level)
        if self.team is not None:
            return self.team
        return self.level or ALL_LEVELS

    def fields(self, prefix: Optional[str]) -> tuple[Optional[list[str]], bool]:
        """Paths addressed to the event (``prefix="Event"``) or to the rows (``None``)."""
        paths = self.exclude if self.exclude is not None else self.include
        if paths is None:
            return None, False
        scoped, rest = split_prefixed(paths, "Event")
        chosen = scoped if prefix else rest
        return (chosen or None), self.exclude is not None


def _split(value: Optional[str]) -> Optional[list[str]]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def create_app(
    config: GlobalConfig,
    api_factory: Optional[ApiFactory] = None,
    assets: Optional[AssetCache] = None,
) -> FastAPI:
    """Create the web front end.

    Args:
        config: Resolved configuration, used to open API sessions.
        api_factory: Zero-argument callable returning a context manager
            that yields an :class:`~frccli.client.FrcApi`. Defaults to
            :func:`~frccli.client.open_api` over *config*.
        assets: Static asset cache; defaults to the packaged assets.
    """
    factory: ApiFactory = api_factory or (lambda: open_api(config))
    assets = assets or AssetCache()

    app = FastAPI(title="frccli", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.assets = assets

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        client = request.client.host if request.client else "-"
        info(f"{client} > {request.method} {request.url.path} HTTP/{request.scope.get('http_version', '1.1')}")
        response = await call_next(request)
        info(f"{client} < {response.status_code}")
        return response

    @app.get("/static/{path:path}")
    def static(path: str) -> Response:
        try:
            return FileResponse(assets.resolve(path))
        except NotFoundError:
            warning(f"Static file not found: {path}")
            return PlainTextResponse(f"404 Not Found: {path}", status_code=404)

    @app.get("/favicon.ico")
    def favicon() -> Response:
        try:
            return FileResponse(assets.resolve("favicon.ico"))
        except NotFoundError:
            return PlainTextResponse("404 Not Found: favicon.ico", status_code=404)

    def match_page(
        mode: str,
        year: int,
        event: str,
        team: Optional[str],
        level: Optional[str],
        sortkey: Optional[str],
        include: Optional[str],
        exclude: Optional[str],
    ) -> HTMLResponse:
        try:
            query = MatchQuery.parse(team, level, sortkey, include, exclude)
        except BadRequest as exc:
            return HTMLResponse(escape(str(exc)), status_code=400)
        page = MatchPage(mode, year, event, query, assets)
        try:
            with factory() as api:
                return page.render(api)
        except FrccliError as exc:
            return page.failure(exc, basic_header(year, event))

    @app.get("/frc/{year}/schedule/{event}", response_class=HTMLResponse)
    def schedule(
        year: int,
        event: str,
        team: Optional[str] = None,
        level: Optional[str] = None,
        sortkey: Optional[str] = None,
        include: Optional[str] = None,
        exclude: Optional[str] = None,
    ) -> HTMLResponse:
        return match_page("schedule", year, event, team, level, sortkey, include, exclude)

    @app.get("/frc/{year}/scores/{event}", response_class=HTMLResponse)
    def scores(
        year: int,
        event: str,
        team: Optional[str] = None,
        level: Optional[str] = None,
        sortkey: Optional[str] = None,
        include: Optional[str] = None,
        exclude: Optional[str] = None,
    ) -> HTMLResponse:
        return match_page("scores", year, event, team, level, sortkey, include, exclude)

    @app.get("/frc/{year}/results/{event}", response_class=HTMLResponse)
    def results(
        year: int,
        event: str,
        team: Optional[str] = None,
        level: Optional[str] = None,
        sortkey: Optional[str] = None,
        include: Optional[str] = None,
        exclude: Optional[str] = None,
    ) -> HTMLResponse:
        return match_page("results", year, event, team, level, sortkey, include, exclude)

    return app


class MatchPage:
    """Renders one match route: event header plus match table."""

    def __init__(self, mode: str, year: int, event_code: str, query: MatchQuery, assets: AssetCache) -> None:
        self.mode = mode
        self.year = year
        self.event_code = event_code
        self.query = query
        self.assets = assets
        self.word, self.field, self.row = _MODES[mode]

    def title(self, suffix: str = "") -> str:
        title = f"FRC {self.year} {self.event_code} {self.word}"
        return f"{title} - {suffix}" if suffix else title

    def _message(self, status: int, suffix: str, header: str, message: str) -> HTMLResponse:
        page = message_page(
            self.title(suffix),
            header,
            message,
            self.year,
            self.event_code,
            self.assets.include(DEFAULT_STYLES),
        )
        return HTMLResponse(page, status_code=status)

    def header(self, api: FrcApi) -> Union[str, HTMLResponse]:
        """Event header HTML, or an error page when the event does not exist."""
        try:
            data = api.events(self.year, self.event_code)
        except FrccliError as exc:
            warning(f"Event lookup failed for {self.year} {self.event_code}: {exc}")
            return basic_header(self.year, self.event_code)
        events = data.get("Events") if isinstance(data, dict) else None
        if not events:
            message = f"Error fetching event {self.year} {escape(self.event_code)}. FRC API did not return an event.\nTry checking:"
            return self._message(502, "Event Not Found", basic_header(self.year, self.event_code), message)
        event = events[0]
        fields, exclude = self.query.fields("Event")
        if fields is not None:
            event = project(event, fields, exclude)
        return event_header(self.year, self.event_code, event)

    def failure(self, exc: FrccliError, header: str) -> HTMLResponse:
        """502 page for a failed upstream request."""
        message = (
            f"Error fetching {self.mode} {self.year} {escape(self.event_code)}. "
            f"FRC API request failed:\n<pre>{escape(str(exc))}</pre>\nTry checking:"
        )
        return self._message(502, "Request Failed", header, message)

    def fetch(self, api: FrcApi) -> dict[str, Any]:
        selector = self.query.selector(self.mode)
        if self.mode == "schedule":
            return api.schedule(self.year, self.event_code, selector)
        if self.mode == "scores":
            return api.scores(self.year, self.event_code, selector)
        return api.results(self.year, self.event_code, selector)

    def render(self, api: FrcApi) -> HTMLResponse:
        header = self.header(api)
        if isinstance(header, HTMLResponse):
            return header

        try:
            data = self.fetch(api)
        except FrccliError as exc:
            return self.failure(exc, header)

        matches = data.get(self.field)
        if matches is None:
            message = f"Error fetching {self.mode} {self.year} {escape(self.event_code)}. FRC API did not return {self.mode}.\nTry checking:"
            return self._message(502, f"{self.word} Not Found", header, message)
        if not matches:
            message = (
                f"No matches (yet) for event {self.year} {escape(self.event_code)}. "
                "Check back later for updates.<br>\nFor more information on this event, visit:"
            )
            return self._message(200, "No Matches", header, message)

        rows = [self.row(match) for match in matches]
        try:
            if self.query.sort is not None:
                self.query.sort.apply(rows)
            fields, exclude = self.query.fields(None)
            if fields is not None:
                rows = project_all(rows, fields, exclude)
        except PathTraversalError as exc:
            return HTMLResponse(escape(str(exc)), status_code=400)
        table = render_table_html(rows, table_id=TABLE_ID)
        body = f"\t\t{header}\n\t\t<main>{table}</main>"
        return HTMLResponse(generate_html(self.title(), body, self.assets.include(SCHEDULE_STYLES)))
