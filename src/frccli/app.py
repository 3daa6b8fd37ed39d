"""Typer application and CLI entry point for frccli.

This module wires together the top-level Typer application: the global
options handled by :func:`main_callback`, the data commands (``season``,
``events``, ``schedule``, ``scores``, ``results``, ``get``), the ``serve``
command that starts the web front end, and the ``config`` / ``cache``
management groups.

Data commands share three record-shaping options:

* ``--props`` -- comma-separated dotted paths; each record is reduced to
  those paths (``teams.0.teamNumber`` style addressing).
* ``--exclude`` -- comma-separated top-level keys to drop.
* ``--sort`` -- comma-separated sort keys; a leading ``-`` on the first key
  reverses the order.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`frccli.config`: Configuration resolution.
    :mod:`frccli.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import re
import signal
import sys
import traceback
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Optional

import typer

from frccli import __version__
from frccli.exceptions import InvalidUsageError, NotFoundError
from frccli.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="frccli",
    help="Query FRC season, event, schedule, score and result data.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

PROPS_HELP = "Comma-separated dotted paths to show (e.g. 'code,name,address.city')."
EXCLUDE_HELP = "Comma-separated top-level keys to hide."
SORT_HELP = "Comma-separated sort keys; prefix the first with '-' to reverse."


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"frccli {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    year: Optional[int] = typer.Option(
        None, "--year", "-y", help="Season year (defaults to the current year)."
    ),
    team: Optional[int] = typer.Option(
        None, "--team", "-t", help="Team number (overrides USER_TEAM and config)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    html_output: bool = typer.Option(False, "--html", help="HTML fragment output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the response cache."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print requests without sending them."
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Disable interactive prompts."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the configuration, initialises the global
    :class:`~frccli.output.OutputManager` and stores shared options in
    ``ctx.obj`` for the sub-commands.

    Raises:
        ConfigError: If a configuration layer is invalid.
    """
    from frccli.config import resolve_config
    from frccli.exceptions import ConfigError
    from frccli.output import OutputFormat, OutputManager, set_output

    fmt_flag = None
    if json_output:
        fmt_flag = OutputFormat.JSON.value
    elif plain_output:
        fmt_flag = OutputFormat.PLAIN.value
    elif html_output:
        fmt_flag = OutputFormat.HTML.value

    config = resolve_config(cli_team=team, cli_format=fmt_flag)
    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        raise ConfigError(f"Unknown output format: {config.output.format}") from None

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["year"] = year or datetime.now().year
    ctx.obj["use_cache"] = not no_cache
    ctx.obj["dry_run"] = dry_run
    ctx.obj["no_input"] = no_input


# ------------------------------------------------------------------ #
# Shared helpers
# ------------------------------------------------------------------ #


@contextmanager
def _api(ctx: typer.Context) -> Iterator[Any]:
    """Open an :class:`~frccli.client.FrcApi` session from the context options."""
    from frccli.client import open_api

    with open_api(
        ctx.obj["config"], use_cache=ctx.obj["use_cache"], dry_run=ctx.obj["dry_run"]
    ) as api:
        yield api


def _split(value: Optional[str]) -> Optional[list[str]]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _exclusive(**options: Optional[str]) -> None:
    given = [f"--{name}" for name, value in options.items() if value is not None]
    if len(given) > 1:
        raise InvalidUsageError(f"{' and '.join(given)} cannot be used together")


def _ask(ctx: typer.Context, label: str, default: Optional[str] = None) -> str:
    """Prompt for a missing argument, or fail when prompts are disabled."""
    if ctx.obj["no_input"]:
        if default is not None:
            return default
        raise InvalidUsageError(f"Missing {label.lower()} (prompts disabled by --no-input)")
    return typer.prompt(label, default=default)


def _event_code(ctx: typer.Context, event: Optional[str]) -> str:
    return (event or _ask(ctx, "Event")).strip().upper()


def _default_selector(ctx: typer.Context) -> str:
    team = ctx.obj["config"].team
    return str(team) if team is not None else "All"


def _shape(
    records: list[Any],
    props: Optional[str] = None,
    exclude: Optional[str] = None,
    sort: Optional[str] = None,
) -> list[Any]:
    """Sort, then pluck ``--props`` paths or drop ``--exclude`` keys."""
    from frccli.query import parse_sort_keys, pluck, project_all

    if sort:
        parse_sort_keys(sort).apply(records)
    paths = _split(props)
    if paths:
        return [pluck(record, paths) for record in records]
    keys = _split(exclude)
    if keys:
        return project_all(records, keys, exclude=True)
    return records


def _items(data: Any, field: str) -> list[Any]:
    items = data.get(field) if isinstance(data, dict) else None
    return list(items or [])


# ------------------------------------------------------------------ #
# Data commands
# ------------------------------------------------------------------ #


@app.command("season")
def season_command(
    ctx: typer.Context,
    props: Optional[str] = typer.Option(
        None, "--props", "-p", help="Comma-separated top-level keys to show."
    ),
    sub: Optional[str] = typer.Option(
        None, "--sub", "-s", help="Dotted path of the single value to show."
    ),
) -> None:
    """Show the season summary (championships, event and team counts).

    Example::

        frccli season
        frccli --year 2023 season --sub frcChampionships
    """
    from frccli.output import print_record
    from frccli.query import sort_collection

    _exclusive(props=props, sub=sub)
    with _api(ctx) as api:
        data = api.season(ctx.obj["year"])
    if ctx.obj["dry_run"]:
        return

    championships = data.get("frcChampionships") if isinstance(data, dict) else None
    if isinstance(championships, list):
        sort_collection(championships, ["startDate", "name"])
    print_record(data, _split(props) if props else sub)


@app.command("events")
def events_command(
    ctx: typer.Context,
    scope: Optional[str] = typer.Argument(
        None,
        help="'all' for every event of the season, or an event code. "
        "Defaults to the events of the configured team.",
    ),
    props: Optional[str] = typer.Option(None, "--props", "-p", help=PROPS_HELP),
    exclude: Optional[str] = typer.Option(None, "--exclude", "-x", help=EXCLUDE_HELP),
    sort: Optional[str] = typer.Option(None, "--sort", "-s", help=SORT_HELP),
) -> None:
    """List events as a table.

    Example::

        frccli events
        frccli events all --props code,name,dateStart --sort dateStart
    """
    from frccli.output import print_records

    _exclusive(props=props, exclude=exclude)
    query: Any = ctx.obj["config"].team
    if scope is not None:
        query = None if scope.lower() == "all" else scope.upper()

    with _api(ctx) as api:
        data = api.events(ctx.obj["year"], query)
    if ctx.obj["dry_run"]:
        return
    print_records(_shape(_items(data, "Events"), props, exclude, sort), title="Events")


@app.command("schedule")
def schedule_command(
    ctx: typer.Context,
    event: Optional[str] = typer.Argument(None, help="Event code (prompted when omitted)."),
    team_or_level: Optional[str] = typer.Argument(
        None,
        help="Team number, tournament level, TEAM/LEVEL, or 'all'. "
        "Defaults to the configured team.",
    ),
    props: Optional[str] = typer.Option(None, "--props", "-p", help=PROPS_HELP),
    sort: Optional[str] = typer.Option(
        None, "--sort", "-s", help=SORT_HELP + " Applies with --props."
    ),
) -> None:
    """Show the match schedule of an event.

    Without ``--props`` the schedule is printed as a listing ordered by
    start time under an event header; with ``--props`` the selected match
    fields are printed as a table.

    Example::

        frccli schedule CMPTX 254
        frccli schedule CMPTX qualification --props description,startTime
    """
    from frccli.client import parse_team_or_level
    from frccli.matches import schedule_lines
    from frccli.output import print_data, print_records

    year = ctx.obj["year"]
    event_code = _event_code(ctx, event)
    selector = parse_team_or_level(
        team_or_level or _ask(ctx, "Team/Level", _default_selector(ctx))
    )

    with _api(ctx) as api:
        data = api.schedule(year, event_code, selector)
        events = [] if props else _items(api.events(year, event_code), "Events")
    if ctx.obj["dry_run"]:
        return

    matches = _items(data, "Schedule")
    if props:
        print_records(_shape(matches, props, sort=sort), title=f"{event_code} Schedule")
        return
    if not events:
        raise NotFoundError(f"Event not found: {year} {event_code}")
    print_data("\n".join(schedule_lines(events[0], matches, year, selector)))


@app.command("scores")
def scores_command(
    ctx: typer.Context,
    event: Optional[str] = typer.Argument(None, help="Event code (prompted when omitted)."),
    level: Optional[str] = typer.Argument(
        None, help="Tournament level or 'all' (default)."
    ),
    flatten_alliances: bool = typer.Option(
        False,
        "--flatten-alliances",
        help="Add an 'Alliances' column of one-line alliance summaries.",
    ),
    props: Optional[str] = typer.Option(None, "--props", "-p", help=PROPS_HELP),
    sort: Optional[str] = typer.Option(None, "--sort", "-s", help=SORT_HELP),
) -> None:
    """Show detailed match score breakdowns of an event.

    Example::

        frccli scores CMPTX playoff --props matchNumber,alliances.0.totalPoints
    """
    from frccli.client import parse_team_or_level
    from frccli.output import print_records

    event_code = _event_code(ctx, event)
    selector = parse_team_or_level(level)

    with _api(ctx) as api:
        data = api.scores(
            ctx.obj["year"], event_code, selector, flatten_alliances=flatten_alliances
        )
    if ctx.obj["dry_run"]:
        return
    records = _shape(_items(data, "MatchScores"), props, sort=sort)
    print_records(records, title=f"{event_code} Scores")


@app.command("results")
def results_command(
    ctx: typer.Context,
    event: Optional[str] = typer.Argument(None, help="Event code (prompted when omitted)."),
    team_or_level: Optional[str] = typer.Argument(
        None, help="Team number, tournament level, TEAM/LEVEL, or 'all' (default)."
    ),
    props: Optional[str] = typer.Option(None, "--props", "-p", help=PROPS_HELP),
    exclude: Optional[str] = typer.Option(None, "--exclude", "-x", help=EXCLUDE_HELP),
    sort: Optional[str] = typer.Option(None, "--sort", "-s", help=SORT_HELP),
) -> None:
    """Show match results of an event.

    By default each match is one row with a column per driver station and
    the final, auto and foul scores of both alliances. ``--props`` and
    ``--sort`` address the API's match records; ``--exclude`` drops
    columns of the default rows.

    Example::

        frccli results CMPTX 254
        frccli results CMPTX --exclude resultsPosted,redFoulScore,blueFoulScore
    """
    from frccli.client import parse_team_or_level
    from frccli.matches import result_row
    from frccli.output import print_records
    from frccli.query import project_all

    _exclusive(props=props, exclude=exclude)
    event_code = _event_code(ctx, event)
    selector = parse_team_or_level(team_or_level)

    with _api(ctx) as api:
        data = api.results(ctx.obj["year"], event_code, selector)
    if ctx.obj["dry_run"]:
        return

    matches = _shape(_items(data, "Matches"), props, sort=sort)
    if props:
        records = matches
    else:
        records = [result_row(match) for match in matches]
        keys = _split(exclude)
        if keys:
            records = project_all(records, keys, exclude=True)
    print_records(records, title=f"{event_code} Results")


_YEAR_PREFIX = re.compile(r"^/?(\d{4})(?:/|$)")


@app.command("get")
def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(
        help="API path, either 'YEAR/path' or a path under --year (e.g. 'districts')."
    ),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
) -> None:
    """Print a raw API response.

    Example::

        frccli get 2024/teams --param eventCode=CMPTX
        frccli --year 2023 get districts
    """
    from frccli.output import format_response

    year = ctx.obj["year"]
    match = _YEAR_PREFIX.match(path)
    if match:
        year = int(match.group(1))
        path = path[match.end():]

    params: dict[str, Any] = {}
    for item in param or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Expected key=value, got: {item}")
        params[key] = value

    with _api(ctx) as api:
        data = api.get_data(year, path.strip("/"), params or None)
    if ctx.obj["dry_run"]:
        return
    format_response(data)


@app.command("serve")
def serve_command(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on."),
) -> None:
    """Serve schedule, score and result pages over HTTP.

    Pages live under ``/frc/{year}/schedule|scores|results/{event}`` and
    accept ``team``, ``level``, ``sortkey``, ``include`` and ``exclude``
    query parameters.
    """
    import uvicorn

    from frccli.client import open_api
    from frccli.output import info
    from frccli.server import create_app

    config = ctx.obj["config"]
    use_cache = ctx.obj["use_cache"]
    host = host or config.server.host
    port = port or config.server.port

    web = create_app(config, api_factory=lambda: open_api(config, use_cache=use_cache))
    info(f"Serving on http://{host}:{port}")
    uvicorn.run(web, host=host, port=port, log_level="warning")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from frccli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def _register_commands() -> None:
    from frccli.commands.cache import cache_app
    from frccli.commands.config import config_app

    app.add_typer(config_app, name="config", help="Configuration management.")
    app.add_typer(cache_app, name="cache", help="Response cache management.")


_register_commands()


def main() -> None:
    """CLI entry point invoked by the ``frccli`` console script.

    Unhandled :class:`~frccli.exceptions.FrccliError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from frccli.exceptions import FrccliError
        from frccli.output import error

        if isinstance(exc, FrccliError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
