"""frccli -- query the FIRST Robotics Competition Events API from the terminal.

The package wraps the FRC Events API (v3.0) in a Typer CLI and a small
FastAPI web front end. API responses are kept as plain decoded JSON and
shaped by a generic record engine:

* :mod:`frccli.query` -- dotted property paths, multi-key sorting and
  field projection over arbitrary records.
* :mod:`frccli.display` -- label formatting and text/HTML list and table
  renderers.

Typical usage::

    export FRC_API_TOKEN=username:authorization-key
    frccli --team 254 schedule CMPTX
    frccli events all --props code,name,dateStart --sort dateStart
    frccli serve --port 3000

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic configuration and query models.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    matches: Match schedule, result and score shaping.
    server: FastAPI front end.
"""

__version__ = "0.1.0"
