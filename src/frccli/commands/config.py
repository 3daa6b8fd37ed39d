"""Config commands -- view and modify the user configuration.

Provides the ``frccli config`` sub-command group for reading, updating and
resetting the user's configuration file
(:class:`~frccli.models.GlobalConfig`). Settings are persisted in the
frccli config directory and supply defaults such as the user's team, the
API token source, output format and cache TTL.
"""

from __future__ import annotations

import typer

from frccli.output import error, format_response, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the stored configuration.

    Example::

        frccli config show
        frccli --json config show
    """
    from frccli.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Print the path of the configuration file."""
    from frccli.config import global_config_path

    print_data(str(global_config_path()))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'api.timeout')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the type of the field it replaces (bool, int
    or str) and the whole configuration is validated before saving. Unset
    optional fields such as ``team`` accept any value the model accepts.

    Raises:
        typer.Exit: With code 2 if the key is unknown or validation fails.

    Example::

        frccli config set team 254
        frccli config set api.token_source file:~/.frc-token
        frccli config set cache.ttl_seconds 600
    """
    from frccli.config import load_global_config, save_global_config
    from frccli.exit_codes import EXIT_INVALID_USAGE
    from frccli.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value  # type: ignore[assignment]

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the configuration to defaults.

    Asks for confirmation unless ``--force`` is given.

    Raises:
        typer.Exit: If the user declines confirmation.
    """
    from frccli.config import save_global_config
    from frccli.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
