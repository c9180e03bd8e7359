"""Config commands -- view and modify the persisted configuration.

Provides the ``postfetch config`` sub-command group for reading, updating
and resetting the user's config file (:class:`~postfetch.models.GlobalConfig`):
base endpoint, connect/read/write timeouts, network log level and default
output format.
"""

from __future__ import annotations

import typer

from postfetch.exit_codes import EXIT_CONFIG_ERROR, EXIT_INVALID_USAGE
from postfetch.output import error, format_response, info, success, warning


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Environment overrides (``POSTFETCH_*``) are applied, so this is what
    the next request would use.

    Example::

        postfetch config show
        postfetch --json config show
    """
    from postfetch.config import get_config_dir, resolve_config
    from postfetch.exceptions import ConfigError

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'transport.read_timeout')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the existing
    field's type and the whole config is validated before saving, so a
    negative timeout is rejected here rather than at request time.

    Example::

        postfetch config set transport.base_url http://localhost:3000/
        postfetch config set transport.read_timeout 10
        postfetch config set log_level headers
    """
    from pydantic import ValidationError

    from postfetch.config import load_global_config, save_global_config
    from postfetch.exceptions import ConfigError
    from postfetch.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    coerced: object
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, (int, float)):
        try:
            coerced = float(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except (ConfigError, ValidationError) as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")
    if key == "transport.base_url" and new_config.transport.base_url.startswith("http://"):
        warning(f"{new_config.transport.base_url} is not encrypted; requests are sent in clear text.")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is given.

    Example::

        postfetch config reset --force
    """
    from postfetch.config import save_global_config
    from postfetch.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
