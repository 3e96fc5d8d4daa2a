"""Main entry point for the filecache command line.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from filecache.core.command_handler import EXIT_ERROR, CommandHandler
from filecache.domain.models.errors import FileCacheError
# --- Infrastructure Layer ---
from filecache.infrastructure.cache.file_cache import create_cache_store
from filecache.infrastructure.cli.display import ConsoleDisplay
from filecache.infrastructure.config.settings import (
    DEFAULT_CONFIG_FILE,
    build_namespace,
    get_config,
    load_configuration,
)
from filecache.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, level_from_name, setup_logging

logger = logging.getLogger(__name__)


def create_dependencies(
    overrides: Optional[Dict[str, Any]] = None,
    config_file: Path = DEFAULT_CONFIG_FILE,
    log_level: Optional[str] = None,
) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.

    Raises:
        FileCacheError: If the configuration does not describe a valid cache.
    """
    dependencies: Dict[str, Any] = {}

    # 1. Load Configuration First
    load_configuration(config_file=config_file)
    setup_logging(
        log_level=level_from_name(log_level or get_config("logging.level")),
        log_format=get_config("logging.format", DEFAULT_LOG_FORMAT),
        log_file=get_config("logging.file"),
    )
    logger.debug("Configuration and logging initialized.")

    # 2. Instantiate Infrastructure Adapters
    dependencies["ui"] = ConsoleDisplay()
    dependencies["namespace"] = build_namespace(overrides)
    dependencies["cache_service"] = create_cache_store(dependencies["namespace"])

    # 3. Instantiate Command Handler
    dependencies["command_handler"] = CommandHandler(
        cache_service=dependencies["cache_service"],
        ui=dependencies["ui"],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="filecache",
    help="filecache: store, read and purge values in a filesystem-backed cache.",
    add_completion=False,
    no_args_is_help=True,
)


def _handler(ctx: typer.Context) -> CommandHandler:
    return ctx.obj["command_handler"]


@app.callback()
def main_callback(
    ctx: typer.Context,
    directory: Annotated[Optional[str], typer.Option("--directory", "-d", help="Cache directory (default 'filecache/').")] = None,
    temp: Annotated[Optional[bool], typer.Option("--temp/--no-temp", help="Resolve the directory below the system temp directory.")] = None,
    prefix: Annotated[Optional[str], typer.Option("--prefix", help="Prefix added to every key.")] = None,
    layout: Annotated[Optional[str], typer.Option("--layout", help="'flat' or 'sharded'.")] = None,
    hash_depth: Annotated[Optional[int], typer.Option("--hash-depth", help="Shard subdirectory length, 1 to 4 (sharded layout).")] = None,
    codec: Annotated[Optional[str], typer.Option("--codec", help="'pickle', 'json' or 'literal'.")] = None,
    default_ttl: Annotated[Optional[float], typer.Option("--default-ttl", help="Seconds before entries expire (0 = never).")] = None,
    config: Annotated[Path, typer.Option("--config", help="YAML configuration file.")] = DEFAULT_CONFIG_FILE,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING...")] = None,
):
    """Configures the cache shared by every command."""
    overrides = {
        "cache.directory": directory,
        "cache.relative_to_temp": temp,
        "cache.prefix": prefix,
        "cache.layout": layout,
        "cache.hash_depth": hash_depth,
        "cache.codec": codec,
        "cache.default_ttl": default_ttl,
    }
    try:
        ctx.obj = create_dependencies(overrides, config_file=config, log_level=log_level)
    except FileCacheError as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        ConsoleDisplay().display_error(f"Invalid cache configuration: {e}")
        raise typer.Exit(code=EXIT_ERROR)


# --- CLI Commands ---

@app.command()
def get(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to read.")],
):
    """Print the cached value of KEY (exit code 1 on a miss)."""
    raise typer.Exit(code=_handler(ctx).handle_get(key))


@app.command(name="set")
def set_command(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to store the value under.")],
    value: Annotated[str, typer.Argument(help="Value to store.")],
    ttl: Annotated[Optional[float], typer.Option("--ttl", "-t", help="Time to live in seconds (default: configured TTL).")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Parse VALUE as JSON before storing it.")] = False,
):
    """Store VALUE under KEY."""
    raise typer.Exit(code=_handler(ctx).handle_set(key, value, ttl, as_json))


@app.command()
def purge(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to remove.")],
):
    """Remove KEY from the cache."""
    raise typer.Exit(code=_handler(ctx).handle_purge(key))


@app.command(name="purge-all")
def purge_all_command(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
):
    """Remove every entry of the cache (the whole directory for the sharded layout)."""
    if not yes:
        typer.confirm(f"Purge the cache at {ctx.obj['cache_service'].root}?", abort=True)
    raise typer.Exit(code=_handler(ctx).handle_purge_all())


@app.command()
def inspect(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key to inspect.")],
):
    """Show the file, state and expiration of KEY without evicting it."""
    raise typer.Exit(code=_handler(ctx).handle_inspect(key))


def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
