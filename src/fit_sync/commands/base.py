"""Shared CLI utilities."""

import asyncio
import logging
from functools import wraps
from typing import Sequence, TypeVar

import click

from ..config import Settings
from ..errors import ConfigError
from ..store.engine import DB_FILE

T = TypeVar("T")

SHORT_ID_LENGTH = 8


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def configure_logging(verbosity: int) -> None:
    """Configure root logging for the CLI (-v: INFO, -vv: DEBUG)."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def get_settings(ctx: click.Context) -> Settings:
    """Get settings for this invocation, reading the environment once."""
    root = ctx.find_root()
    root.ensure_object(dict)
    if "settings" not in root.obj:
        try:
            root.obj["settings"] = Settings.from_env()
        except ConfigError as e:
            echo_error(str(e))
            ctx.exit(1)
    return root.obj["settings"]


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the local data directory has been initialized."""
    settings = get_settings(ctx)
    if not (settings.data_dir / DB_FILE).exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'fit-sync init' first."
        )
        ctx.exit(1)


def ensure_remote(ctx: click.Context, app) -> None:
    """Exit unless the app is configured to talk to Supabase."""
    if not app.is_online_capable:
        echo_error(
            "No Supabase project configured. "
            "Set FIT_SYNC_SUPABASE_URL and FIT_SYNC_SUPABASE_ANON_KEY."
        )
        ctx.exit(1)


def short_id(entity_id: str) -> str:
    return entity_id[:SHORT_ID_LENGTH]


def resolve(items: Sequence[T], id_prefix: str) -> T | None:
    """Find the single item whose id starts with ``id_prefix``."""
    matches = [item for item in items if item.id.startswith(id_prefix)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        echo_error(f"'{id_prefix}' is ambiguous ({len(matches)} matches)")
    return None


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message, err=True)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = [
        "".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers)),
        "".join("-" * w + " " * padding for w in widths),
    ]
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row))
        )

    return "\n".join(lines)
