"""Bodyweight and rest timer commands."""

from datetime import datetime, timezone

import click

from ..app import open_app
from ..models.settings import MAX_REST_SECONDS
from .base import (
    async_command,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_settings,
)


@click.group()
@click.pass_context
def bodyweight(ctx):
    """Track bodyweight."""
    ensure_initialized(ctx)


@bodyweight.command()
@click.argument("weight", type=float)
@click.option(
    "--date", "-d", "date", type=click.DateTime(formats=["%Y-%m-%d"]), help="Measurement date"
)
@click.pass_context
@async_command
async def add(ctx, weight: float, date: datetime | None):
    """Log a bodyweight measurement in kg."""
    if date is not None:
        date = date.replace(tzinfo=timezone.utc)
    async with open_app(get_settings(ctx)) as app:
        app.store.add_bodyweight_entry(weight, date=date)
    echo_success(f"Logged {weight:g} kg")


@bodyweight.command(name="list")
@click.option("--limit", "-n", type=int, default=20, help="Number of entries to show")
@click.pass_context
@async_command
async def list_entries(ctx, limit: int):
    """List bodyweight entries, newest first."""
    async with open_app(get_settings(ctx)) as app:
        entries = list(app.store.bodyweight_entries)

    if not entries:
        echo_info("No bodyweight entries yet.")
        return

    rows = [[e.date.strftime("%Y-%m-%d"), f"{e.weight_kg:g}"] for e in entries[:limit]]
    click.echo()
    click.echo(format_table(["Date", "Weight (kg)"], rows))


@bodyweight.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def reset(ctx, yes: bool):
    """Delete every bodyweight entry."""
    if not yes and not click.confirm("Delete all bodyweight entries?"):
        echo_info("Cancelled")
        return
    async with open_app(get_settings(ctx)) as app:
        app.store.reset_bodyweight_entries()
    echo_success("Bodyweight log cleared")


@click.group()
@click.pass_context
def timer(ctx):
    """Rest timer settings."""
    ensure_initialized(ctx)


@timer.command(name="show")
@click.pass_context
@async_command
async def show_timer(ctx):
    """Show the rest timer settings."""
    async with open_app(get_settings(ctx)) as app:
        settings = app.store.timer_settings
    state = "enabled" if settings.rest_timer_enabled else "disabled"
    click.echo(f"Rest timer {state}, {settings.rest_timer_seconds}s")


@timer.command(name="set")
@click.option("--enabled/--disabled", default=None, help="Turn the rest timer on or off")
@click.option(
    "--seconds",
    "-s",
    type=click.IntRange(0, MAX_REST_SECONDS, clamp=True),
    help="Rest duration in seconds (0-1800)",
)
@click.pass_context
@async_command
async def set_timer(ctx, enabled: bool | None, seconds: int | None):
    """Change the rest timer settings."""
    async with open_app(get_settings(ctx)) as app:
        settings = app.store.update_timer_settings(enabled=enabled, seconds=seconds)
    state = "enabled" if settings.rest_timer_enabled else "disabled"
    echo_success(f"Rest timer {state}, {settings.rest_timer_seconds}s")
