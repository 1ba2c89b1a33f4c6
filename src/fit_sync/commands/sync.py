"""Cloud sync commands."""

import click

from ..app import open_app
from ..errors import FlushError
from .base import (
    async_command,
    echo_error,
    echo_success,
    echo_warning,
    ensure_initialized,
    ensure_remote,
    get_settings,
)


@click.group()
@click.pass_context
def sync(ctx):
    """Inspect and drive cloud sync."""
    ensure_initialized(ctx)


@sync.command()
@click.pass_context
@async_command
async def status(ctx):
    """Show whether local data is in sync with the cloud."""
    async with open_app(get_settings(ctx)) as app:
        state = app.sync_state.load()
        session = app.auth.current_session() if app.auth else None
        phase = app.sync.phase.value if app.sync else "disabled"

    click.echo()
    click.echo(click.style("Sync status", bold=True))
    click.echo("=" * 40)
    if session is None:
        click.echo("Account:      not signed in")
    else:
        click.echo(f"Account:      {session.email or session.user_id}")
    click.echo(f"Pending:      {'yes' if state.is_dirty else 'no'}")
    last = state.last_successful_sync_at
    click.echo(f"Last sync:    {last.strftime('%Y-%m-%d %H:%M:%S') if last else 'never'}")
    click.echo(f"Sync engine:  {phase}")


@sync.command()
@click.pass_context
@async_command
async def now(ctx):
    """Reconcile with the cloud now (push if pending, otherwise pull)."""
    async with open_app(get_settings(ctx)) as app:
        ensure_remote(ctx, app)
        if not app.auth.is_logged_in:
            echo_error("Not signed in. Run 'fit-sync account login' first.")
            ctx.exit(1)
        # Restoring the session already started a reconciliation.
        await app.sync.wait_idle()
        pending = app.sync_state.load().is_dirty

    if pending:
        echo_warning("Changes are still pending; they will be retried on the next sync")
    else:
        echo_success("In sync")


@sync.command()
@click.pass_context
@async_command
async def flush(ctx):
    """Push pending changes now and fail loudly if that is not possible."""
    async with open_app(get_settings(ctx)) as app:
        ensure_remote(ctx, app)
        try:
            await app.sync.flush_or_throw()
        except FlushError as e:
            echo_error(str(e))
            ctx.exit(1)
    echo_success("All local changes are in the cloud")
