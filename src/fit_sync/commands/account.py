"""Account commands: login, status, logout, delete."""

import click
import questionary

from ..app import open_app
from ..errors import AuthError, FlushError, RemoteServiceError
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    ensure_remote,
    get_settings,
)


@click.group()
@click.pass_context
def account(ctx):
    """Sign in and out of the cloud account."""
    ensure_initialized(ctx)


@account.command()
@click.option("--email", "-e", help="Account email")
@click.pass_context
@async_command
async def login(ctx, email: str | None):
    """Sign in with email and password.

    After signing in, local changes are pushed if any are pending;
    otherwise the cloud copy is pulled.
    """
    async with open_app(get_settings(ctx)) as app:
        ensure_remote(ctx, app)

        if app.auth.is_logged_in:
            current = app.auth.current_session()
            echo_info(
                f"Already signed in as {current.email or current.user_id}. "
                "Run 'fit-sync account logout' to switch accounts."
            )
            return

        if not email:
            email = await questionary.text("Email:").ask_async()
        password = await questionary.password("Password:").ask_async()
        if not email or not password:
            echo_info("Cancelled")
            return

        try:
            session = await app.auth.sign_in_with_password(email, password)
        except AuthError as e:
            echo_error(f"Sign-in failed: {e}")
            ctx.exit(1)
        except RemoteServiceError as e:
            echo_error(f"Could not reach the server: {e}")
            ctx.exit(1)

    echo_success(f"Signed in as {session.email or session.user_id}")


@account.command()
@click.pass_context
@async_command
async def status(ctx):
    """Show the signed-in account."""
    async with open_app(get_settings(ctx)) as app:
        session = app.auth.current_session() if app.auth else None

    if session is None:
        echo_info("Not signed in")
        return
    click.echo(f"Signed in as {session.email or session.user_id}")
    if session.expires_at:
        click.echo(f"Token expires {session.expires_at.strftime('%Y-%m-%d %H:%M')}")


@account.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def logout(ctx, yes: bool):
    """Sign out and remove local data.

    Pending changes are pushed first. If that fails you stay signed in
    and nothing is deleted.
    """
    async with open_app(get_settings(ctx)) as app:
        ensure_remote(ctx, app)
        if not app.auth.is_logged_in:
            echo_info("Not signed in")
            return
        if not yes and not click.confirm("Sign out and remove local data from this device?"):
            echo_info("Cancelled")
            return

        try:
            await app.account.sign_out()
        except FlushError as e:
            echo_error(
                "Sign-out blocked so nothing gets lost. "
                f"Connect to the internet and try again.\n{e}"
            )
            ctx.exit(1)

    echo_success("Signed out; cloud copy is up to date and local data was removed")


@account.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, yes: bool):
    """Permanently delete the cloud account and local data."""
    async with open_app(get_settings(ctx)) as app:
        ensure_remote(ctx, app)
        if not app.auth.is_logged_in:
            echo_error("Not signed in")
            ctx.exit(1)
        if not yes and not click.confirm(
            "Permanently delete your account and all data?", default=False
        ):
            echo_info("Cancelled")
            return

        try:
            await app.account.delete_account()
        except FlushError as e:
            echo_error(f"Account deletion blocked: pending changes could not be synced.\n{e}")
            ctx.exit(1)
        except RemoteServiceError as e:
            echo_error(f"The account could NOT be deleted on the server. Please retry.\n{e}")
            ctx.exit(1)

    echo_success("Account deleted")
