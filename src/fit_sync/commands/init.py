"""Initialize project command."""

import click

from ..store import get_data_dir, get_db_path, init_db
from .base import echo_info, echo_success, get_settings


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the fit-sync data directory.

    Creates the data directory and the local key-value database that
    holds sync state, timer settings and the cached login session.
    """
    settings = get_settings(ctx)
    data_dir = get_data_dir(settings.data_dir)

    echo_info(f"Initializing fit-sync in {data_dir}")
    init_db(get_db_path(data_dir))
    echo_success("Local database initialized")

    click.echo()
    click.echo("fit-sync is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Sign in to sync with the cloud (optional):")
    click.echo("     fit-sync account login")
    click.echo()
    click.echo("  2. Create a training:")
    click.echo('     fit-sync trainings add "Push Day"')
