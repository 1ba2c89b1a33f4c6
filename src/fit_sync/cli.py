"""CLI entry point for fit-sync."""

import click

from .commands import (
    account,
    bodyweight,
    exercises,
    history,
    init,
    session,
    sets,
    stats,
    sync,
    timer,
    trainings,
)
from .commands.base import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="fit-sync")
@click.option("--verbose", "-v", count=True, help="Show sync logs (-vv for debug)")
@click.pass_context
def main(ctx, verbose: int):
    """fit-sync: offline-first workout log with cloud sync.

    All edits are saved locally first and pushed to the cloud in the
    background whenever you are signed in.

    Example usage:

        # Initialize the data directory
        fit-sync init

        # Plan a workout
        fit-sync trainings add "Push"
        fit-sync exercises add <training> "Bench Press" --sets 3

        # Run it
        fit-sync session begin <training>
        fit-sync session end <training>

        # Sync
        fit-sync account login
        fit-sync sync status
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)


# Register commands
main.add_command(init)
main.add_command(trainings)
main.add_command(exercises)
main.add_command(sets)
main.add_command(session)
main.add_command(history)
main.add_command(stats)
main.add_command(bodyweight)
main.add_command(timer)
main.add_command(sync)
main.add_command(account)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
