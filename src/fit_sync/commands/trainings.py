"""Training management commands."""

import click

from ..app import open_app
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_settings,
    resolve,
    short_id,
)


@click.group()
@click.pass_context
def trainings(ctx):
    """Manage trainings (workout plans)."""
    ensure_initialized(ctx)


@trainings.command(name="list")
@click.pass_context
@async_command
async def list_trainings(ctx):
    """List all trainings."""
    async with open_app(get_settings(ctx)) as app:
        items = list(app.store.trainings)

    if not items:
        echo_info("No trainings yet. Create one with 'fit-sync trainings add'")
        return

    headers = ["ID", "Title", "Exercises", "Sessions", "Active"]
    rows = [
        [
            short_id(t.id),
            t.title[:30] + "..." if len(t.title) > 30 else t.title,
            str(len(t.exercises)),
            str(len(t.sessions)),
            "yes" if t.is_session_active else "",
        ]
        for t in items
    ]

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(items)} training(s)")


@trainings.command()
@click.argument("training_id")
@click.pass_context
@async_command
async def show(ctx, training_id: str):
    """Show the exercises and sets of a training."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)

    if training is None:
        echo_error(f"Training {training_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo(click.style(f"{training.title} ({short_id(training.id)})", bold=True))
    click.echo("=" * 50)
    if training.is_session_active:
        started = training.current_session_start.strftime("%Y-%m-%d %H:%M")
        click.echo(f"Session in progress since {started}")

    for exercise in training.exercises:
        click.echo()
        click.echo(f"{exercise.name} ({short_id(exercise.id)})")
        if exercise.notes:
            click.echo(f"  Notes: {exercise.notes}")
        for number, set_entry in enumerate(exercise.sets, start=1):
            done = "x" if set_entry.is_done else " "
            click.echo(
                f"  [{done}] {number}. {set_entry.weight_kg:g} kg x "
                f"{set_entry.repetition.value} ({short_id(set_entry.id)})"
            )

    if not training.exercises:
        echo_info("No exercises yet. Add one with 'fit-sync exercises add'")


@trainings.command()
@click.argument("title")
@click.pass_context
@async_command
async def add(ctx, title: str):
    """Create a new training."""
    async with open_app(get_settings(ctx)) as app:
        training = app.store.add_training(title)
    echo_success(f"Created training '{title}' ({short_id(training.id)})")


@trainings.command()
@click.argument("training_id")
@click.argument("title")
@click.pass_context
@async_command
async def rename(ctx, training_id: str, title: str):
    """Rename a training."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)
        app.store.rename_training(training.id, title)
    echo_success(f"Renamed training to '{title}'")


@trainings.command()
@click.argument("training_id")
@click.argument("position", type=int)
@click.pass_context
@async_command
async def move(ctx, training_id: str, position: int):
    """Move a training to POSITION (1 = top)."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)
        app.store.move_training(training.id, position - 1)
    echo_success(f"Moved '{training.title}' to position {position}")


@trainings.command()
@click.argument("training_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, training_id: str, yes: bool):
    """Delete a training and its session history."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)

        if not yes and not click.confirm(f"Delete '{training.title}'?"):
            echo_info("Cancelled")
            return

        app.store.delete_training(training.id)
    echo_success(f"Deleted training '{training.title}'")
