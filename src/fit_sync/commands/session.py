"""Workout session and progress commands."""

import click

from ..app import open_app
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    get_settings,
    resolve,
)


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m {secs:02d}s"


@click.group()
@click.pass_context
def session(ctx):
    """Run workout sessions.

    Starting a session clears every set's done flag; ending it records
    a snapshot of the training in its history.
    """
    ensure_initialized(ctx)


@session.command()
@click.argument("training_id")
@click.pass_context
@async_command
async def begin(ctx, training_id: str):
    """Start a session for a training."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)
        if training.is_session_active:
            echo_warning("A session was already running; restarting it")
        app.store.begin_session(training.id)
    echo_success(f"Session started for '{training.title}'")


@session.command()
@click.argument("training_id")
@click.pass_context
@async_command
async def end(ctx, training_id: str):
    """Finish the running session and record it."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)
        if not training.is_session_active:
            echo_warning("No session was running; recording a zero-length session")
        recorded = app.store.end_session(training.id)

    echo_success(
        f"Session recorded for '{training.title}' ({_format_duration(recorded.duration)})"
    )
    for snapshot in recorded.exercises:
        max_weight = recorded.max_weight_per_exercise.get(snapshot.original_exercise_id, 0.0)
        click.echo(f"  {snapshot.name}: max {max_weight:g} kg")


@session.command()
@click.argument("training_id")
@click.pass_context
@async_command
async def reset(ctx, training_id: str):
    """Abandon the running session without recording it."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)
        app.store.reset_session(training.id)
    echo_success(f"Session reset for '{training.title}'")


@click.command()
@click.option("--limit", "-n", type=int, default=20, help="Number of sessions to show")
@click.pass_context
@async_command
async def history(ctx, limit: int):
    """Show recorded sessions, newest first."""
    ensure_initialized(ctx)
    async with open_app(get_settings(ctx)) as app:
        entries = app.store.session_history()

    if not entries:
        echo_info("No sessions recorded yet.")
        return

    headers = ["Date", "Training", "Duration", "Exercises"]
    rows = [
        [
            recorded.ended_at.strftime("%Y-%m-%d %H:%M"),
            training.title,
            _format_duration(recorded.duration),
            str(len(recorded.exercises)),
        ]
        for training, recorded in entries[:limit]
    ]
    click.echo()
    click.echo(format_table(headers, rows))


@click.command()
@click.pass_context
@async_command
async def stats(ctx):
    """Show all-time training statistics."""
    ensure_initialized(ctx)
    async with open_app(get_settings(ctx)) as app:
        totals = app.store.statistics()

    click.echo()
    click.echo(click.style("All-time statistics", bold=True))
    click.echo("=" * 40)
    click.echo(f"Completed workouts: {totals.total_completed_workouts}")
    click.echo(f"Training time:      {totals.total_training_minutes:.0f} min")
    click.echo(f"Moved weight:       {totals.total_moved_weight_kg:,.0f} kg")
    click.echo(f"Repetitions:        {totals.total_repetitions}")
