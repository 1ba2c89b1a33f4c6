"""Exercise and set commands."""

import click

from ..app import open_app
from .base import (
    async_command,
    echo_error,
    echo_success,
    ensure_initialized,
    get_settings,
    resolve,
    short_id,
)


def _find_exercise(ctx, app, training_id: str, exercise_id: str):
    training = resolve(app.store.trainings, training_id)
    if training is None:
        echo_error(f"Training {training_id} not found")
        ctx.exit(1)
    exercise = resolve(training.exercises, exercise_id)
    if exercise is None:
        echo_error(f"Exercise {exercise_id} not found in '{training.title}'")
        ctx.exit(1)
    return training, exercise


@click.group()
@click.pass_context
def exercises(ctx):
    """Manage the exercises of a training."""
    ensure_initialized(ctx)


@exercises.command(name="add")
@click.argument("training_id")
@click.argument("name")
@click.option("--sets", "-s", "set_count", type=int, default=0, help="Number of empty sets to create")
@click.pass_context
@async_command
async def add_exercise(ctx, training_id: str, name: str, set_count: int):
    """Add an exercise to a training."""
    async with open_app(get_settings(ctx)) as app:
        training = resolve(app.store.trainings, training_id)
        if training is None:
            echo_error(f"Training {training_id} not found")
            ctx.exit(1)
        exercise = app.store.add_exercise(training.id, name, set_count=set_count)
    echo_success(f"Added '{name}' to '{training.title}' ({short_id(exercise.id)})")


@exercises.command(name="edit")
@click.argument("training_id")
@click.argument("exercise_id")
@click.option("--name", "-n", help="New exercise name")
@click.option("--notes", help="Replace the exercise notes")
@click.pass_context
@async_command
async def edit_exercise(ctx, training_id: str, exercise_id: str, name: str | None, notes: str | None):
    """Rename an exercise or update its notes."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        app.store.update_exercise(training.id, exercise.id, name=name, notes=notes)
    echo_success(f"Updated '{exercise.name}'")


@exercises.command(name="move")
@click.argument("training_id")
@click.argument("exercise_id")
@click.argument("position", type=int)
@click.pass_context
@async_command
async def move_exercise(ctx, training_id: str, exercise_id: str, position: int):
    """Move an exercise to POSITION (1 = first)."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        app.store.move_exercise(training.id, exercise.id, position - 1)
    echo_success(f"Moved '{exercise.name}' to position {position}")


@exercises.command(name="delete")
@click.argument("training_id")
@click.argument("exercise_id")
@click.pass_context
@async_command
async def delete_exercise(ctx, training_id: str, exercise_id: str):
    """Remove an exercise from a training."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        app.store.delete_exercise(training.id, exercise.id)
    echo_success(f"Deleted '{exercise.name}'")


@click.group()
@click.pass_context
def sets(ctx):
    """Log and edit sets."""
    ensure_initialized(ctx)


@sets.command(name="add")
@click.argument("training_id")
@click.argument("exercise_id")
@click.option("--weight", "-w", type=float, default=0.0, help="Weight in kg")
@click.option("--reps", "-r", type=int, default=0, help="Repetitions")
@click.pass_context
@async_command
async def add_set(ctx, training_id: str, exercise_id: str, weight: float, reps: int):
    """Append a set to an exercise."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        set_entry = app.store.add_set(training.id, exercise.id, weight_kg=weight, reps=reps)
    echo_success(f"Added set {weight:g} kg x {reps} ({short_id(set_entry.id)})")


@sets.command(name="update")
@click.argument("training_id")
@click.argument("exercise_id")
@click.argument("set_id")
@click.option("--weight", "-w", type=float, help="Weight in kg")
@click.option("--reps", "-r", type=int, help="Repetitions")
@click.pass_context
@async_command
async def update_set(
    ctx, training_id: str, exercise_id: str, set_id: str, weight: float | None, reps: int | None
):
    """Change the weight and/or reps of a set."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        set_entry = resolve(exercise.sets, set_id)
        if set_entry is None:
            echo_error(f"Set {set_id} not found")
            ctx.exit(1)
        app.store.update_set(training.id, exercise.id, set_entry.id, weight_kg=weight, reps=reps)
    echo_success("Set updated")


@sets.command(name="toggle")
@click.argument("training_id")
@click.argument("exercise_id")
@click.argument("set_id")
@click.pass_context
@async_command
async def toggle_set(ctx, training_id: str, exercise_id: str, set_id: str):
    """Mark a set done (or not done)."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        set_entry = resolve(exercise.sets, set_id)
        if set_entry is None:
            echo_error(f"Set {set_id} not found")
            ctx.exit(1)
        app.store.toggle_set_done(training.id, exercise.id, set_entry.id)
        state = "done" if set_entry.is_done else "not done"
    echo_success(f"Set marked {state}")


@sets.command(name="move")
@click.argument("training_id")
@click.argument("exercise_id")
@click.argument("set_id")
@click.argument("position", type=int)
@click.pass_context
@async_command
async def move_set(ctx, training_id: str, exercise_id: str, set_id: str, position: int):
    """Move a set to POSITION (1 = first)."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        set_entry = resolve(exercise.sets, set_id)
        if set_entry is None:
            echo_error(f"Set {set_id} not found")
            ctx.exit(1)
        app.store.move_set(training.id, exercise.id, set_entry.id, position - 1)
    echo_success(f"Moved set to position {position}")


@sets.command(name="delete")
@click.argument("training_id")
@click.argument("exercise_id")
@click.argument("set_id")
@click.pass_context
@async_command
async def delete_set(ctx, training_id: str, exercise_id: str, set_id: str):
    """Delete a set."""
    async with open_app(get_settings(ctx)) as app:
        training, exercise = _find_exercise(ctx, app, training_id, exercise_id)
        set_entry = resolve(exercise.sets, set_id)
        if set_entry is None:
            echo_error(f"Set {set_id} not found")
            ctx.exit(1)
        app.store.delete_set(training.id, exercise.id, set_entry.id)
    echo_success("Set deleted")
