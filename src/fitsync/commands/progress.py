"""Progress tracking and exercise catalog commands."""

from datetime import date

import click

from ..errors import ValidationError
from ..models import BodyMeasurements, ProgressEntry
from ..models.exercises import Exercise, filter_exercises
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_id,
    format_table,
    get_state,
    open_services,
    source_label,
)


@click.group()
def progress():
    """Track body weight and measurements."""
    pass


@progress.command("log")
@click.option("--weight", "-w", type=float, required=True, help="Body weight in kg")
@click.option(
    "--date",
    "tracking_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Tracking date (default: today)",
)
@click.option("--body-fat", type=float, default=None, help="Body fat percentage")
@click.option("--waist", type=float, default=None, help="Waist circumference in cm")
@click.option("--notes", "-n", default="", help="Free-form notes")
@click.pass_context
@async_command
async def log(ctx: click.Context, weight, tracking_date, body_fat, waist, notes):
    """Log a progress entry."""
    ensure_initialized(ctx)
    settings = get_state(ctx).settings

    try:
        entry = ProgressEntry(
            weight=weight,
            tracking_date=tracking_date.date() if tracking_date else date.today(),
            user_id=settings.default_user_id,
            body_fat_percentage=body_fat,
            measurements=BodyMeasurements(waist=waist),
            notes=notes,
        )
    except ValidationError as e:
        echo_error(str(e))
        ctx.exit(1)

    async with open_services(ctx) as services:
        response = await services.progress.log_progress(entry.to_dict())

    saved = response.entity("progress", "progress_id") or {}
    echo_success(
        f"Logged {entry.weight:g} kg on {entry.tracking_date.isoformat()} "
        f"(ID: {format_id(saved.get('progress_id'))})"
    )
    if not entry.measurements.is_empty():
        parts = [
            f"{name} {value:g} cm"
            for name, value in entry.measurements.to_dict().items()
            if value is not None
        ]
        echo_info("Measurements: " + ", ".join(parts))
    if response.is_fallback:
        echo_warning("Backend unavailable: saved locally, run 'fitsync sync' later.")


@progress.command("list")
@click.option("--limit", "-l", default=20, help="Maximum entries to show")
@click.pass_context
@async_command
async def list_progress(ctx: click.Context, limit: int):
    """List progress entries, newest first."""
    ensure_initialized(ctx)
    user_id = get_state(ctx).settings.default_user_id

    async with open_services(ctx) as services:
        response = await services.progress.get_progress(user_id)

    entries = []
    for item in response.items("progress"):
        try:
            entries.append((item, ProgressEntry.from_dict(item)))
        except (ValidationError, ValueError):
            echo_warning(f"Skipping unreadable entry {item.get('progress_id')!r}")
    if not entries:
        echo_info("No progress entries yet.")
        return

    entries.sort(key=lambda pair: pair[1].tracking_date, reverse=True)
    rows = [
        [
            format_id(item.get("progress_id")),
            entry.tracking_date.isoformat(),
            f"{entry.weight:g}",
            f"{entry.body_fat_percentage:g}" if entry.body_fat_percentage is not None else "-",
            entry.notes[:40],
        ]
        for item, entry in entries[:limit]
    ]
    click.echo(format_table(["ID", "Date", "Weight", "Body fat %", "Notes"], rows))

    if len(entries) > 1:
        change = entries[0][1].weight - entries[-1][1].weight
        click.echo()
        click.echo(f"Change since {entries[-1][1].tracking_date.isoformat()}: {change:+.1f} kg")
    click.echo(f"Source: {source_label(response.source)}")


@click.group()
def exercises():
    """Browse the exercise catalog."""
    pass


@exercises.command("list")
@click.option("--muscle-group", "-m", default=None, help="Filter by muscle group")
@click.option(
    "--difficulty",
    "-d",
    type=click.Choice(["beginner", "intermediate", "advanced"], case_sensitive=False),
    default=None,
    help="Filter by difficulty",
)
@click.pass_context
@async_command
async def list_exercises(ctx: click.Context, muscle_group: str | None, difficulty: str | None):
    """List exercises in the catalog."""
    ensure_initialized(ctx)

    filters = {k: v for k, v in {"muscle_group": muscle_group, "difficulty_level": difficulty}.items() if v}
    async with open_services(ctx) as services:
        response = await services.exercise.get_exercises(filters or None)

    catalog = [Exercise.from_dict(item) for item in response.items("exercises")]
    # The backend may ignore filters, so apply them here too
    catalog = filter_exercises(catalog, muscle_group=muscle_group, difficulty_level=difficulty)
    if not catalog:
        echo_info("No exercises found.")
        return

    rows = [
        [
            str(e.exercise_id or "-"),
            e.name,
            e.muscle_group,
            e.equipment_needed or "-",
            e.difficulty_display,
        ]
        for e in catalog
    ]
    click.echo(format_table(["ID", "Name", "Muscle group", "Equipment", "Difficulty"], rows))
    click.echo()
    click.echo(f"Source: {source_label(response.source)}")
