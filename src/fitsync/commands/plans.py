"""Workout and nutrition plan commands."""

from datetime import date

import click

from ..errors import ValidationError
from ..models import NutritionPlan, Session, WorkoutPlan
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
    parse_id_arg,
    source_label,
)


@click.group()
def plans():
    """Manage workout plans."""
    pass


@plans.command("list")
@click.pass_context
@async_command
async def list_plans(ctx: click.Context):
    """List workout plans."""
    ensure_initialized(ctx)
    user_id = get_state(ctx).settings.default_user_id

    async with open_services(ctx) as services:
        response = await services.workout.get_plans(user_id)

    items = response.items("plans")
    if not items:
        echo_info("No workout plans yet.")
        return

    rows = []
    for item in items:
        try:
            plan = WorkoutPlan.from_dict(item)
        except (ValidationError, ValueError):
            echo_warning(f"Skipping unreadable plan {item.get('plan_id')!r}")
            continue
        rows.append(
            [
                format_id(item.get("plan_id")),
                plan.plan_name,
                str(len(plan.sessions)),
                str(plan.get_total_exercises()),
                "yes" if plan.is_ai_generated else "no",
                plan.updated_at.strftime("%Y-%m-%d") if plan.updated_at else "-",
            ]
        )

    click.echo(format_table(["ID", "Name", "Sessions", "Exercises", "AI", "Updated"], rows))
    click.echo()
    click.echo(f"Source: {source_label(response.source)}")


@plans.command("show")
@click.argument("plan_id")
@click.pass_context
@async_command
async def show_plan(ctx: click.Context, plan_id: str):
    """Show a workout plan with its sessions.

    PLAN_ID is a server id, or tmp:<n> for a plan not synced yet.
    """
    ensure_initialized(ctx)
    raw_id = parse_id_arg(plan_id)

    async with open_services(ctx) as services:
        response = await services.workout.get_plan(raw_id)

    data = response.entity("plan", "plan_id")
    if not data:
        echo_error(f"Plan {plan_id} not found.")
        ctx.exit(1)

    if not data.get("sessions") and isinstance(response.data.get("sessions"), list):
        data = {**data, "sessions": response.data["sessions"]}
    plan = WorkoutPlan.from_dict(data)

    click.echo()
    click.echo(click.style(plan.plan_name, bold=True))
    click.echo("=" * 50)
    if plan.description:
        click.echo(plan.description)
        click.echo()

    today = date.today()
    for session in plan.sessions:
        done = " [done today]" if session.is_completed_on(today) else ""
        click.echo(
            click.style(f"{session.day_of_week}: {session.focus_area}", bold=True)
            + f" ({session.duration_minutes} min){done}"
        )
        for exercise in session.exercises:
            if exercise.reps:
                volume = f"{exercise.sets}x{exercise.reps}"
            elif exercise.duration_seconds:
                volume = f"{exercise.sets}x{exercise.duration_seconds}s"
            else:
                volume = f"{exercise.sets} sets"
            line = f"  - {exercise.name}: {volume}, rest {exercise.rest_seconds}s"
            if exercise.notes:
                line += f" ({exercise.notes})"
            click.echo(line)
        click.echo()

    click.echo(f"Source: {source_label(response.source)}")


@plans.command("create")
@click.argument("name")
@click.option("--description", "-d", default="", help="Plan description")
@click.option(
    "--session",
    "-s",
    "sessions",
    multiple=True,
    help="Session as DAY[:FOCUS[:MINUTES]], e.g. Lunes:Pierna:60",
)
@click.pass_context
@async_command
async def create_plan(ctx: click.Context, name: str, description: str, sessions: tuple[str, ...]):
    """Create a workout plan."""
    ensure_initialized(ctx)
    settings = get_state(ctx).settings

    try:
        plan = WorkoutPlan(
            plan_name=name,
            user_id=settings.default_user_id,
            description=description,
            sessions=[_parse_session(text) for text in sessions],
        )
    except ValidationError as e:
        echo_error(str(e))
        ctx.exit(1)

    async with open_services(ctx) as services:
        response = await services.workout.create_plan(plan.to_dict())

    created = response.entity("plan", "plan_id") or {}
    echo_success(f"Created plan '{plan.plan_name}' (ID: {format_id(created.get('plan_id'))})")
    if response.is_fallback:
        echo_warning("Backend unavailable: saved locally, run 'fitsync sync' later.")


def _parse_session(text: str) -> Session:
    parts = text.split(":")
    if not parts[0].strip():
        raise ValidationError(f"Invalid session {text!r}: day is required", field="session")
    session = Session(day_of_week=parts[0].strip())
    if len(parts) > 1 and parts[1].strip():
        session.focus_area = parts[1].strip()
    if len(parts) > 2:
        try:
            session.duration_minutes = int(parts[2])
        except ValueError as e:
            raise ValidationError(f"Invalid session {text!r}: minutes must be a number", field="session") from e
    return session


@click.group()
def nutrition():
    """Browse nutrition plans."""
    pass


@nutrition.command("list")
@click.pass_context
@async_command
async def list_nutrition(ctx: click.Context):
    """List nutrition plans."""
    ensure_initialized(ctx)
    user_id = get_state(ctx).settings.default_user_id

    async with open_services(ctx) as services:
        response = await services.nutrition.get_plans(user_id)

    items = response.items("plans")
    if not items:
        echo_info("No nutrition plans yet.")
        return

    rows = []
    for item in items:
        try:
            plan = NutritionPlan.from_dict(item)
        except (ValidationError, ValueError):
            echo_warning(f"Skipping unreadable plan {item.get('nutrition_plan_id')!r}")
            continue
        rows.append(
            [
                format_id(item.get("nutrition_plan_id")),
                plan.plan_name,
                f"{plan.daily_calories:g}",
                f"{plan.protein_grams:g}/{plan.carbs_grams:g}/{plan.fat_grams:g}",
                str(len(plan.meals)),
            ]
        )

    click.echo(format_table(["ID", "Name", "kcal", "P/C/F (g)", "Meals"], rows))
    click.echo()
    click.echo(f"Source: {source_label(response.source)}")


@nutrition.command("show")
@click.argument("plan_id")
@click.pass_context
@async_command
async def show_nutrition(ctx: click.Context, plan_id: str):
    """Show a nutrition plan with its meals."""
    ensure_initialized(ctx)
    raw_id = parse_id_arg(plan_id)

    async with open_services(ctx) as services:
        response = await services.nutrition.get_plan(raw_id)

    data = response.entity("plan", "nutrition_plan_id")
    if not data:
        echo_error(f"Nutrition plan {plan_id} not found.")
        ctx.exit(1)

    if not data.get("meals") and isinstance(response.data.get("meals"), list):
        data = {**data, "meals": response.data["meals"]}
    plan = NutritionPlan.from_dict(data)

    click.echo()
    click.echo(click.style(plan.plan_name, bold=True))
    click.echo("=" * 50)
    click.echo(
        f"Daily target: {plan.daily_calories:g} kcal "
        f"(P {plan.protein_grams:g}g / C {plan.carbs_grams:g}g / F {plan.fat_grams:g}g)"
    )
    click.echo(f"Planned: {plan.planned_calories():g} kcal")
    click.echo()

    for meal in plan.meals:
        click.echo(click.style(f"{meal.meal_time} {meal.meal_name}", bold=True) + f" ({meal.calories:g} kcal)")
        for food in meal.foods:
            kcal = f" ({food.calories:g} kcal)" if food.calories is not None else ""
            click.echo(f"  - {food.name}: {food.quantity}{kcal}")
        click.echo()

    click.echo(f"Source: {source_label(response.source)}")
