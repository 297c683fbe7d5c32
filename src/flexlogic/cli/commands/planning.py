"""Planning commands: routines (templates) and the training schedule."""

import json
from datetime import datetime, timedelta
from typing import Annotated, List, Optional

import typer

from ...core.config import SCHEDULE_HORIZON_DAYS, TEMPLATE_DEFAULT_REPS, TEMPLATE_DEFAULT_SETS
from ...core.models import SessionTemplate
from ...io.serializers import ValidationError, scheduled_to_dict, template_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_catalog, require_store


@app.command()
def templates(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the routines a session can be started from.
    """
    store = require_store(data_dir)
    try:
        routines = store.load_templates()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([template_to_dict(t) for t in routines], indent=2))
        return
    views.print_templates(routines, get_catalog())


@app.command("template-save")
def template_save(
    template_id: Annotated[str, typer.Argument(help="Routine ID, e.g. tpl-arms")],
    name: Annotated[str, typer.Argument(help="Display name")],
    exercise_ids: Annotated[List[str], typer.Argument(help="Exercise IDs in training order")],
    sets: Annotated[int, typer.Option("--sets", "-s", help="Sets per exercise")] = TEMPLATE_DEFAULT_SETS,
    reps: Annotated[int, typer.Option("--reps", "-r", help="Target reps per set")] = TEMPLATE_DEFAULT_REPS,
    data_dir: DataDirOption = None,
) -> None:
    """
    Create a routine, or replace the one with the same ID.
    """
    store = require_store(data_dir)
    catalog = get_catalog()
    unknown = [ex_id for ex_id in exercise_ids if ex_id not in catalog]
    if unknown:
        views.print_warning(f"Not in the catalog: {', '.join(unknown)}")

    template = SessionTemplate(
        id=template_id,
        name=name,
        exercise_ids=tuple(exercise_ids),
        default_sets=max(1, sets),
        default_reps=max(1, reps),
    )
    try:
        store.save_template(template)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Saved routine {template_id} ({len(exercise_ids)} exercises).")


@app.command("template-delete")
def template_delete(
    template_id: Annotated[str, typer.Argument(help="Routine ID")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a routine.
    """
    store = require_store(data_dir)
    if not force and not views.confirm_action(f"Delete routine {template_id}?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    try:
        store.delete_template(template_id)
    except KeyError:
        views.print_error(f"Unknown routine: {template_id}")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Deleted routine {template_id}.")


@app.command()
def schedule(
    date: Annotated[
        Optional[str],
        typer.Argument(help="Day to plan (YYYY-MM-DD)"),
    ] = None,
    template_id: Annotated[
        Optional[str],
        typer.Argument(help="Routine to plan on that day"),
    ] = None,
    remove: Annotated[
        bool,
        typer.Option("--remove", help="Clear the plan for DATE"),
    ] = False,
    days: Annotated[
        int,
        typer.Option("--days", help="Number of days to show"),
    ] = SCHEDULE_HORIZON_DAYS,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the upcoming schedule, or plan a routine on a date.

    Examples:
        flexlogic schedule                        # next two weeks
        flexlogic schedule 2026-03-02 tpl-push    # plan push day
        flexlogic schedule 2026-03-02 --remove    # back to rest day
    """
    store = require_store(data_dir)

    try:
        if date is not None:
            if remove:
                store.unschedule(date)
                if not json_out:
                    views.print_success(f"Cleared {date}.")
            elif template_id is None:
                views.print_error("Give a routine ID to plan, or --remove to clear the day.")
                raise typer.Exit(1)
            else:
                if store.get_template(template_id) is None:
                    views.print_error(f"Unknown routine: {template_id}")
                    raise typer.Exit(1)
                store.schedule_template(date, template_id)
                if not json_out:
                    views.print_success(f"Planned {template_id} on {date}.")

        planned = store.load_schedule()
        routines = store.load_templates()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([scheduled_to_dict(s) for s in planned], indent=2))
        return

    today = datetime.now().date()
    horizon = [today + timedelta(days=i) for i in range(max(1, days))]
    views.print_schedule(horizon, planned, routines)
