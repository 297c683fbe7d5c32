"""Session commands: start, show, set/weight edits, slot edits, finish, discard."""

import json
from dataclasses import replace
from datetime import datetime, timezone
from typing import Annotated, Optional

import typer

from ...core.history import SessionHistory
from ...core.models import WorkoutSession
from ...core.progress import format_duration, summarize_session
from ...core.session import (
    add_exercise,
    adjust_session_weight,
    delete_exercise,
    elapsed_seconds,
    finish_session,
    reorder,
    start_session,
    swap_exercise,
    toggle_session_set,
    unknown_exercises,
    update_log,
)
from ...core.sets import append_set
from ...io.serializers import ValidationError, session_to_dict
from ...io.session_store import SessionStore
from .. import views
from ..app import DataDirOption, JsonOption, app, get_catalog, get_tuning, require_draft, require_store


def _parse_start(date: str | None) -> tuple[datetime, bool]:
    """
    Resolve --date to a start instant and whether the session is historical.

    A date before today logs a past workout (noon local time, so the day does
    not shift across timezones).
    """
    now = datetime.now(timezone.utc)
    if date is None:
        return now, False
    try:
        day = datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        views.print_error(f"Invalid date: {date}. Expected YYYY-MM-DD")
        raise typer.Exit(1)
    if day.date() >= datetime.now().date():
        return now, False
    return day.replace(hour=12).astimezone(timezone.utc), True


def _save_and_show(store: SessionStore, session: WorkoutSession, json_out: bool = False) -> None:
    store.save_draft(session)
    if json_out:
        print(json.dumps(session_to_dict(session), indent=2))
        return
    elapsed = None if session.is_historical else elapsed_seconds(session, datetime.now(timezone.utc))
    views.print_session(session, get_catalog(), elapsed)


def _history(store: SessionStore) -> SessionHistory:
    try:
        return store.history()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _missing_slot(order: int) -> None:
    views.print_error(f"No exercise at slot {order}. See 'show' for slot numbers.")
    raise typer.Exit(1)


@app.command()
def start(
    template_id: Annotated[str, typer.Argument(help="Routine ID (see 'templates')")],
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Log a past workout on this date (YYYY-MM-DD)"),
    ] = None,
    duration_min: Annotated[
        Optional[int],
        typer.Option("--duration-min", help="Duration of a past workout in minutes"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Discard an unfinished session without asking"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Start a session from a routine, with weights planned from your history.
    """
    store = require_store(data_dir)

    try:
        template = store.get_template(template_id)
        existing = store.load_draft()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if template is None:
        views.print_error(f"Unknown routine: {template_id}")
        raise typer.Exit(1)

    if existing is not None and not force:
        if not views.confirm_action(f"Discard unfinished session '{existing.name}'?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    start_at, historical = _parse_start(date)
    history = _history(store)

    session = start_session(
        template,
        history,
        get_catalog(),
        get_tuning(),
        start_at,
        is_historical=historical,
    )
    if historical and duration_min:
        session = replace(session, duration=max(0, duration_min) * 60)

    for order in unknown_exercises(session, get_catalog()):
        views.print_warning(f"Slot {order} uses an exercise missing from the catalog.")

    _save_and_show(store, session, json_out)


@app.command()
def show(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the active session with its planned weights.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    if json_out:
        print(json.dumps(session_to_dict(session), indent=2))
        return
    elapsed = None if session.is_historical else elapsed_seconds(session, datetime.now(timezone.utc))
    views.print_session(session, get_catalog(), elapsed)


@app.command()
def toggle(
    order: Annotated[int, typer.Argument(help="Exercise slot (# column in 'show')")],
    set_number: Annotated[int, typer.Argument(help="Set number, starting at 1")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Tap a set: done at target → one rep short → … → not done.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    log = session.log_at(order)
    if log is None:
        _missing_slot(order)
    if not 1 <= set_number <= len(log.sets):
        views.print_error(f"Set number must be between 1 and {len(log.sets)}")
        raise typer.Exit(1)
    _save_and_show(store, toggle_session_set(session, order, set_number - 1))


@app.command()
def weight(
    order: Annotated[int, typer.Argument(help="Exercise slot (# column in 'show')")],
    delta: Annotated[float, typer.Argument(help="Change in kg for the current and later sets, e.g. -2.5")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Change the weight of the current set and the sets after it.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    if session.log_at(order) is None:
        _missing_slot(order)
    _save_and_show(store, adjust_session_weight(session, order, delta))


@app.command("add-set")
def add_set(
    order: Annotated[int, typer.Argument(help="Exercise slot (# column in 'show')")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Append one more set to an exercise.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    log = session.log_at(order)
    if log is None:
        _missing_slot(order)
    _save_and_show(store, update_log(session, append_set(log)))


@app.command("reorder")
def reorder_cmd(
    from_order: Annotated[int, typer.Argument(help="Slot to move")],
    to_order: Annotated[int, typer.Argument(help="Slot to swap it with")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Swap two exercises' positions; weights are re-planned for the new order.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    for order in (from_order, to_order):
        if session.log_at(order) is None:
            _missing_slot(order)
    _save_and_show(store, reorder(session, from_order, to_order, get_catalog(), get_tuning()))


@app.command()
def alternatives(
    order: Annotated[int, typer.Argument(help="Exercise slot (# column in 'show')")],
    data_dir: DataDirOption = None,
) -> None:
    """
    List the suggested replacements for an exercise (machine occupied?).
    """
    store = require_store(data_dir)
    session = require_draft(store)
    log = session.log_at(order)
    if log is None:
        _missing_slot(order)
    alts = get_catalog().alternatives_for(log.exercise_id)
    if not alts:
        views.print_info("No predefined alternatives.")
        return
    for ex in alts:
        views.console.print(f"  [cyan]{ex.id}[/cyan]  {ex.name} [dim]({ex.equipment})[/dim]")


@app.command("swap")
def swap_cmd(
    order: Annotated[int, typer.Argument(help="Exercise slot (# column in 'show')")],
    exercise_id: Annotated[str, typer.Argument(help="Replacement exercise ID")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Replace the exercise in a slot; its sets restart at a fresh weight.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    if session.log_at(order) is None:
        _missing_slot(order)
    if exercise_id not in get_catalog():
        views.print_warning(f"{exercise_id} is not in the catalog; it will show as unknown.")
    updated = swap_exercise(session, order, exercise_id, _history(store), get_catalog(), get_tuning())
    _save_and_show(store, updated)


@app.command("add")
def add_cmd(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID to append")],
    sets: Annotated[int, typer.Option("--sets", "-s", help="Number of sets")] = 3,
    reps: Annotated[int, typer.Option("--reps", "-r", help="Target reps per set")] = 12,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an exercise at the end of the active session.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    if exercise_id not in get_catalog():
        views.print_warning(f"{exercise_id} is not in the catalog; it will show as unknown.")
    updated = add_exercise(
        session,
        exercise_id,
        _history(store),
        get_catalog(),
        get_tuning(),
        target_sets=sets,
        target_reps=reps,
    )
    _save_and_show(store, updated)


@app.command("delete")
def delete_cmd(
    order: Annotated[int, typer.Argument(help="Exercise slot (# column in 'show')")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove an exercise from the active session.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    if session.log_at(order) is None:
        _missing_slot(order)
    _save_and_show(store, delete_exercise(session, order, get_catalog(), get_tuning()))


@app.command()
def finish(
    data_dir: DataDirOption = None,
) -> None:
    """
    Finish the active session and save it to history.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    elapsed = None if session.is_historical else elapsed_seconds(session, datetime.now(timezone.utc))
    done = finish_session(session, elapsed)
    try:
        store.save_session(done)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    store.clear_draft()
    summary = summarize_session(done)
    views.print_success(
        f"Saved '{done.name}': {summary.completed_sets} sets, "
        f"{summary.total_volume:.0f} kg volume, {format_duration(done.duration)}"
    )
    for ex_id in summary.overload_ready:
        ex = get_catalog().exercise_of(ex_id)
        views.print_info(f"↑ {ex.name if ex else ex_id}: next session adds an increment")


@app.command()
def discard(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Throw away the active session without saving it.
    """
    store = require_store(data_dir)
    session = require_draft(store)
    if not force and not views.confirm_action(f"Discard '{session.name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    store.clear_draft()
    views.print_success(f"Discarded '{session.name}'.")
