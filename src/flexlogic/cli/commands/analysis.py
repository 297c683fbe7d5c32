"""Analysis commands: history, progress, export, delete-session."""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.progress import exercise_progress, recent_activity, summarize_session, trained_exercise_ids
from ...io.export import export_csv, export_json
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, JsonOption, app, get_catalog, require_store


def _load_sessions(store):
    try:
        return store.load_sessions()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the last N sessions"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show finished sessions with sets done and lifted volume.
    """
    store = require_store(data_dir)
    sessions = _load_sessions(store)
    if limit is not None and limit > 0:
        sessions = sessions[-limit:]

    if json_out:
        print(json.dumps([asdict(summarize_session(s)) for s in sessions], indent=2))
        return

    views.print_activity(recent_activity(sessions, datetime.now().date()))
    views.print_history(sessions)


@app.command()
def progress(
    exercise_id: Annotated[
        Optional[str],
        typer.Argument(help="Exercise ID; omit to list trained exercises"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the weight trend of one exercise across finished sessions.
    """
    store = require_store(data_dir)
    sessions = _load_sessions(store)
    catalog = get_catalog()

    if exercise_id is None:
        trained = trained_exercise_ids(sessions)
        if json_out:
            print(json.dumps(trained, indent=2))
            return
        if not trained:
            views.print_info("No finished sessions yet.")
            return
        views.console.print("[bold]Trained exercises[/bold] (newest first):")
        for ex_id in trained:
            ex = catalog.exercise_of(ex_id)
            views.console.print(f"  [cyan]{ex_id}[/cyan]  {ex.name if ex else '[red]unknown exercise[/red]'}")
        return

    points = exercise_progress(sessions, exercise_id)
    if json_out:
        print(json.dumps([asdict(p) for p in points], indent=2))
        return

    ex = catalog.exercise_of(exercise_id)
    views.print_progress(points, ex.name if ex else exercise_id)


@app.command()
def export(
    fmt: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: json or csv"),
    ] = "csv",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Export finished sessions as JSON or CSV (one row per set).
    """
    fmt = fmt.lower()
    if fmt not in ("json", "csv"):
        views.print_error(f"Unknown format: {fmt}. Use json or csv")
        raise typer.Exit(1)

    store = require_store(data_dir)
    sessions = _load_sessions(store)
    text = export_json(sessions) if fmt == "json" else export_csv(sessions, get_catalog())

    if output is None:
        print(text, end="" if text.endswith("\n") else "\n")
        return

    output.write_text(text, encoding="utf-8")
    views.print_success(f"Exported {len(sessions)} sessions to {output}")


@app.command("delete-session")
def delete_session(
    session_id: Annotated[str, typer.Argument(help="Session ID (see 'history --json')")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a finished session from history.
    """
    store = require_store(data_dir)
    if not force and not views.confirm_action(f"Delete session {session_id}?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    try:
        store.delete_session(session_id)
    except KeyError:
        views.print_error(f"Session not found: {session_id}")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Deleted session {session_id}.")
