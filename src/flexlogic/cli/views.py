"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of sessions, templates and progress.
"""

from datetime import date

from rich.console import Console
from rich.table import Table

from ..core.catalog import Catalog
from ..core.history import parse_instant
from ..core.models import (
    ExerciseSessionLog,
    ProgressPoint,
    ScheduledSession,
    SessionTemplate,
    SetLog,
    WorkoutSession,
)
from ..core.progress import format_duration, summarize_session
from ..core.progression import is_overload_ready
from ..core.sets import active_set_index, set_state

console = Console()


def _fmt_weight(weight: float) -> str:
    return f"{weight:g}"


def _fmt_set(set_log: SetLog, target_reps: int, active: bool) -> str:
    """One set cell: weight × reps with a state marker."""
    state = set_state(set_log, target_reps)
    if state == "full":
        return f"[green]{_fmt_weight(set_log.weight)}×{set_log.reps_completed} ✓[/green]"
    if state == "partial":
        return f"[yellow]{_fmt_weight(set_log.weight)}×{set_log.reps_completed}[/yellow]"
    cell = f"{_fmt_weight(set_log.weight)}×{target_reps}"
    return f"[bold]{cell} ◂[/bold]" if active else f"[dim]{cell}[/dim]"


def _fmt_sets(log: ExerciseSessionLog) -> str:
    active = active_set_index(log)
    if active is not None and log.sets[active].completed:
        active = None  # all done
    return "  ".join(_fmt_set(s, log.target_reps, i == active) for i, s in enumerate(log.sets))


def _exercise_cells(log: ExerciseSessionLog, catalog: Catalog) -> tuple[str, str]:
    ex = catalog.exercise_of(log.exercise_id)
    if ex is None:
        return f"[red]Unknown exercise ({log.exercise_id})[/red]", "-"
    return ex.name, f"{ex.muscle_group} · {ex.equipment}"


def format_session_table(session: WorkoutSession, catalog: Catalog) -> Table:
    """
    Create a Rich table for one session, one row per slot.

    Args:
        session: Session to display
        catalog: Exercise lookup for names and muscle groups

    Returns:
        Rich Table object
    """
    title = f"{session.name} — {parse_instant(session.date):%Y-%m-%d %H:%M}"
    if session.is_historical:
        title += " (logged)"
    table = Table(title=title)

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Group", style="magenta")
    table.add_column("Scheme", justify="right")
    table.add_column("Base(kg)", justify="right")
    table.add_column("Sets (kg×reps)")
    table.add_column("", justify="center")

    for log in sorted(session.exercises, key=lambda e: e.order):
        name, group = _exercise_cells(log, catalog)
        table.add_row(
            str(log.order),
            name,
            group,
            f"{log.target_sets}×{log.target_reps}",
            _fmt_weight(log.base_weight),
            _fmt_sets(log),
            "[bold green]↑[/bold green]" if is_overload_ready(log) else "",
        )

    return table


def print_session(session: WorkoutSession, catalog: Catalog, elapsed: int | None = None) -> None:
    """Print the active session with its planned weights."""
    console.print(format_session_table(session, catalog))
    if elapsed is not None:
        console.print(f"[dim]Elapsed: {format_duration(elapsed)}[/dim]")
    console.print("[dim]↑ = all targets met, next session adds an increment[/dim]")


def format_history_table(sessions: list[WorkoutSession]) -> Table:
    """Create a Rich table of finished sessions, oldest first."""
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Duration", justify="right")
    table.add_column("Exercises", justify="right")
    table.add_column("Sets done", justify="right")
    table.add_column("Volume(kg)", justify="right", style="bold")

    for i, session in enumerate(sessions, 1):
        summary = summarize_session(session)
        table.add_row(
            str(i),
            f"{parse_instant(session.date):%Y-%m-%d}",
            session.name + (" [dim](logged)[/dim]" if session.is_historical else ""),
            format_duration(session.duration) if session.duration else "~",
            str(summary.exercise_count),
            str(summary.completed_sets),
            f"{summary.total_volume:.0f}",
        )

    return table


def print_history(sessions: list[WorkoutSession]) -> None:
    """
    Print session history to console.

    Args:
        sessions: Sessions to display
    """
    if not sessions:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return
    console.print(format_history_table(sessions))


def print_templates(templates: list[SessionTemplate], catalog: Catalog) -> None:
    """Print the available routines."""
    if not templates:
        console.print("[yellow]No routines created yet.[/yellow]")
        return

    table = Table(title="Routines")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Scheme", justify="right")
    table.add_column("Exercises")

    for tpl in templates:
        names = []
        for ex_id in tpl.exercise_ids:
            ex = catalog.exercise_of(ex_id)
            names.append(ex.name if ex else f"[red]{ex_id}?[/red]")
        table.add_row(tpl.id, tpl.name, f"{tpl.default_sets}×{tpl.default_reps}", "\n".join(names))

    console.print(table)


def print_progress(points: list[ProgressPoint], exercise_name: str) -> None:
    """Print the weight trend of one exercise."""
    if not points:
        console.print(f"[yellow]No completed sets for {exercise_name} yet.[/yellow]")
        return

    table = Table(title=f"{exercise_name}: weight trend")
    table.add_column("Date", style="cyan")
    table.add_column("Max(kg)", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("Sets", justify="right")
    table.add_column("Δ", justify="right")

    previous: float | None = None
    for p in points:
        if previous is None:
            delta = ""
        else:
            diff = p.weight - previous
            delta = f"[green]+{diff:g}[/green]" if diff > 0 else (f"[red]{diff:g}[/red]" if diff < 0 else "=")
        table.add_row(f"{parse_instant(p.date):%Y-%m-%d}", _fmt_weight(p.weight), str(p.reps), str(p.sets), delta)
        previous = p.weight

    console.print(table)


def print_activity(days: list[tuple[date, bool]]) -> None:
    """Print the recent-activity strip (one cell per day)."""
    cells = []
    for day, trained in days:
        label = f"{day:%a}"[0] + f" {day.day}"
        cells.append(f"[bold green]{label}•[/bold green]" if trained else f"[dim]{label}[/dim]")
    console.print("This week: " + "  ".join(cells))


def print_schedule(
    days: list[date],
    schedule: list[ScheduledSession],
    templates: list[SessionTemplate],
) -> None:
    """Print the upcoming days with their planned routine."""
    by_date = {s.date: s.template_id for s in schedule}
    names = {t.id: t.name for t in templates}

    table = Table(title="Schedule")
    table.add_column("Date", style="cyan")
    table.add_column("Day")
    table.add_column("Routine", style="bold")

    for day in days:
        key = day.isoformat()
        tpl_id = by_date.get(key)
        if tpl_id is None:
            routine = "[dim]rest[/dim]"
        else:
            routine = names.get(tpl_id, f"[red]{tpl_id}?[/red]")
        table.add_row(key, f"{day:%A}", routine)

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
