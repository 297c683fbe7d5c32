"""Shared Typer app object, shared option types, and store/engine utilities."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.catalog import Catalog, load_catalog
from ..core.equipment import TuningTable, load_tuning
from ..core.models import WorkoutSession
from ..io.serializers import ValidationError
from ..io.session_store import SessionStore, get_default_data_dir
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-D", help="Directory holding sessions/templates JSON (default: ~/.flexlogic)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="flexlogic",
    help="Workout tracker with fatigue-aware weight planning.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine debug messages"),
    ] = False,
) -> None:
    """
    Plan, log and review workouts from reusable routines.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def get_store(data_dir: Path | None) -> SessionStore:
    """Get session store from path or default location."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return SessionStore(data_dir)


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Bundled exercise catalog merged with the user override file."""
    return load_catalog()


@lru_cache(maxsize=1)
def get_tuning() -> TuningTable:
    """Bundled equipment tuning merged with the user override file."""
    return load_tuning()


def require_store(data_dir: Path | None) -> SessionStore:
    """Return an initialised store or exit with a hint to run 'init'."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Sessions file not found: {store.sessions_path}")
        views.print_info("Run 'init' first to create the data directory.")
        raise typer.Exit(1)
    return store


def require_draft(store: SessionStore) -> WorkoutSession:
    """Return the active session or exit with a hint to run 'start'."""
    try:
        draft = store.load_draft()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if draft is None:
        views.print_error("No active session.")
        views.print_info("Start one with 'start TEMPLATE_ID'.")
        raise typer.Exit(1)
    return draft
