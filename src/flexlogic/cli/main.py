"""
CLI entry point using Typer.

Provides commands for tracking workouts:
- init: Create the data directory
- templates / template-save / template-delete: Manage routines
- start, show, toggle, weight, add-set, reorder, swap, alternatives, add,
  delete, finish, discard: Run a session
- history, progress, export, delete-session: Review finished sessions
- schedule: Plan routines on dates
"""

from typing import Annotated

import typer

from . import views
from .app import DataDirOption, app, get_store
from .commands import analysis, planning, sessions  # noqa: F401  (registers commands)


@app.command()
def init(
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset an existing sessions file without prompting"),
    ] = False,
) -> None:
    """
    Create the data directory with an empty session history.

    Existing history is kept unless --force is given.
    """
    store = get_store(data_dir)

    if store.exists():
        if not force:
            views.print_info(f"Data directory already initialised: {store.data_dir}")
            return
        backup = store.sessions_path.with_suffix(".json.bak")
        store.sessions_path.replace(backup)
        views.print_warning(f"Moved existing history to {backup}")

    store.init()
    views.print_success(f"Initialised {store.data_dir}")
    views.print_info("List routines with 'templates', then 'start TEMPLATE_ID'.")


if __name__ == "__main__":
    app()
