"""
JSON-based storage for sessions, templates, schedule and the active draft.

Handles reading, writing, and managing the files of one data directory.
"""

import json
from pathlib import Path
from typing import Any, Callable

from ..core.catalog import load_default_templates
from ..core.history import SessionHistory
from ..core.models import ScheduledSession, SessionTemplate, WorkoutSession
from .serializers import (
    ValidationError,
    dict_to_scheduled,
    dict_to_session,
    dict_to_template,
    scheduled_to_dict,
    session_sort_key,
    session_to_dict,
    template_to_dict,
    validate_date,
)


class SessionStore:
    """
    Manages workout data stored as JSON files in one directory.

    Files:
    - sessions.json:  list of finished (and historical) sessions
    - templates.json: user routines; absent until the first save, in which
                      case the bundled default templates are returned
    - schedule.json:  list of {date, templateId}, at most one per date
    - draft.json:     the in-progress session, for recovery after a restart
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the JSON files
        """
        self.data_dir = Path(data_dir)
        self.sessions_path = self.data_dir / "sessions.json"
        self.templates_path = self.data_dir / "templates.json"
        self.schedule_path = self.data_dir / "schedule.json"
        self.draft_path = self.data_dir / "draft.json"

    def exists(self) -> bool:
        """Check if the sessions file exists."""
        return self.sessions_path.exists()

    def init(self) -> None:
        """
        Create the data directory and an empty sessions file if missing.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.sessions_path.exists():
            self._write_json(self.sessions_path, [])

    # ------------------------------------------------------------------
    # Raw file helpers
    # ------------------------------------------------------------------

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def _read_list(self, path: Path) -> list:
        data = self._read_json(path, [])
        if not isinstance(data, list):
            raise ValidationError(f"Error parsing {path}: expected a list")
        return data

    def _read_records(self, path: Path, convert: Callable[[dict], Any], what: str) -> list:
        records = []
        for idx, raw in enumerate(self._read_list(path), 1):
            try:
                records.append(convert(raw))
            except ValidationError as e:
                raise ValidationError(f"Error parsing {what} {idx} in {path}: {e}") from e
        return records

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def load_sessions(self) -> list[WorkoutSession]:
        """
        Load all stored sessions.

        Returns:
            List of WorkoutSession, sorted by date

        Raises:
            FileNotFoundError: If the store was never initialised
            ValidationError: If a record is invalid
        """
        if not self.sessions_path.exists():
            raise FileNotFoundError(
                f"Sessions file not found: {self.sessions_path}. Run 'init' first."
            )

        sessions = self._read_records(self.sessions_path, dict_to_session, "session")
        sessions.sort(key=session_sort_key)
        return sessions

    def save_session(self, session: WorkoutSession) -> None:
        """
        Insert or replace a session (matched by id).

        Args:
            session: Session to store
        """
        sessions = self.load_sessions()
        for i, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[i] = session
                break
        else:
            sessions.append(session)
        self._write_sessions(sessions)

    def delete_session(self, session_id: str) -> None:
        """
        Delete a session by id.

        Raises:
            KeyError: If no session has that id
        """
        sessions = self.load_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            raise KeyError(f"Session not found: {session_id}")
        self._write_sessions(remaining)

    def _write_sessions(self, sessions: list[WorkoutSession]) -> None:
        ordered = sorted(sessions, key=session_sort_key)
        self._write_json(self.sessions_path, [session_to_dict(s) for s in ordered])

    def history(self) -> SessionHistory:
        """History Adapter over the stored sessions (empty if not initialised)."""
        try:
            return SessionHistory(self.load_sessions())
        except FileNotFoundError:
            return SessionHistory()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def load_templates(self) -> list[SessionTemplate]:
        """
        Load user routines, or the bundled defaults when none were saved.

        Raises:
            ValidationError: If a stored template is invalid
        """
        if not self.templates_path.exists():
            return load_default_templates()
        return self._read_records(self.templates_path, dict_to_template, "template")

    def get_template(self, template_id: str) -> SessionTemplate | None:
        """Return the template with the given id, or None."""
        for tpl in self.load_templates():
            if tpl.id == template_id:
                return tpl
        return None

    def save_template(self, template: SessionTemplate) -> None:
        """Insert or replace a template (matched by id)."""
        templates = self.load_templates()
        for i, existing in enumerate(templates):
            if existing.id == template.id:
                templates[i] = template
                break
        else:
            templates.append(template)
        self._write_json(self.templates_path, [template_to_dict(t) for t in templates])

    def delete_template(self, template_id: str) -> None:
        """
        Delete a template by id.

        Raises:
            KeyError: If no template has that id
        """
        templates = self.load_templates()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            raise KeyError(f"Template not found: {template_id}")
        self._write_json(self.templates_path, [template_to_dict(t) for t in remaining])

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def load_schedule(self) -> list[ScheduledSession]:
        """Load the schedule, sorted by date."""
        schedule = self._read_records(self.schedule_path, dict_to_scheduled, "entry")
        schedule.sort(key=lambda s: s.date)
        return schedule

    def schedule_template(self, date: str, template_id: str) -> None:
        """
        Plan a template for a date, replacing whatever was planned there.

        Args:
            date: ISO date string (YYYY-MM-DD)
            template_id: Template to plan
        """
        validate_date(date)
        schedule = [s for s in self.load_schedule() if s.date != date]
        schedule.append(ScheduledSession(date=date, template_id=template_id))
        schedule.sort(key=lambda s: s.date)
        self._write_json(self.schedule_path, [scheduled_to_dict(s) for s in schedule])

    def unschedule(self, date: str) -> None:
        """Remove the plan for a date (no-op if nothing was planned)."""
        schedule = [s for s in self.load_schedule() if s.date != date]
        self._write_json(self.schedule_path, [scheduled_to_dict(s) for s in schedule])

    def scheduled_for(self, date: str) -> ScheduledSession | None:
        """Return the plan for a date, or None."""
        for entry in self.load_schedule():
            if entry.date == date:
                return entry
        return None

    # ------------------------------------------------------------------
    # Active session draft
    # ------------------------------------------------------------------

    def load_draft(self) -> WorkoutSession | None:
        """
        Load the in-progress session, if any.

        Raises:
            ValidationError: If the draft file is corrupt
        """
        data = self._read_json(self.draft_path, None)
        if data is None:
            return None
        try:
            return dict_to_session(data)
        except ValidationError as e:
            raise ValidationError(f"Error parsing {self.draft_path}: {e}") from e

    def save_draft(self, session: WorkoutSession) -> None:
        """Persist the in-progress session."""
        self._write_json(self.draft_path, session_to_dict(session))

    def clear_draft(self) -> None:
        """Forget the in-progress session."""
        if self.draft_path.exists():
            self.draft_path.unlink()


def get_default_data_dir() -> Path:
    """
    Get the default data directory.

    Returns:
        ~/.flexlogic
    """
    return Path.home() / ".flexlogic"

