"""
Export of finished sessions as JSON or CSV.

JSON uses the same record shape as sessions.json.  CSV has one row per set,
which is the format spreadsheet users asked for.
"""

import csv
import io
import json

from ..core.catalog import Catalog
from ..core.models import WorkoutSession
from .serializers import session_sort_key, session_to_dict

CSV_COLUMNS: list[str] = [
    "session_id",
    "session_name",
    "date",
    "duration_s",
    "order",
    "exercise_id",
    "exercise_name",
    "muscle_group",
    "set",
    "weight_kg",
    "reps",
    "target_reps",
    "completed",
]


def export_json(sessions: list[WorkoutSession]) -> str:
    """Serialize sessions (oldest first) to a pretty-printed JSON array."""
    ordered = sorted(sessions, key=session_sort_key)
    return json.dumps([session_to_dict(s) for s in ordered], indent=2)


def export_csv(sessions: list[WorkoutSession], catalog: Catalog | None = None) -> str:
    """
    Serialize sessions to CSV, one row per set.

    Exercise name and muscle group are filled from *catalog* when given;
    unknown exercises get empty cells.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)

    for session in sorted(sessions, key=session_sort_key):
        for log in session.exercises:
            ex = catalog.exercise_of(log.exercise_id) if catalog is not None else None
            for set_no, s in enumerate(log.sets, 1):
                writer.writerow(
                    [
                        session.id,
                        session.name,
                        session.date,
                        session.duration,
                        log.order,
                        log.exercise_id,
                        ex.name if ex else "",
                        ex.muscle_group if ex else "",
                        set_no,
                        f"{s.weight:g}",
                        s.reps_completed,
                        log.target_reps,
                        "yes" if s.completed else "no",
                    ]
                )

    return buf.getvalue()
