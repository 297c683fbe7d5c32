"""
JSON serialization for workout data models.

Handles conversion between dataclasses and JSON-compatible dicts.  The JSON
shape keeps the camelCase record names (repsCompleted, targetSets,
baseWeight, isHistorical, ...) so stored sessions stay readable by other
clients of the same data.

Numbers are clamped rather than rejected (a negative weight loads as 0);
structural problems (missing ids, bad dates) raise ValidationError.
"""

import re
from datetime import datetime
from typing import Any

from ..core.history import parse_instant
from ..core.models import (
    ExerciseSessionLog,
    ScheduledSession,
    SessionTemplate,
    SetLog,
    WorkoutSession,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate a calendar date string (YYYY-MM-DD).

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_instant(value: str) -> str:
    """
    Validate an ISO-8601 instant such as 2026-02-18T17:30:00.000Z.

    Raises:
        ValidationError: If the value does not parse
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r}")
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}. Expected ISO-8601") from e
    return value


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _list_field(data: dict[str, Any], key: str, what: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValidationError(f"{what} field {key} must be a list, got {type(value).__name__}")
    return value


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    if key not in data or data[key] in (None, ""):
        raise ValidationError(f"{what} missing field: {key}")
    return data[key]


def _non_negative_float(value: Any) -> float:
    try:
        return max(0.0, float(value or 0))
    except (TypeError, ValueError):
        return 0.0


def _non_negative_int(value: Any, minimum: int = 0) -> int:
    try:
        return max(minimum, int(value or 0))
    except (TypeError, ValueError):
        return minimum


# =============================================================================
# SETS AND EXERCISE LOGS
# =============================================================================


def set_log_to_dict(set_log: SetLog) -> dict[str, Any]:
    """Convert SetLog to JSON-compatible dict."""
    return {
        "repsCompleted": set_log.reps_completed,
        "weight": set_log.weight,
        "completed": set_log.completed,
    }


def dict_to_set_log(data: dict[str, Any]) -> SetLog:
    """Convert dict to SetLog, clamping negative numbers to 0."""
    data = _require_mapping(data, "Set")
    return SetLog(
        reps_completed=_non_negative_int(data.get("repsCompleted")),
        weight=_non_negative_float(data.get("weight")),
        completed=bool(data.get("completed", False)),
    )


def exercise_log_to_dict(log: ExerciseSessionLog) -> dict[str, Any]:
    """Convert ExerciseSessionLog to JSON-compatible dict."""
    return {
        "exerciseId": log.exercise_id,
        "order": log.order,
        "targetSets": log.target_sets,
        "targetReps": log.target_reps,
        "baseWeight": log.base_weight,
        "sets": [set_log_to_dict(s) for s in log.sets],
    }


def dict_to_exercise_log(data: dict[str, Any]) -> ExerciseSessionLog:
    """
    Convert dict to ExerciseSessionLog.

    Raises:
        ValidationError: If exerciseId or order is missing
    """
    data = _require_mapping(data, "Exercise log")
    exercise_id = str(_require(data, "exerciseId", "Exercise log"))
    order = _require(data, "order", "Exercise log")
    try:
        order = int(order)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid order for {exercise_id}: {order!r}") from e

    sets = tuple(dict_to_set_log(s) for s in _list_field(data, "sets", "Exercise log"))
    return ExerciseSessionLog(
        exercise_id=exercise_id,
        order=order,
        target_sets=_non_negative_int(data.get("targetSets", len(sets)), minimum=1),
        target_reps=_non_negative_int(data.get("targetReps"), minimum=1),
        base_weight=_non_negative_float(data.get("baseWeight")),
        sets=sets,
    )


# =============================================================================
# SESSIONS
# =============================================================================


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """
    Convert WorkoutSession to JSON-compatible dict.

    isHistorical and templateId are only written when set.
    """
    result: dict[str, Any] = {
        "id": session.id,
        "name": session.name,
        "date": session.date,
        "completed": session.completed,
        "duration": session.duration,
        "exercises": [exercise_log_to_dict(e) for e in session.exercises],
    }
    if session.is_historical:
        result["isHistorical"] = True
    if session.template_id is not None:
        result["templateId"] = session.template_id
    return result


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: On missing id/date, a malformed date, or duplicate
            exercise orders
    """
    data = _require_mapping(data, "Session")

    session_id = str(_require(data, "id", "Session"))
    date = validate_instant(_require(data, "date", "Session"))
    exercises = tuple(dict_to_exercise_log(e) for e in _list_field(data, "exercises", "Session"))

    orders = [e.order for e in exercises]
    if len(orders) != len(set(orders)):
        raise ValidationError(f"Session {session_id} has duplicate exercise orders: {orders}")

    return WorkoutSession(
        id=session_id,
        name=str(data.get("name", "")),
        date=date,
        completed=bool(data.get("completed", False)),
        duration=_non_negative_int(data.get("duration")),
        exercises=tuple(sorted(exercises, key=lambda e: e.order)),
        is_historical=bool(data.get("isHistorical", False)),
        template_id=data.get("templateId"),
    )


# =============================================================================
# TEMPLATES AND SCHEDULE
# =============================================================================


def template_to_dict(template: SessionTemplate) -> dict[str, Any]:
    """Convert SessionTemplate to JSON-compatible dict."""
    return {
        "id": template.id,
        "name": template.name,
        "exerciseIds": list(template.exercise_ids),
        "defaultSets": template.default_sets,
        "defaultReps": template.default_reps,
    }


def dict_to_template(data: dict[str, Any]) -> SessionTemplate:
    """
    Convert dict to SessionTemplate.

    Raises:
        ValidationError: If id or name is missing
    """
    data = _require_mapping(data, "Template")
    return SessionTemplate(
        id=str(_require(data, "id", "Template")),
        name=str(_require(data, "name", "Template")),
        exercise_ids=tuple(str(e) for e in _list_field(data, "exerciseIds", "Template")),
        default_sets=_non_negative_int(data.get("defaultSets", 4), minimum=1),
        default_reps=_non_negative_int(data.get("defaultReps", 12), minimum=1),
    )


def scheduled_to_dict(scheduled: ScheduledSession) -> dict[str, Any]:
    """Convert ScheduledSession to JSON-compatible dict."""
    return {"date": scheduled.date, "templateId": scheduled.template_id}


def dict_to_scheduled(data: dict[str, Any]) -> ScheduledSession:
    """
    Convert dict to ScheduledSession.

    Raises:
        ValidationError: On a missing template id or malformed date
    """
    data = _require_mapping(data, "Scheduled session")
    return ScheduledSession(
        date=validate_date(_require(data, "date", "Scheduled session")),
        template_id=str(_require(data, "templateId", "Scheduled session")),
    )


def session_sort_key(session: WorkoutSession) -> datetime:
    """Chronological sort key for sessions."""
    return parse_instant(session.date)
