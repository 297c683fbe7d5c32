"""
Session mutation operations.

Every operation takes the current WorkoutSession and returns a new one; the
input is never modified.  Structural edits (start, reorder, swap, add,
delete) end with a full fatigue pass so every pending set matches its slot's
position.  update_log() replaces a single slot and, unless asked to, leaves
the other slots' weights alone.

A slot is addressed by its order value.  Referencing an order that does not
exist is a no-op: the session comes back unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from .catalog import Catalog
from .config import DEFAULT_REPS, DEFAULT_SETS, UNKNOWN_EQUIPMENT
from .equipment import TuningTable
from .fatigue import apply_fatigue
from .history import ExerciseHistory, parse_instant
from .models import ExerciseSessionLog, SessionTemplate, SetLog, WorkoutSession
from .progression import resolve_base_weight
from .sets import adjust_weight, toggle_set

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================


def _equipment_of(exercise_id: str, catalog: Catalog) -> str:
    ex = catalog.exercise_of(exercise_id)
    return ex.equipment if ex is not None else UNKNOWN_EQUIPMENT


def _pending_sets(count: int, weight: float) -> tuple[SetLog, ...]:
    return tuple(SetLog(reps_completed=0, weight=weight, completed=False) for _ in range(max(1, count)))


def _new_log(
    exercise_id: str,
    order: int,
    target_sets: int,
    target_reps: int,
    history: ExerciseHistory,
    catalog: Catalog,
    tuning: TuningTable,
) -> ExerciseSessionLog:
    """Fresh slot: base weight from history, all sets pending at that weight."""
    base = resolve_base_weight(exercise_id, _equipment_of(exercise_id, catalog), history, tuning)
    return ExerciseSessionLog(
        exercise_id=exercise_id,
        order=order,
        target_sets=max(1, target_sets),
        target_reps=max(1, target_reps),
        base_weight=base,
        sets=_pending_sets(target_sets, base),
    )


def _with_exercises(
    session: WorkoutSession,
    logs: list[ExerciseSessionLog],
    catalog: Catalog,
    tuning: TuningTable,
) -> WorkoutSession:
    return replace(session, exercises=tuple(apply_fatigue(logs, catalog, tuning)))


def _session_id(created: datetime) -> str:
    return f"ses-{int(created.timestamp() * 1000)}"


def to_iso_instant(moment: datetime) -> str:
    """Format a datetime as a UTC ISO-8601 instant with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


# =============================================================================
# OPERATIONS
# =============================================================================


def start_session(
    template: SessionTemplate,
    history: ExerciseHistory,
    catalog: Catalog,
    tuning: TuningTable,
    start_date: datetime,
    *,
    session_id: str | None = None,
    is_historical: bool = False,
    created_at: datetime | None = None,
) -> WorkoutSession:
    """
    Seed a new session from a template.

    Each template exercise gets a slot in template order with
    template.default_sets pending sets at its resolved base weight, then the
    whole list goes through the fatigue pass.

    Args:
        template: Routine to start
        history: History Adapter for base weights
        catalog: Exercise lookup
        tuning: Equipment tuning
        start_date: Session start (or the past day being logged)
        session_id: Explicit id; defaults to ses-<epoch millis of created_at>
        is_historical: True when logging a past workout
        created_at: Creation time for the default id (now if None);
            independent of start_date

    Returns:
        New, incomplete WorkoutSession
    """
    logs = [
        _new_log(ex_id, idx, template.default_sets, template.default_reps, history, catalog, tuning)
        for idx, ex_id in enumerate(template.exercise_ids)
    ]
    session = WorkoutSession(
        id=session_id or _session_id(created_at or datetime.now(timezone.utc)),
        name=template.name,
        date=to_iso_instant(start_date),
        completed=False,
        duration=0,
        exercises=(),
        is_historical=is_historical,
        template_id=template.id,
    )
    return _with_exercises(session, logs, catalog, tuning)


def reorder(
    session: WorkoutSession,
    from_order: int,
    to_order: int,
    catalog: Catalog,
    tuning: TuningTable,
) -> WorkoutSession:
    """
    Swap two slots' positions and re-plan weights for the new sequence.

    No-op when either order is missing or both are the same slot.
    """
    if from_order == to_order:
        return session
    if session.log_at(from_order) is None or session.log_at(to_order) is None:
        logger.debug("reorder: slot %d or %d not in session %s", from_order, to_order, session.id)
        return session

    swapped = {from_order: to_order, to_order: from_order}
    logs = [
        replace(log, order=swapped[log.order]) if log.order in swapped else log
        for log in session.exercises
    ]
    return _with_exercises(session, logs, catalog, tuning)


def swap_exercise(
    session: WorkoutSession,
    at_order: int,
    new_exercise_id: str,
    history: ExerciseHistory,
    catalog: Catalog,
    tuning: TuningTable,
) -> WorkoutSession:
    """
    Replace the exercise in one slot (e.g. the machine is taken).

    The slot keeps its position and set/rep scheme; its base weight is
    resolved from the new exercise's history and all its sets restart as
    pending.  The fatigue pass then re-plans the whole session, since the
    muscle group may have changed.
    """
    current = session.log_at(at_order)
    if current is None:
        logger.debug("swap_exercise: slot %d not in session %s", at_order, session.id)
        return session

    base = resolve_base_weight(new_exercise_id, _equipment_of(new_exercise_id, catalog), history, tuning)
    swapped = replace(
        current,
        exercise_id=new_exercise_id,
        base_weight=base,
        sets=tuple(SetLog(reps_completed=0, weight=base, completed=False) for _ in current.sets),
    )
    logs = [swapped if log.order == at_order else log for log in session.exercises]
    return _with_exercises(session, logs, catalog, tuning)


def add_exercise(
    session: WorkoutSession,
    exercise_id: str,
    history: ExerciseHistory,
    catalog: Catalog,
    tuning: TuningTable,
    target_sets: int = DEFAULT_SETS,
    target_reps: int = DEFAULT_REPS,
) -> WorkoutSession:
    """Append a slot (default 3×12) after the current last one and re-plan."""
    next_order = max((log.order for log in session.exercises), default=-1) + 1
    log = _new_log(exercise_id, next_order, target_sets, target_reps, history, catalog, tuning)
    return _with_exercises(session, list(session.exercises) + [log], catalog, tuning)


def delete_exercise(
    session: WorkoutSession,
    at_order: int,
    catalog: Catalog,
    tuning: TuningTable,
) -> WorkoutSession:
    """
    Remove a slot; remaining slots are renumbered 0..n-1 in their old sequence.
    """
    if session.log_at(at_order) is None:
        logger.debug("delete_exercise: slot %d not in session %s", at_order, session.id)
        return session

    remaining = sorted(
        (log for log in session.exercises if log.order != at_order),
        key=lambda log: log.order,
    )
    logs = [replace(log, order=i) for i, log in enumerate(remaining)]
    return _with_exercises(session, logs, catalog, tuning)


def _corrected_logs(session: WorkoutSession, log: ExerciseSessionLog) -> list[ExerciseSessionLog]:
    if log.sets:
        log = replace(log, base_weight=max(0.0, log.sets[-1].weight))
    return [log if existing.order == log.order else existing for existing in session.exercises]


def update_log(session: WorkoutSession, log: ExerciseSessionLog) -> WorkoutSession:
    """
    Store an edited slot pushed back from the set/weight controls.

    The slot's last set weight becomes its new base weight: the user's final
    working weight is the best estimate of fresh capacity from now on.  Other
    slots are not re-planned; see update_log_and_replan() for that.

    Returns:
        New session; unchanged when log.order matches no slot
    """
    if session.log_at(log.order) is None:
        logger.debug("update_log: slot %d not in session %s", log.order, session.id)
        return session
    return replace(session, exercises=tuple(_corrected_logs(session, log)))


def update_log_and_replan(
    session: WorkoutSession,
    log: ExerciseSessionLog,
    catalog: Catalog,
    tuning: TuningTable,
) -> WorkoutSession:
    """update_log() followed by a fatigue pass over the whole session."""
    if session.log_at(log.order) is None:
        logger.debug("update_log_and_replan: slot %d not in session %s", log.order, session.id)
        return session
    return _with_exercises(session, _corrected_logs(session, log), catalog, tuning)


def toggle_session_set(session: WorkoutSession, at_order: int, set_index: int) -> WorkoutSession:
    """Tap one set of a slot and store the result through update_log()."""
    log = session.log_at(at_order)
    if log is None:
        logger.debug("toggle_session_set: slot %d not in session %s", at_order, session.id)
        return session
    return update_log(session, toggle_set(log, set_index))


def adjust_session_weight(session: WorkoutSession, at_order: int, delta: float) -> WorkoutSession:
    """Nudge a slot's active weight and store the result through update_log()."""
    log = session.log_at(at_order)
    if log is None:
        logger.debug("adjust_session_weight: slot %d not in session %s", at_order, session.id)
        return session
    return update_log(session, adjust_weight(log, delta))


def finish_session(session: WorkoutSession, duration_seconds: int | None = None) -> WorkoutSession:
    """
    Freeze a session for the history.

    A live session records the elapsed time it was given.  A historical
    session keeps the duration it was logged with; the given value is used
    only when none was stored yet.
    """
    if session.is_historical and session.duration > 0:
        duration = session.duration
    else:
        duration = max(0, int(duration_seconds or 0))
    return replace(session, completed=True, duration=duration)


def elapsed_seconds(session: WorkoutSession, now: datetime) -> int:
    """Wall-clock seconds since a live session's start, never negative."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0, int((now - parse_instant(session.date)).total_seconds()))


# =============================================================================
# DERIVED FIELDS
# =============================================================================


def unknown_exercises(session: WorkoutSession, catalog: Catalog) -> list[int]:
    """Orders of slots whose exercise is missing from the catalog."""
    return [log.order for log in session.exercises if log.exercise_id not in catalog]

