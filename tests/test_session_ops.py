"""
Tests for session mutation operations and progress analytics.

Every operation returns a new session; inputs are checked to stay unchanged.
"""

from datetime import date, datetime, timezone

import pytest

from flexlogic.core.catalog import Catalog
from flexlogic.core.equipment import EquipmentTuning, TuningTable
from flexlogic.core.history import SessionHistory
from flexlogic.core.models import Exercise, SessionTemplate, SetLog
from flexlogic.core.progress import (
    exercise_progress,
    format_duration,
    recent_activity,
    summarize_session,
    trained_exercise_ids,
)
from flexlogic.core.session import (
    add_exercise,
    adjust_session_weight,
    delete_exercise,
    elapsed_seconds,
    finish_session,
    reorder,
    start_session,
    swap_exercise,
    to_iso_instant,
    toggle_session_set,
    unknown_exercises,
    update_log,
    update_log_and_replan,
)
from flexlogic.core.sets import adjust_weight, toggle_set

CATALOG = Catalog(
    [
        Exercise("bench", "Bench Press", "Chest", "Barbell", True, ("db-press",)),
        Exercise("incline", "Incline Press", "Chest", "Barbell", True),
        Exercise("squat", "Squat", "Legs", "Barbell", True),
        Exercise("db-press", "Dumbbell Press", "Chest", "Dumbbell", True),
        Exercise("curl", "Curl", "Biceps", "Dumbbell"),
    ]
)

TUNING = TuningTable(
    equipment={
        "Barbell": EquipmentTuning(increment=2.5, min_weight=0.0, start_weight=20.0),
        "Dumbbell": EquipmentTuning(increment=2.0, min_weight=4.0, start_weight=10.0),
    },
)

START = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)

TEMPLATE = SessionTemplate(
    id="tpl-test",
    name="Test Day",
    exercise_ids=("bench", "incline", "squat"),
    default_sets=3,
    default_reps=12,
)


@pytest.fixture
def session():
    return start_session(TEMPLATE, SessionHistory(), CATALOG, TUNING, START)


def _weights(session, order):
    return [s.weight for s in session.log_at(order).sets]


class TestStartSession:
    def test_slots_follow_template(self, session):
        assert [log.exercise_id for log in session.exercises] == ["bench", "incline", "squat"]
        assert [log.order for log in session.exercises] == [0, 1, 2]

    def test_scenario_fatigue_on_start(self, session):
        """No history: all bases 20, second chest exercise planned at 17.5."""
        assert [log.base_weight for log in session.exercises] == [20.0, 20.0, 20.0]
        assert _weights(session, 0) == [20.0] * 3
        assert _weights(session, 1) == [17.5] * 3
        assert _weights(session, 2) == [20.0] * 3

    def test_metadata(self, session):
        assert session.id.startswith("ses-")
        assert session.name == "Test Day"
        assert session.date == "2026-03-02T18:00:00.000Z"
        assert session.template_id == "tpl-test"
        assert not session.completed
        assert session.duration == 0
        assert not session.is_historical

    def test_explicit_id_and_historical(self):
        s = start_session(TEMPLATE, SessionHistory(), CATALOG, TUNING, START, session_id="x", is_historical=True)
        assert s.id == "x"
        assert s.is_historical

    def test_id_from_creation_time(self):
        created = datetime(2026, 3, 5, 9, 30, tzinfo=timezone.utc)
        s = start_session(TEMPLATE, SessionHistory(), CATALOG, TUNING, START, created_at=created)
        assert s.id == f"ses-{int(created.timestamp() * 1000)}"
        assert s.date == "2026-03-02T18:00:00.000Z"

    def test_same_day_past_sessions_get_distinct_ids(self):
        first = start_session(
            TEMPLATE, SessionHistory(), CATALOG, TUNING, START,
            is_historical=True, created_at=datetime(2026, 3, 5, 9, 30, tzinfo=timezone.utc),
        )
        second = start_session(
            TEMPLATE, SessionHistory(), CATALOG, TUNING, START,
            is_historical=True, created_at=datetime(2026, 3, 5, 9, 45, tzinfo=timezone.utc),
        )
        assert first.date == second.date
        assert first.id != second.id

    def test_sets_pending_with_target_scheme(self, session):
        log = session.log_at(0)
        assert log.target_sets == 3
        assert log.target_reps == 12
        assert all(not s.completed and s.reps_completed == 0 for s in log.sets)

    def test_history_feeds_overload(self, session):
        done = session
        for order in range(3):
            for i in range(3):
                done = toggle_session_set(done, order, i)
        history = SessionHistory([finish_session(done, 3600)])

        nxt = start_session(TEMPLATE, history, CATALOG, TUNING, START)
        # bench: base 20 → 22.5; incline was lifted at 17.5, base stored 17.5 → 20
        assert nxt.log_at(0).base_weight == 22.5
        assert nxt.log_at(1).base_weight == 20.0
        # 20 * 0.95 = 19 → 17.5
        assert _weights(nxt, 1) == [17.5] * 3

    def test_empty_template(self):
        s = start_session(SessionTemplate("e", "Empty"), SessionHistory(), CATALOG, TUNING, START)
        assert s.exercises == ()


class TestReorder:
    def test_scenario_swap_first_and_last(self, session):
        """Orders 0 and 2 trade places; fatigue follows the new sequence."""
        result = reorder(session, 0, 2, CATALOG, TUNING)
        assert [log.exercise_id for log in result.exercises] == ["squat", "incline", "bench"]
        assert [log.order for log in result.exercises] == [0, 1, 2]
        # incline is now the first chest exercise, bench the second
        assert _weights(result, 1) == [20.0] * 3
        assert _weights(result, 2) == [17.5] * 3

    def test_missing_slot_is_noop(self, session):
        assert reorder(session, 0, 7, CATALOG, TUNING) is session

    def test_same_slot_is_noop(self, session):
        assert reorder(session, 1, 1, CATALOG, TUNING) is session

    def test_input_unchanged(self, session):
        before = session.exercises
        reorder(session, 0, 1, CATALOG, TUNING)
        assert session.exercises == before


class TestSwapExercise:
    def test_new_exercise_resets_sets(self, session):
        toggled = toggle_session_set(session, 1, 0)
        result = swap_exercise(toggled, 1, "squat", SessionHistory(), CATALOG, TUNING)
        log = result.log_at(1)
        assert log.exercise_id == "squat"
        assert all(not s.completed and s.reps_completed == 0 for s in log.sets)
        assert len(log.sets) == 3

    def test_fatigue_regrouped(self, session):
        # slot 1 leaves Chest for Legs, slot 2 squat becomes the second Legs
        result = swap_exercise(session, 1, "squat", SessionHistory(), CATALOG, TUNING)
        assert _weights(result, 1) == [20.0] * 3
        assert _weights(result, 2) == [17.5] * 3

    def test_equipment_start_weight(self, session):
        result = swap_exercise(session, 1, "db-press", SessionHistory(), CATALOG, TUNING)
        log = result.log_at(1)
        assert log.base_weight == 10.0
        # second chest: 10 * 0.95 = 9.5 → 8 with a 2 kg increment
        assert _weights(result, 1) == [8.0] * 3

    def test_missing_slot_is_noop(self, session):
        assert swap_exercise(session, 9, "curl", SessionHistory(), CATALOG, TUNING) is session


class TestAddDelete:
    def test_add_appends_default_scheme(self, session):
        result = add_exercise(session, "curl", SessionHistory(), CATALOG, TUNING)
        log = result.log_at(3)
        assert log.exercise_id == "curl"
        assert (log.target_sets, log.target_reps) == (3, 12)
        assert _weights(result, 3) == [10.0] * 3

    def test_add_to_empty_session(self):
        empty = start_session(SessionTemplate("e", "Empty"), SessionHistory(), CATALOG, TUNING, START)
        result = add_exercise(empty, "bench", SessionHistory(), CATALOG, TUNING)
        assert [log.order for log in result.exercises] == [0]

    def test_add_third_chest_gets_more_fatigue(self, session):
        result = add_exercise(session, "bench", SessionHistory(), CATALOG, TUNING)
        # n = 2: 20 * 0.9 = 18 → 17.5
        assert _weights(result, 3) == [17.5] * 3

    def test_delete_renumbers(self, session):
        result = delete_exercise(session, 0, CATALOG, TUNING)
        assert [log.order for log in result.exercises] == [0, 1]
        assert [log.exercise_id for log in result.exercises] == ["incline", "squat"]
        # incline is now the only chest exercise
        assert _weights(result, 0) == [20.0] * 3

    def test_delete_middle_keeps_sequence(self, session):
        result = delete_exercise(session, 1, CATALOG, TUNING)
        assert [(log.order, log.exercise_id) for log in result.exercises] == [(0, "bench"), (1, "squat")]

    def test_delete_missing_is_noop(self, session):
        assert delete_exercise(session, 5, CATALOG, TUNING) is session


class TestUpdateLog:
    def test_base_becomes_last_set_weight(self, session):
        log = adjust_weight(session.log_at(0), 5.0)
        result = update_log(session, log)
        assert result.log_at(0).base_weight == 25.0

    def test_other_slots_not_replanned(self, session):
        log = adjust_weight(session.log_at(0), 5.0)
        result = update_log(session, log)
        assert result.log_at(1) == session.log_at(1)

    def test_opt_in_recompute(self, session):
        log = adjust_weight(session.log_at(1), 10.0)
        result = update_log_and_replan(session, log, CATALOG, TUNING)
        # base 27.5 as second chest: 27.5 * 0.95 = 26.125 → 25
        assert result.log_at(1).base_weight == 27.5
        assert _weights(result, 1) == [25.0] * 3

    def test_replan_unknown_order_is_noop(self, session):
        from dataclasses import replace

        stray = replace(session.log_at(0), order=42)
        assert update_log_and_replan(session, stray, CATALOG, TUNING) is session

    def test_unknown_order_is_noop(self, session):
        from dataclasses import replace

        stray = replace(session.log_at(0), order=42)
        assert update_log(session, stray) is session

    def test_toggle_then_adjust_remaining(self, session):
        s = toggle_session_set(session, 0, 0)
        s = adjust_session_weight(s, 0, 2.5)
        assert _weights(s, 0) == [20.0, 22.5, 22.5]
        assert s.log_at(0).sets[0].completed
        assert s.log_at(0).base_weight == 22.5

    def test_session_helpers_missing_slot(self, session):
        assert toggle_session_set(session, 8, 0) is session
        assert adjust_session_weight(session, 8, 2.5) is session

    def test_toggle_via_session_matches_log(self, session):
        s = toggle_session_set(session, 2, 1)
        assert s.log_at(2).sets == toggle_set(session.log_at(2), 1).sets


class TestFinishSession:
    def test_live_takes_elapsed(self, session):
        done = finish_session(session, 2700)
        assert done.completed
        assert done.duration == 2700

    def test_negative_duration_clamped(self, session):
        assert finish_session(session, -5).duration == 0

    def test_historical_keeps_stored_duration(self, session):
        from dataclasses import replace

        past = replace(session, is_historical=True, duration=3600)
        assert finish_session(past, 99999).duration == 3600

    def test_historical_without_duration_uses_given(self, session):
        from dataclasses import replace

        past = replace(session, is_historical=True)
        assert finish_session(past, 1800).duration == 1800

    def test_elapsed_seconds(self, session):
        now = datetime(2026, 3, 2, 18, 45, 30, tzinfo=timezone.utc)
        assert elapsed_seconds(session, now) == 45 * 60 + 30
        assert elapsed_seconds(session, START.replace(hour=17)) == 0


class TestUnknownExercises:
    def test_flags_missing_catalog_entries(self, session):
        s = add_exercise(session, "ghost", SessionHistory(), CATALOG, TUNING)
        assert unknown_exercises(s, CATALOG) == [3]
        # default tuning start weight, left unfatigued
        assert _weights(s, 3) == [20.0] * 3


class TestIsoInstant:
    def test_naive_taken_as_utc(self):
        assert to_iso_instant(datetime(2026, 1, 5, 7, 8, 9, 123456)) == "2026-01-05T07:08:09.123Z"


# =============================================================================
# PROGRESS ANALYTICS
# =============================================================================


def _finished(session, day: int, bench_weight: float, reps: int = 12):
    from dataclasses import replace

    log = session.log_at(0)
    sets = tuple(SetLog(reps, bench_weight, True) for _ in log.sets)
    logs = tuple(replace(log, sets=sets) if log.order == 0 else log for log in session.exercises)
    return replace(
        session,
        id=f"s{day}",
        date=f"2026-03-{day:02d}T18:00:00.000Z",
        exercises=logs,
        completed=True,
        duration=3600,
    )


class TestProgress:
    def test_weight_trend_oldest_first(self, session):
        sessions = [_finished(session, 9, 25.0), _finished(session, 2, 20.0), _finished(session, 5, 22.5, reps=10)]
        points = exercise_progress(sessions, "bench")
        assert [p.weight for p in points] == [20.0, 22.5, 25.0]
        assert points[1].reps == 10
        assert points[0].sets == 3

    def test_sessions_without_lifted_weight_skipped(self, session):
        # incline never had a completed set
        assert exercise_progress([_finished(session, 2, 20.0)], "incline") == []

    def test_unfinished_ignored(self, session):
        assert exercise_progress([session], "bench") == []

    def test_trained_ids(self, session):
        assert trained_exercise_ids([_finished(session, 2, 20.0)]) == ["bench", "incline", "squat"]

    def test_recent_activity(self, session):
        days = recent_activity([_finished(session, 2, 20.0)], date(2026, 3, 4), days=3)
        assert days == [(date(2026, 3, 2), True), (date(2026, 3, 3), False), (date(2026, 3, 4), False)]

    def test_summary(self, session):
        summary = summarize_session(_finished(session, 2, 20.0))
        assert summary.completed_sets == 3
        assert summary.total_volume == 3 * 20.0 * 12
        assert summary.overload_ready == ["bench"]
        assert summary.exercise_count == 3


class TestFormatDuration:
    def test_under_an_hour(self):
        assert format_duration(45 * 60 + 7) == "45:07"

    def test_over_an_hour(self):
        assert format_duration(3723) == "1:02:03"

    def test_negative(self):
        assert format_duration(-1) == "00:00"
