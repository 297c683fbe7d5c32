"""
Tests for the JSON store, serializers, export and YAML configuration.
"""

import csv
import io
import json
import tempfile
from pathlib import Path

import pytest

from flexlogic.core.catalog import catalog_from_dict, load_catalog, load_default_templates, templates_from_dict
from flexlogic.core.equipment import load_tuning, tuning_table_from_dict
from flexlogic.core.models import ExerciseSessionLog, SessionTemplate, SetLog, WorkoutSession
from flexlogic.io.export import CSV_COLUMNS, export_csv, export_json
from flexlogic.io.serializers import (
    ValidationError,
    dict_to_exercise_log,
    dict_to_scheduled,
    dict_to_session,
    dict_to_set_log,
    dict_to_template,
    session_to_dict,
    validate_date,
)
from flexlogic.io.session_store import SessionStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, temp_dir):
    """Point ~ at an empty directory so user YAML overrides never leak in."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def store(temp_dir):
    s = SessionStore(temp_dir / "data")
    s.init()
    return s


def _session(sid: str = "ses-1", date: str = "2026-03-02T18:00:00.000Z", completed: bool = True) -> WorkoutSession:
    log = ExerciseSessionLog(
        exercise_id="bb-ohp",
        order=0,
        target_sets=2,
        target_reps=10,
        base_weight=30.0,
        sets=(SetLog(10, 30.0, True), SetLog(8, 30.0, True)),
    )
    return WorkoutSession(
        id=sid,
        name="Push Day",
        date=date,
        completed=completed,
        duration=3125,
        exercises=(log,),
        template_id="tpl-push",
    )


class TestSerializers:
    def test_camel_case_keys(self):
        data = session_to_dict(_session())
        log = data["exercises"][0]
        assert set(log) == {"exerciseId", "order", "targetSets", "targetReps", "baseWeight", "sets"}
        assert log["sets"][1] == {"repsCompleted": 8, "weight": 30.0, "completed": True}
        assert data["templateId"] == "tpl-push"
        assert "isHistorical" not in data

    def test_historical_flag_written(self):
        from dataclasses import replace

        data = session_to_dict(replace(_session(), is_historical=True))
        assert data["isHistorical"] is True

    def test_session_loads_back(self):
        original = _session()
        assert dict_to_session(session_to_dict(original)) == original

    def test_negative_numbers_clamped(self):
        s = dict_to_set_log({"repsCompleted": -3, "weight": -10, "completed": True})
        assert s == SetLog(reps_completed=0, weight=0.0, completed=True)

    def test_missing_base_weight_defaults_to_zero(self):
        log = dict_to_exercise_log({"exerciseId": "x", "order": 0, "targetReps": 12, "sets": []})
        assert log.base_weight == 0.0
        assert log.target_sets == 1

    def test_missing_exercise_id(self):
        with pytest.raises(ValidationError):
            dict_to_exercise_log({"order": 0})

    def test_exercises_sorted_by_order(self):
        data = session_to_dict(_session())
        first = dict(data["exercises"][0])
        data["exercises"] = [dict(first, order=3, exerciseId="b"), dict(first, order=1)]
        loaded = dict_to_session(data)
        assert [e.order for e in loaded.exercises] == [1, 3]

    def test_duplicate_orders_rejected(self):
        data = session_to_dict(_session())
        data["exercises"] = data["exercises"] * 2
        with pytest.raises(ValidationError, match="duplicate"):
            dict_to_session(data)

    def test_bad_date_rejected(self):
        data = session_to_dict(_session())
        data["date"] = "yesterday"
        with pytest.raises(ValidationError):
            dict_to_session(data)

    @pytest.mark.parametrize(
        "convert, raw",
        [
            (dict_to_set_log, 5),
            (dict_to_exercise_log, "bb-ohp"),
            (dict_to_template, ["tpl-push"]),
            (dict_to_scheduled, None),
            (dict_to_session, 3),
        ],
    )
    def test_non_object_rejected(self, convert, raw):
        with pytest.raises(ValidationError, match="must be an object"):
            convert(raw)

    def test_non_object_set_inside_session(self):
        data = session_to_dict(_session())
        data["exercises"][0]["sets"] = [5]
        with pytest.raises(ValidationError):
            dict_to_session(data)

    def test_sets_not_a_list(self):
        with pytest.raises(ValidationError, match="sets"):
            dict_to_exercise_log({"exerciseId": "x", "order": 0, "sets": 4})

    def test_validate_date(self):
        assert validate_date("2026-02-28") == "2026-02-28"
        with pytest.raises(ValidationError):
            validate_date("2026-02-30")
        with pytest.raises(ValidationError):
            validate_date("28.02.2026")


class TestSessionStore:
    def test_init_creates_sessions_file(self, temp_dir):
        s = SessionStore(temp_dir / "fresh")
        assert not s.exists()
        s.init()
        assert s.exists()
        assert json.loads(s.sessions_path.read_text()) == []

    def test_load_requires_init(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            SessionStore(temp_dir / "nowhere").load_sessions()

    def test_save_and_load_sorted(self, store):
        store.save_session(_session("late", "2026-03-05T18:00:00.000Z"))
        store.save_session(_session("early", "2026-03-01T18:00:00.000Z"))
        assert [s.id for s in store.load_sessions()] == ["early", "late"]

    def test_save_upserts_by_id(self, store):
        from dataclasses import replace

        store.save_session(_session())
        store.save_session(replace(_session(), duration=10))
        sessions = store.load_sessions()
        assert len(sessions) == 1
        assert sessions[0].duration == 10

    def test_delete_session(self, store):
        store.save_session(_session())
        store.delete_session("ses-1")
        assert store.load_sessions() == []
        with pytest.raises(KeyError):
            store.delete_session("ses-1")

    def test_corrupt_file(self, store):
        store.sessions_path.write_text("{not json")
        with pytest.raises(ValidationError):
            store.load_sessions()

    def test_corrupt_set_names_file(self, store):
        data = session_to_dict(_session())
        data["exercises"][0]["sets"] = [5]
        store.sessions_path.write_text(json.dumps([data]))
        with pytest.raises(ValidationError, match="sessions.json"):
            store.load_sessions()
        with pytest.raises(ValidationError):
            store.history()

    def test_corrupt_template_row(self, store):
        store.templates_path.write_text(json.dumps(["tpl-push"]))
        with pytest.raises(ValidationError, match="templates.json"):
            store.load_templates()

    def test_corrupt_schedule_row(self, store):
        store.schedule_path.write_text(json.dumps([42]))
        with pytest.raises(ValidationError, match="schedule.json"):
            store.load_schedule()

    def test_corrupt_draft(self, store):
        store.draft_path.write_text(json.dumps({"id": "d", "date": "2026-03-02T18:00:00.000Z", "exercises": [1]}))
        with pytest.raises(ValidationError, match="draft.json"):
            store.load_draft()

    def test_history_adapter(self, store):
        store.save_session(_session())
        store.save_session(_session("draft", "2026-03-09T18:00:00.000Z", completed=False))
        last = store.history().last_log_for("bb-ohp")
        assert last.base_weight == 30.0
        assert last.succeeded is False

    def test_history_before_init_is_empty(self, temp_dir):
        assert len(SessionStore(temp_dir / "none").history()) == 0

    def test_templates_default_to_bundled(self, store):
        ids = [t.id for t in store.load_templates()]
        assert ids == ["tpl-push", "tpl-pull", "tpl-legs", "tpl-upper"]

    def test_save_and_delete_template(self, store):
        store.save_template(SessionTemplate("tpl-arms", "Arms", ("bb-curl-stand", "cab-tri-push"), 3, 10))
        assert store.get_template("tpl-arms").default_reps == 10
        # bundled routines were copied along with the first save
        assert store.get_template("tpl-push") is not None

        store.delete_template("tpl-arms")
        assert store.get_template("tpl-arms") is None
        with pytest.raises(KeyError):
            store.delete_template("tpl-arms")

    def test_schedule_one_per_date(self, store):
        store.schedule_template("2026-03-04", "tpl-push")
        store.schedule_template("2026-03-02", "tpl-legs")
        store.schedule_template("2026-03-04", "tpl-pull")
        assert [(s.date, s.template_id) for s in store.load_schedule()] == [
            ("2026-03-02", "tpl-legs"),
            ("2026-03-04", "tpl-pull"),
        ]
        assert store.scheduled_for("2026-03-04").template_id == "tpl-pull"

        store.unschedule("2026-03-04")
        assert store.scheduled_for("2026-03-04") is None

    def test_schedule_rejects_bad_date(self, store):
        with pytest.raises(ValidationError):
            store.schedule_template("next monday", "tpl-push")

    def test_draft_lifecycle(self, store):
        assert store.load_draft() is None
        draft = _session(completed=False)
        store.save_draft(draft)
        assert store.load_draft() == draft
        store.clear_draft()
        assert store.load_draft() is None
        store.clear_draft()


class TestExport:
    def test_json_oldest_first(self):
        text = export_json([_session("b", "2026-03-05T18:00:00.000Z"), _session("a")])
        assert [s["id"] for s in json.loads(text)] == ["a", "b"]

    def test_csv_one_row_per_set(self):
        text = export_csv([_session()], load_catalog(user_override=False))
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == CSV_COLUMNS
        assert len(rows) == 3
        row = dict(zip(CSV_COLUMNS, rows[2]))
        assert row["exercise_name"] == "Barbell Overhead Press"
        assert row["muscle_group"] == "Shoulders"
        assert row["set"] == "2"
        assert row["weight_kg"] == "30"
        assert row["reps"] == "8"
        assert row["completed"] == "yes"

    def test_csv_without_catalog(self):
        rows = list(csv.reader(io.StringIO(export_csv([_session()]))))
        assert rows[1][CSV_COLUMNS.index("exercise_name")] == ""


class TestYamlConfig:
    def test_bundled_catalog(self):
        catalog = load_catalog(user_override=False)
        ex = catalog.exercise_of("bb-ohp")
        assert ex.muscle_group == "Shoulders"
        assert ex.equipment == "Barbell"
        assert [a.id for a in catalog.alternatives_for("bb-ohp")] == ["db-lat-raise"]
        assert all(ex.muscle_group == "Calves" for ex in catalog.by_muscle_group("Calves"))
        assert "calf-raise-seat" in [ex.id for ex in catalog.by_muscle_group("Calves")]

    def test_bundled_templates_reference_catalog(self):
        catalog = load_catalog(user_override=False)
        for tpl in load_default_templates(user_override=False):
            assert all(ex_id in catalog for ex_id in tpl.exercise_ids), tpl.id

    def test_bundled_tuning(self):
        tuning = load_tuning(user_override=False)
        assert tuning.fatigue_factor == 0.05
        assert tuning.weight_increment("Dumbbell") == 2.0
        assert tuning.min_weight("Dumbbell") == 4.0
        assert tuning.weight_increment("Unknown") == 2.5

    def test_incomplete_exercise_skipped_with_warning(self):
        cfg = {"exercises": {"ok": {"name": "Ok", "muscle_group": "Legs", "equipment": "Machine"}, "bad": {"name": "Bad"}}}
        with pytest.warns(UserWarning, match="bad"):
            catalog = catalog_from_dict(cfg)
        assert "ok" in catalog
        assert "bad" not in catalog

    def test_empty_template_skipped(self):
        with pytest.warns(UserWarning):
            assert templates_from_dict({"templates": {"t": {"name": "T", "exercise_ids": []}}}) == []

    def test_tuning_validation(self):
        with pytest.raises(ValueError):
            tuning_table_from_dict({"equipment": {"Barbell": {"increment": 0}}})
        with pytest.raises(ValueError):
            tuning_table_from_dict({"fatigue": {"FATIGUE_FACTOR": 1.5}})

    def test_tuning_entry_inherits_default(self):
        tuning = tuning_table_from_dict({"default": {"increment": 5.0}, "equipment": {"Sled": {"start_weight": 40}}})
        assert tuning.weight_increment("Sled") == 5.0
        assert tuning.start_weight("Sled") == 40.0

    def test_user_override_merged(self, isolated_home):
        cfg_dir = isolated_home / ".flexlogic"
        cfg_dir.mkdir()
        (cfg_dir / "tuning.yaml").write_text("equipment:\n  Dumbbell:\n    increment: 1.0\n")
        tuning = load_tuning()
        assert tuning.weight_increment("Dumbbell") == 1.0
        # untouched keys come from the bundled file
        assert tuning.min_weight("Dumbbell") == 4.0

    def test_broken_user_override_ignored(self, isolated_home):
        cfg_dir = isolated_home / ".flexlogic"
        cfg_dir.mkdir()
        (cfg_dir / "tuning.yaml").write_text("equipment: [unclosed\n")
        with pytest.warns(UserWarning):
            tuning = load_tuning()
        assert tuning.weight_increment("Dumbbell") == 2.0
