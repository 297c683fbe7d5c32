"""
Exercise catalog.

The catalog is injected into every engine operation rather than looked up
globally, so tests can run the engine over a synthetic catalog.  The bundled
catalog is loaded from exercises.yaml (see core/engine/config_loader.py);
entries that fail validation are skipped with a warning.

Usage:
    catalog = load_catalog()
    ex = catalog.exercise_of("bb-ohp")   # Exercise or None
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable, Iterator

from .config import TEMPLATE_DEFAULT_REPS, TEMPLATE_DEFAULT_SETS
from .engine.config_loader import load_model_config
from .models import Exercise, SessionTemplate

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "muscle_group",
        "equipment",
    }
)


class Catalog:
    """
    Read-only exercise lookup keyed by exercise id.

    Missing ids are not an error: exercise_of() returns None and the engine
    treats the slot as an unknown exercise.
    """

    def __init__(self, exercises: Iterable[Exercise] = ()):
        self._exercises: dict[str, Exercise] = {ex.id: ex for ex in exercises}

    def exercise_of(self, exercise_id: str) -> Exercise | None:
        """Return the catalog entry for *exercise_id*, or None."""
        return self._exercises.get(exercise_id)

    def __contains__(self, exercise_id: object) -> bool:
        return exercise_id in self._exercises

    def __iter__(self) -> Iterator[Exercise]:
        return iter(self._exercises.values())

    def __len__(self) -> int:
        return len(self._exercises)

    def alternatives_for(self, exercise_id: str) -> list[Exercise]:
        """
        Resolve an exercise's default alternatives to catalog entries.

        Alternatives that are not in the catalog are dropped.
        """
        ex = self.exercise_of(exercise_id)
        if ex is None:
            return []
        return [
            alt
            for alt in (self.exercise_of(a) for a in ex.default_alternatives)
            if alt is not None
        ]

    def by_muscle_group(self, muscle_group: str) -> list[Exercise]:
        """All exercises that train *muscle_group*, in catalog order."""
        return [ex for ex in self._exercises.values() if ex.muscle_group == muscle_group]


def exercise_from_dict(exercise_id: str, d: dict) -> Exercise:
    """Convert a raw dict (from YAML) to an Exercise.

    Raises ValueError if any required field is absent.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"Exercise missing fields: {sorted(missing)}")
    return Exercise(
        id=str(exercise_id),
        name=str(d["name"]),
        muscle_group=str(d["muscle_group"]),
        equipment=str(d["equipment"]),
        is_compound=bool(d.get("is_compound", False)),
        default_alternatives=tuple(str(a) for a in d.get("alternatives") or ()),
    )


def template_from_dict(template_id: str, d: dict) -> SessionTemplate:
    """Convert a raw dict (from YAML) to a SessionTemplate.

    Raises ValueError on a missing name or an empty exercise list.
    """
    if not d.get("name"):
        raise ValueError("Template missing field: name")
    exercise_ids = tuple(str(e) for e in d.get("exercise_ids") or ())
    if not exercise_ids:
        raise ValueError("Template has no exercises")
    return SessionTemplate(
        id=str(template_id),
        name=str(d["name"]),
        exercise_ids=exercise_ids,
        default_sets=max(1, int(d.get("default_sets", TEMPLATE_DEFAULT_SETS))),
        default_reps=max(1, int(d.get("default_reps", TEMPLATE_DEFAULT_REPS))),
    )


def catalog_from_dict(cfg: dict) -> Catalog:
    """Build a Catalog from the ``exercises`` section of a parsed exercises.yaml."""
    exercises: list[Exercise] = []
    for ex_id, raw in (cfg.get("exercises") or {}).items():
        try:
            exercises.append(exercise_from_dict(ex_id, raw or {}))
        except ValueError as exc:
            warnings.warn(
                f"flexlogic: skipping exercise '{ex_id}': {exc}",
                stacklevel=2,
            )
    return Catalog(exercises)


def templates_from_dict(cfg: dict) -> list[SessionTemplate]:
    """Build the default templates from the ``templates`` section."""
    templates: list[SessionTemplate] = []
    for tpl_id, raw in (cfg.get("templates") or {}).items():
        try:
            templates.append(template_from_dict(tpl_id, raw or {}))
        except ValueError as exc:
            warnings.warn(
                f"flexlogic: skipping template '{tpl_id}': {exc}",
                stacklevel=2,
            )
    return templates


def load_catalog(user_override: bool = True) -> Catalog:
    """Load the exercise catalog from bundled and user YAML."""
    return catalog_from_dict(load_model_config("exercises.yaml", user_override))


def load_default_templates(user_override: bool = True) -> list[SessionTemplate]:
    """Load the bundled default routines."""
    return templates_from_dict(load_model_config("exercises.yaml", user_override))
