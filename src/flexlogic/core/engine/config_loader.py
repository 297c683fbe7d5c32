"""
YAML → dict config loader.

Loads the bundled data files (exercises.yaml, tuning.yaml) shipped inside the
package and optionally merges user overrides from ~/.flexlogic/<name>.

Usage:
    from flexlogic.core.engine.config_loader import load_model_config
    cfg = load_model_config("tuning.yaml")
    factor = cfg.get("fatigue", {}).get("FATIGUE_FACTOR", 0.05)

If the user override file exists but has parse errors, a warning is issued
and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; a non-mapping document yields {}."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_config_dir() -> Path:
    """Return ~/.flexlogic (not created here)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".flexlogic"


def get_bundled_yaml_path(name: str) -> Path | None:
    """Return the path to a bundled YAML data file, or None if not found."""
    ref = importlib.resources.files("flexlogic").joinpath(name)
    if ref.is_file():
        with importlib.resources.as_file(ref) as p:
            return p
    # Fallback: look relative to this file's package root
    candidate = Path(__file__).parent.parent.parent / name
    return candidate if candidate.exists() else None


def get_user_yaml_path(name: str) -> Path | None:
    """Return ~/.flexlogic/<name> if it exists, else None."""
    p = get_user_config_dir() / name
    return p if p.exists() else None


def load_model_config(name: str, user_override: bool = True) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/flexlogic/<name>
    2. User override at ~/.flexlogic/<name>

    Args:
        name: File name, e.g. "tuning.yaml"
        user_override: Set False to ignore the user file (used by tests)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.

    Raises:
        yaml.YAMLError: If the bundled file is malformed
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path(name)
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path(name) if user_override else None
    if user is not None:
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"flexlogic: ignoring unreadable override {user} ({exc})",
                stacklevel=2,
            )
            user_cfg = {}
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config
