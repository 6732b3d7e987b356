from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

try:
    import tomllib  # py>=3.11
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # py<3.11

# Environment variable pointing to an alternative config.toml.
CONFIG_ENV_VAR = "SPLICEKIN_CONFIG"

SECTIONS = ("kinetics", "sweep", "time", "paths")


def _project_root() -> Path:
    """
    Find repo root by walking upwards until config.toml is found.

    Returns:
        The root directory of the project.
    """
    start = Path(__file__).resolve().parent
    for p in [start, *start.parents]:
        if (p / "config.toml").is_file():
            return p
    return start


def config_path() -> Path:
    """
    Path of the active config file: $SPLICEKIN_CONFIG if set, else <root>/config.toml.
    """
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser().resolve()
    return _project_root() / "config.toml"


def read_toml(path: str | Path) -> dict[str, Any]:
    """
    Read a TOML file and check that it only holds known sections.

    Args:
        path (str | Path): Location of the TOML file.

    Returns:
        dict[str, Any]: The parsed document.
    """
    path = Path(path)
    with path.open("rb") as f:
        raw = tomllib.load(f)
    unknown = sorted(set(raw) - set(SECTIONS))
    if unknown:
        raise ValueError(f"Unknown config section(s) in {path}: {', '.join(unknown)}")
    for name, value in raw.items():
        if not isinstance(value, dict):
            raise ValueError(f"Config section [{name}] in {path} must be a table")
    return raw


@lru_cache(maxsize=8)
def _load_cached(path: str, section: str) -> dict[str, Any]:
    p = Path(path)
    if not p.is_file():
        return {}
    return dict(read_toml(p).get(section, {}) or {})


def load(section: str, path: str | Path | None = None) -> dict[str, Any]:
    """
    Load configuration overrides for one section.

    A missing config file is not an error: every constant has a built-in default.

    Args:
        section (str): One of "kinetics", "sweep", "time", "paths".
        path (str | Path | None): Explicit file; defaults to config_path().

    Returns:
        dict[str, Any]: The overrides found for the section (possibly empty).
    """
    if section not in SECTIONS:
        raise ValueError(f"Unknown config section: {section}")
    p = Path(path) if path is not None else config_path()
    return dict(_load_cached(str(p.resolve()), section))
