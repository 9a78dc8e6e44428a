"""Project configuration: database location and file associations.

Settings live in the project's ``pyproject.toml``::

    [tool.codedeps]
    db_path = ".codedeps/index.db"
    exclude = ["tests/*"]

    [tool.codedeps.associations]
    "**/*.py" = "python"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from codedeps.core.exceptions import ConfigError
from codedeps.core.storage import get_default_db_path

DEFAULT_ASSOCIATIONS = {"**/*.py": "python"}


@dataclass
class Config:
    """Resolved settings for one project root."""

    root: Path
    db_path: Path
    associations: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ASSOCIATIONS))
    exclude: list[str] = field(default_factory=list)


def load_config(root: Path) -> Config:
    """Read ``[tool.codedeps]`` from ``root/pyproject.toml``, if present."""
    config = Config(root=root, db_path=get_default_db_path(root))
    pyproject = root / "pyproject.toml"
    if not pyproject.is_file():
        return config

    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {pyproject}: {e}") from e

    section = data.get("tool", {}).get("codedeps", {})
    if "db_path" in section:
        config.db_path = root / str(section["db_path"])
    if "associations" in section:
        associations = section["associations"]
        if not isinstance(associations, dict) or not all(
            isinstance(v, str) for v in associations.values()
        ):
            raise ConfigError("[tool.codedeps.associations] must map glob patterns to language ids")
        config.associations = dict(associations)
    if "exclude" in section:
        config.exclude = [str(p) for p in section["exclude"]]
    return config


def parse_associations(values: list[str]) -> dict[str, str]:
    """Parse ``GLOB=LANGUAGE`` command-line values."""
    associations: dict[str, str] = {}
    for value in values:
        pattern, sep, language_id = value.partition("=")
        if not sep or not pattern or not language_id:
            raise ConfigError(f"Expected GLOB=LANGUAGE, got '{value}'")
        associations[pattern] = language_id
    return associations
