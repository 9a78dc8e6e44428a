"""Unit tests for project configuration."""

from pathlib import Path

import pytest

from codedeps.config import DEFAULT_ASSOCIATIONS, load_config, parse_associations
from codedeps.core.exceptions import ConfigError


class TestLoadConfig:
    """Tests for reading [tool.codedeps]."""

    def test_defaults_without_pyproject(self, temp_dir: Path) -> None:
        config = load_config(temp_dir)

        assert config.root == temp_dir
        assert config.db_path == temp_dir / ".codedeps" / "index.db"
        assert config.associations == DEFAULT_ASSOCIATIONS
        assert config.exclude == []

    def test_defaults_without_section(self, temp_dir: Path) -> None:
        (temp_dir / "pyproject.toml").write_text('[project]\nname = "demo"\n')

        assert load_config(temp_dir).associations == DEFAULT_ASSOCIATIONS

    def test_reads_section(self, temp_dir: Path) -> None:
        (temp_dir / "pyproject.toml").write_text(
            """
[tool.codedeps]
db_path = "build/deps.db"
exclude = ["tests/*"]

[tool.codedeps.associations]
"src/**/*.py" = "python"
"""
        )

        config = load_config(temp_dir)

        assert config.db_path == temp_dir / "build" / "deps.db"
        assert config.exclude == ["tests/*"]
        assert config.associations == {"src/**/*.py": "python"}

    def test_invalid_toml(self, temp_dir: Path) -> None:
        (temp_dir / "pyproject.toml").write_text("[tool.codedeps\n")

        with pytest.raises(ConfigError):
            load_config(temp_dir)

    def test_invalid_associations(self, temp_dir: Path) -> None:
        (temp_dir / "pyproject.toml").write_text('[tool.codedeps]\nassociations = ["*.py"]\n')

        with pytest.raises(ConfigError):
            load_config(temp_dir)

    def test_defaults_are_not_shared(self, temp_dir: Path) -> None:
        first = load_config(temp_dir)
        first.associations["*.js"] = "javascript"

        assert load_config(temp_dir).associations == DEFAULT_ASSOCIATIONS


class TestParseAssociations:
    def test_parse(self) -> None:
        assert parse_associations(["*.py=python", "lib/**/*.pyi=python"]) == {
            "*.py": "python",
            "lib/**/*.pyi": "python",
        }

    @pytest.mark.parametrize("value", ["*.py", "=python", "*.py="])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ConfigError):
            parse_associations([value])
