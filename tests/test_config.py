"""Tests for configuration loading and discovery."""

from pathlib import Path

import pytest

from closeplan.config import CONFIG_FILENAME, discover_config, load_config
from closeplan.scheduling import DependencyPolicy


def test_load_config(tmp_path: Path) -> None:
    """Scheduling and display sections are read."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text(
        """
scheduling:
  missing_dependencies: error
display:
  warning_days: 5
""",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.scheduling.missing_dependencies == DependencyPolicy.ERROR
    assert config.display.warning_days == 5
    assert config.display.month_names[0] == "January"


def test_empty_config_gives_defaults(tmp_path: Path) -> None:
    """An empty file means all defaults."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text("", encoding="utf-8")

    config = load_config(path)

    assert config.scheduling.missing_dependencies == DependencyPolicy.SKIP
    assert config.display.warning_days == 3


def test_missing_config_file(tmp_path: Path) -> None:
    """An explicit path must exist."""
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_month_names(tmp_path: Path) -> None:
    """Month names must cover all twelve months."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text("display:\n  month_names: [Jan, Feb]\n", encoding="utf-8")

    with pytest.raises(ValueError, match="12 names"):
        load_config(path)


def test_invalid_policy(tmp_path: Path) -> None:
    """Unknown policies are rejected."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text("scheduling:\n  missing_dependencies: ignore\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


class TestDiscoverConfig:
    """Test the config search order."""

    def test_next_to_workspace(self, tmp_path: Path) -> None:
        """A config beside the workspace file is found."""
        (tmp_path / CONFIG_FILENAME).write_text("display:\n  warning_days: 7\n", encoding="utf-8")

        config = discover_config(tmp_path / "workspace.yaml")

        assert config.display.warning_days == 7

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        """An explicit config path takes precedence over discovery."""
        (tmp_path / CONFIG_FILENAME).write_text("display:\n  warning_days: 7\n", encoding="utf-8")
        explicit = tmp_path / "other.yaml"
        explicit.write_text("display:\n  warning_days: 1\n", encoding="utf-8")
        config = discover_config(tmp_path / "workspace.yaml", explicit)

        assert config.display.warning_days == 1

    def test_defaults_when_nothing_found(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without any file, defaults are used."""
        monkeypatch.chdir(tmp_path)

        config = discover_config(tmp_path / "sub" / "workspace.yaml")

        assert config.display.warning_days == 3


def test_malformed_yaml(tmp_path: Path) -> None:
    """YAML syntax errors surface as ValueError."""
    path = tmp_path / CONFIG_FILENAME
    path.write_text("scheduling: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Failed to parse config file"):
        load_config(path)
