"""Unit tests for /src/core/config.py"""

from pathlib import Path

import pytest

from src.core.config import Config, load_config


def test_defaults() -> None:
    config = Config()
    assert config.search.depth == 3
    assert config.search.thinking_delay_s == 0.8
    assert config.eval.king_value == 30.0
    assert config.heuristic.danger_penalty == 10.0
    assert config.replay.interval_s == 1.5
    assert config.log_level == "INFO"


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert Config.load_from_toml(str(tmp_path / "nope.toml")) == Config()


def test_load_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
log_level = "DEBUG"

[search]
depth = 5
time_limit_s = 2.0

[eval]
king_value = 40.0
unknown_weight = 1.0

[unknown_section]
foo = 1
"""
    )
    config = Config.load_from_toml(str(path))

    assert config.search.depth == 5
    assert config.search.time_limit_s == 2.0
    assert config.search.thinking_delay_s == 0.8
    assert config.eval.king_value == 40.0
    assert not hasattr(config.eval, "unknown_weight")
    assert config.log_level == "DEBUG"


def test_sections_are_not_shared() -> None:
    first, second = Config(), Config()
    first.search.depth = 1
    assert second.search.depth == 3


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "custom.toml"
    path.write_text("[replay]\ninterval_s = 0.5\n")
    monkeypatch.setenv("DRAUGHTS_CONFIG_TOML", str(path))
    monkeypatch.setenv("DRAUGHTS_SEARCH_DEPTH", "6")

    config = load_config()
    assert config.replay.interval_s == 0.5
    assert config.search.depth == 6
