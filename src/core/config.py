"""
Tunable numbers of the engine: search settings, evaluation weights, replay pacing.

Defaults can be overridden with a TOML file, ex.

    [search]
    depth = 4
    time_limit_s = 2.0

    [eval]
    king_value = 40
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from typing import Any, Optional


@dataclass
class SearchConfig:
    depth: int = 3
    thinking_delay_s: float = 0.8
    time_limit_s: Optional[float] = 5.0  # None means depth-only
    easy_capture_miss_rate: float = 0.4
    medium_top_fraction: float = 0.3


@dataclass
class EvalConfig:
    """Weights of the leaf evaluation used by the lookahead search."""

    man_value: float = 10.0
    king_value: float = 30.0
    advancement_weight: float = 2.0
    center_weight: float = 0.5
    edge_penalty: float = 2.0
    mobility_weight: float = 0.5
    capture_bonus: float = 15.0
    win_score: float = 10000.0


@dataclass
class HeuristicConfig:
    """Weights of the single move scoring used by the medium difficulty."""

    advancement_weight: float = 2.0
    edge_penalty: float = 3.0
    danger_penalty: float = 10.0
    protection_bonus: float = 5.0
    protection_distance: int = 2


@dataclass
class ReplayConfig:
    interval_s: float = 1.5


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    heuristic: HeuristicConfig = field(default_factory=HeuristicConfig)
    replay: ReplayConfig = field(default_factory=ReplayConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        return cfg.merged(raw)

    def merged(self, raw: dict[str, Any]) -> "Config":
        """Copy known keys of the (parsed) TOML tables onto the matching sections. Unknown keys are ignored."""
        for section in fields(self):
            table = raw.get(section.name)
            target = getattr(self, section.name)
            if isinstance(table, dict):
                for key, value in table.items():
                    if hasattr(target, key):
                        setattr(target, key, value)
        if "log_level" in raw:
            self.log_level = str(raw["log_level"])
        return self


def load_config() -> Config:
    """Config from the file named in DRAUGHTS_CONFIG_TOML, with an optional depth override for quick debugging."""
    cfg = Config.load_from_toml(os.environ.get("DRAUGHTS_CONFIG_TOML", "config.toml"))
    override_depth = os.environ.get("DRAUGHTS_SEARCH_DEPTH")
    if override_depth:
        cfg.search.depth = int(override_depth)
    return cfg


# single globally importable config instance
CONFIG = load_config()
