"""Configuration loading for the graph engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class GraphConfig(BaseModel):
    node_radius: float = 30.0
    default_edge_weight: int = 0


class HistoryConfig(BaseModel):
    debounce_ms: float = 300.0  # drag bursts closer than this share one undo entry


class PlaybackConfig(BaseModel):
    speed_ms: float = 400.0
    # multiplier label -> delay between fires
    speed_levels: dict[str, float] = Field(default_factory=lambda: {
        "0.5x": 800.0, "1x": 400.0, "2x": 200.0, "4x": 100.0,
    })

    def speed_for(self, level: str) -> float:
        if level not in self.speed_levels:
            raise ValueError(f"Unknown speed level: {level}")
        return self.speed_levels[level]


class Config(BaseModel):
    graph: GraphConfig = Field(default_factory=GraphConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)


def _project_root() -> Path:
    """Return the graphtrace project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
