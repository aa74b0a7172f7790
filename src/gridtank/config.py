from __future__ import annotations

import os
import pathlib
from typing import Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .geometry import Action

DEFAULT_PORT = 8080
PORT_ENV = "PORT"
LOG_LEVEL_ENV = "GRIDTANK_LOG_LEVEL"

# (most recent, second most recent) at process start.
DEFAULT_HISTORY_SEED: Tuple[Action, Action] = (Action.TURN_LEFT, Action.MOVE_FORWARD)
# Distinct self hrefs whose move history is kept in memory.
DEFAULT_MAX_HISTORIES = 256


class Policy(BaseModel):
    """Tunable choices for the per-turn decision."""

    model_config = ConfigDict(extra="forbid")

    rotate: Action = Field(Action.TURN_LEFT, description="Turn used at walls and when evading")
    move_margin: int = Field(0, ge=0, le=1, description="Cells from the edge that count as the wall")
    boundary_mode: Literal["fixed", "refined"] = "fixed"
    threat_gate: Literal["always", "when_hit"] = "always"
    check_destination: bool = True
    threat_range: int = Field(3, ge=1)
    fire_range: int = Field(3, ge=1)
    history_seed: Tuple[Action, Action] = DEFAULT_HISTORY_SEED
    max_histories: int = Field(DEFAULT_MAX_HISTORIES, ge=1)

    @field_validator("rotate")
    @classmethod
    def _rotate_is_turn(cls, value: Action) -> Action:
        if not value.is_turn:
            raise ValueError("rotate must be L or R")
        return value


class BotConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "0.0.0.0"
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    log_level: str = "INFO"
    policy: Policy = Field(default_factory=Policy)

    @classmethod
    def load(cls, path: Optional[str | pathlib.Path] = None) -> "BotConfig":
        """
        Read an optional YAML config, then apply environment overrides.

        PORT selects the listening port; an unset or empty value keeps the file/default port.
        """
        data: dict = {}
        if path is not None:
            cfg_path = pathlib.Path(path).expanduser()
            with cfg_path.open("r", encoding="utf-8") as fh:
                try:
                    data = yaml.safe_load(fh) or {}
                except yaml.YAMLError as exc:
                    raise ValueError(f"Config {cfg_path} is not valid YAML: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError(f"Config {cfg_path} must be a mapping")
        port = os.environ.get(PORT_ENV)
        if port:
            data["port"] = port
        level = os.environ.get(LOG_LEVEL_ENV)
        if level:
            data["log_level"] = level
        return cls(**data)
