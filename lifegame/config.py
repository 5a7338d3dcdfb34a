"""Settings: defaults, overridden by a JSON config file, overridden by env vars.

Environment (a ``.env`` in the working directory is loaded first):

  LIFEGAME_DATA_DIR                 storage base directory      (./data)
  LIFEGAME_RECENT_THRESHOLD_MS      end of "recent"             (2 days)
  LIFEGAME_LONG_GAP_THRESHOLD_MS    start of "long_gap"         (7 days)
  LIFEGAME_MAX_CHOICES              quests shown at once        (3)
  LIFEGAME_COMPLETION_COOLDOWN_MS   per-quest completion window (1 day)
  LIFEGAME_QUESTS_FILE              quest definitions           (bundled presets)
  LIFEGAME_LOG_LEVEL                logging level               (WARNING)
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from lifegame.catalog import DEFAULT_QUESTS_FILE
from lifegame.transitions import DAY_MS, TimeThresholds

ENV_PREFIX = "LIFEGAME_"

_FIELDS = (
    "data_dir",
    "recent_threshold_ms",
    "long_gap_threshold_ms",
    "max_choices",
    "completion_cooldown_ms",
    "quests_file",
    "log_level",
)


class Settings(BaseModel):
    data_dir: Path = Path("data")
    recent_threshold_ms: int = Field(default=2 * DAY_MS, gt=0)
    long_gap_threshold_ms: int = Field(default=7 * DAY_MS, gt=0)
    max_choices: int = Field(default=3, ge=1)
    completion_cooldown_ms: int = Field(default=DAY_MS, ge=0)
    quests_file: Path = DEFAULT_QUESTS_FILE
    log_level: str = "WARNING"

    @model_validator(mode="after")
    def _check_thresholds(self) -> Settings:
        if self.long_gap_threshold_ms <= self.recent_threshold_ms:
            raise ValueError("long_gap_threshold_ms must be greater than recent_threshold_ms")
        return self

    def thresholds(self) -> TimeThresholds:
        return TimeThresholds(self.recent_threshold_ms, self.long_gap_threshold_ms)


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in _FIELDS:
        value = os.getenv(ENV_PREFIX + name.upper())
        if value:
            overrides[name] = value
    return overrides


def load_settings(env_file: Path | None = None, config_file: Path | None = None) -> Settings:
    """Build settings from defaults, an optional JSON file and the environment."""
    load_dotenv(env_file)

    values: dict[str, Any] = {}
    if config_file is not None and config_file.is_file():
        stored = json.loads(config_file.read_text())
        values.update({k: v for k, v in stored.items() if k in _FIELDS})
    values.update(_env_overrides())
    return Settings.model_validate(values)
