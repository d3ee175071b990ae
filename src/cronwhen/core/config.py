"""Configuration management for cron-when.

This module provides configuration models and loading functionality using Pydantic
for validation and type safety.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from ..scheduler.expressions import Pattern

_DOTENV_LOADED = False

FIELD_NAMES = ("second", "minute", "hour", "day", "month", "weekday")

# A single number, a list of numbers, {every}, {from, to}, {from, to, every}
# or a month/weekday name.
FieldInput = Union[int, list[int], dict[str, int], str]


def _load_env_once() -> None:
    """Load environment variables from a .env file exactly once."""

    global _DOTENV_LOADED
    if not _DOTENV_LOADED:
        load_dotenv()
        _DOTENV_LOADED = True


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in configuration data."""

    if isinstance(data, str):
        return os.path.expandvars(data)
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    log_file: str | None = Field(default=None, description="Log file path")
    max_bytes: int = Field(default=10485760, description="Max log file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


class EngineConfig(BaseModel):
    """Configuration for the tick engine."""

    tick_interval: float = Field(default=1.0, gt=0, description="Seconds between ticks")
    max_workers: int = Field(default=10, ge=1, description="Maximum thread pool workers")
    misfire_grace_time: int = Field(
        default=1, ge=1, description="Seconds a late tick may still run before it is dropped"
    )
    timezone: str = Field(default="UTC", description="Timezone of the underlying job scheduler")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        from ..scheduler.clock import validate_timezone

        return validate_timezone(value)


class ScheduleConfig(BaseModel):
    """A named schedule, given either field by field or as a full pattern string."""

    name: str = Field(..., description="Schedule name")
    second: FieldInput | None = Field(default=None, description="Second field input")
    minute: FieldInput | None = Field(default=None, description="Minute field input")
    hour: FieldInput | None = Field(default=None, description="Hour field input")
    day: FieldInput | None = Field(default=None, description="Day-of-month field input")
    month: FieldInput | None = Field(default=None, description="Month field input")
    weekday: FieldInput | None = Field(default=None, description="Weekday field input")
    cron: str | None = Field(
        default=None, description='Full pattern string, e.g. "0 */5 * * * * [UTC]"'
    )
    timezone: str = Field(default="UTC", description="IANA timezone identifier")
    enabled: bool = Field(default=True, description="Whether the schedule is registered")
    message: str | None = Field(default=None, description="Message logged when it fires")

    @model_validator(mode="after")
    def _validate_pattern(self) -> ScheduleConfig:
        if self.cron is not None and any(v is not None for v in self.field_inputs().values()):
            raise ValueError("Give either 'cron' or per-field inputs, not both")
        # Building the pattern runs every domain check eagerly.
        self.to_pattern()
        return self

    def field_inputs(self) -> dict[str, FieldInput | None]:
        return {name: getattr(self, name) for name in FIELD_NAMES}

    def to_pattern(self) -> Pattern:
        from ..scheduler.expressions import Pattern

        return Pattern.from_config(self)


class CronWhenConfig(BaseSettings):
    """Root configuration: logging, engine settings and schedules."""

    model_config = SettingsConfigDict(
        env_prefix="CRONWHEN_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    schedules: list[ScheduleConfig] = Field(default_factory=list)

    @field_validator("schedules")
    @classmethod
    def validate_unique_names(cls, value: list[ScheduleConfig]) -> list[ScheduleConfig]:
        names = [schedule.name for schedule in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate schedule names: {', '.join(duplicates)}")
        return value

    @classmethod
    def from_yaml(cls, path: str | Path) -> CronWhenConfig:
        """Load configuration from a YAML file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as handle:
            try:
                config_data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in config file: {exc}") from exc

        if not config_data:
            config_data = {}

        config_data = _expand_env_vars(config_data)
        return cls(**config_data)

    @classmethod
    def from_json(cls, path: str | Path) -> CronWhenConfig:
        """Load configuration from a JSON file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as handle:
            try:
                config_data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in config file: {exc}") from exc

        config_data = _expand_env_vars(config_data)
        return cls(**config_data)

    @classmethod
    def load(cls, path: str | Path) -> CronWhenConfig:
        """Load a YAML or JSON file, chosen by extension."""

        if Path(path).suffix.lower() == ".json":
            return cls.from_json(path)
        return cls.from_yaml(path)

    def get_schedule(self, name: str) -> ScheduleConfig | None:
        for schedule in self.schedules:
            if schedule.name == name:
                return schedule
        return None

    def enabled_schedules(self) -> list[ScheduleConfig]:
        return [schedule for schedule in self.schedules if schedule.enabled]


__all__ = [
    "CronWhenConfig",
    "EngineConfig",
    "FieldInput",
    "LoggingConfig",
    "ScheduleConfig",
]
