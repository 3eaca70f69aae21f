"""
Configuration management using Pydantic.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import DisclosureLevel, WorkingHours


class DefaultsConfig(BaseModel):
    """Default settings for availability lookups."""
    duration_minutes: int = 30
    interval_minutes: int = 30
    range_days: int = 1
    start_hour: int = 9
    end_hour: int = 17
    disclosure_level: DisclosureLevel = DisclosureLevel.FULL

    @field_validator("duration_minutes", "interval_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations and intervals are positive."""
        if value <= 0:
            raise ValueError("duration_minutes and interval_minutes must be greater than zero")
        return value

    @field_validator("range_days")
    @classmethod
    def validate_range_days(cls, value: int) -> int:
        """Keep lookups between one day and a month."""
        if not 1 <= value <= 31:
            raise ValueError(f"range_days must be between 1 and 31, got {value}")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_start_time(self) -> time:
        """Get start time as time object."""
        return time(hour=self.start_hour, minute=0)

    def get_end_time(self) -> time:
        """Get end time as time object."""
        return time(hour=self.end_hour, minute=0)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Madrid"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    exclude_days: List[int] = Field(default_factory=lambda: [6])  # Sunday
    data_file: Optional[Path] = None

    @field_validator("exclude_days")
    @classmethod
    def validate_exclude_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"exclude_days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative data files are resolved against the config file location
        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file

        return config

    def build_working_hours(self) -> WorkingHours:
        """Create the working hours used to generate candidate slots."""
        return WorkingHours(
            start_time=self.defaults.get_start_time(),
            end_time=self.defaults.get_end_time(),
            exclude_weekdays=self.exclude_days,
            timezone=self.timezone,
        )


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
