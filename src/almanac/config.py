"""Configuration management for Almanac."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

ALMANAC_HOME = Path(os.environ.get("ALMANAC_HOME", Path.home() / "almanac"))
CONFIG_FILE = ALMANAC_HOME / "config" / "almanac.conf"
DATA_DIR = ALMANAC_HOME / "data"


@dataclass
class Config:
    """Almanac configuration."""

    work_hours: str = "09:00-17:00"
    search_horizon_days: int = 14
    slot_step_minutes: int = 30
    data_file: str = ""
    user_id: int | None = None
    # Empty means naive local times
    timezone: str = ""

    def working_hours(self) -> tuple[int, int]:
        return parse_work_hours(self.work_hours)

    def activity_file(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "activities.json"

    def now(self) -> datetime:
        """Current time in the configured timezone."""
        if not self.timezone:
            return datetime.now()
        try:
            return datetime.now(ZoneInfo(self.timezone))
        except ZoneInfoNotFoundError:
            logger.warning(f"Unknown timezone '{self.timezone}', using local time")
            return datetime.now()


def parse_work_hours(value: str) -> tuple[int, int]:
    """Parse "09:00-17:00" into (9, 17). Minutes are ignored."""
    try:
        start_str, end_str = value.split("-")
        start = int(start_str.split(":")[0])
        end = int(end_str.split(":")[0])
    except ValueError as e:
        raise ValueError(f"Invalid work hours '{value}', expected HH:MM-HH:MM") from e

    if not 0 <= start < end <= 24:
        raise ValueError(f"Invalid work hours '{value}', start must be before end")
    return start, end


def _parse_int(key: str, value: str, default: int | None) -> int | None:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: '{value}'")
        return default


def load_config() -> Config:
    """Load configuration from almanac.conf file."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "work_hours":
                config.work_hours = value
            case "search_horizon_days":
                config.search_horizon_days = _parse_int(key, value, config.search_horizon_days)
            case "slot_step_minutes":
                config.slot_step_minutes = _parse_int(key, value, config.slot_step_minutes)
            case "data_file":
                config.data_file = value
            case "user_id":
                config.user_id = _parse_int(key, value, None) if value else None
            case "timezone":
                config.timezone = value

    return config
