"""Configuration and logging setup for Stake Tracker."""
import os
import sys
import platform
from pathlib import Path
from typing import Optional, Dict, Any
import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

APP_NAME = "stake-tracker"
CONFIG_FILE = "config.yaml"

# Environment overrides, applied on top of the config file
ENV_OVERRIDES = {
    "STAKE_TRACKER_CURRENCY": "currency",
    "STAKE_TRACKER_DATA_DIR": "data_dir",
    "STAKE_TRACKER_API_KEY": "api_key",
    "STAKE_TRACKER_LOG_LEVEL": "log_level",
}

def get_config_dir() -> Path:
    """Get platform-specific config directory."""
    if os.name == 'nt':  # Windows
        return Path(os.getenv('APPDATA', Path.home())) / APP_NAME
    elif platform.system() == 'Darwin':  # macOS
        return Path.home() / 'Library' / 'Application Support' / APP_NAME
    else:  # Linux and others
        return Path.home() / '.config' / APP_NAME

class TrackerConfig(BaseModel):
    """Stake Tracker configuration."""
    currency: str = "eur"
    api_base_url: str = "https://api.coingecko.com/api/v3"
    api_key: Optional[str] = None
    request_timeout: float = 10.0
    data_dir: Path = Field(default_factory=get_config_dir)
    log_level: str = "INFO"

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("currency must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        value = value.strip().upper()
        try:
            logger.level(value)
        except ValueError:
            raise ValueError(f"unknown log level {value!r}") from None
        return value

    @property
    def store_path(self) -> Path:
        """Path of the JSON file holding the stake list."""
        return Path(self.data_dir) / "stakes.json"

def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read the YAML config file, returning an empty mapping on any problem."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to read config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"Ignoring config file {path}: expected a mapping, got {type(data).__name__}")
        return {}
    return data

def load_config(config_dir: Optional[Path] = None, **overrides: Any) -> TrackerConfig:
    """Build the effective configuration.

    Precedence, lowest first: defaults, config.yaml, environment variables,
    explicit overrides (CLI options). Overrides set to None are ignored.

    Args:
        config_dir: Directory holding config.yaml (defaults to the platform config dir)
        **overrides: Field values taking precedence over everything else

    Returns:
        Validated configuration
    """
    config_dir = config_dir or get_config_dir()
    values = _read_config_file(config_dir / CONFIG_FILE)

    for env_name, field in ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value:
            values[field] = env_value

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return TrackerConfig(**values)
    except ValidationError as e:
        invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
        logger.error(f"Invalid configuration, using defaults for {', '.join(sorted(map(str, invalid)))}: {e}")

    valid = {k: v for k, v in values.items() if k not in invalid}
    try:
        return TrackerConfig(**valid)
    except ValidationError as e:
        logger.error(f"Invalid configuration, using defaults: {e}")
        return TrackerConfig()

def configure_logging(level: str = "INFO") -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
