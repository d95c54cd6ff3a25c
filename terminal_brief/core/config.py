"""
Configuration management for terminal-brief.
Handles loading and saving the dashboard settings.

The configuration is a tree of frozen dataclasses. Every field has a default,
and a value read from disk that has the wrong type (or is not one of the
allowed choices) is replaced by that default instead of failing the run.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
CONFIG_DIR_ENV = "TERMINAL_BRIEF_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "terminal-brief"

WEATHER_UNITS = ("metric", "imperial")
COLOR_THEMES = ("default", "light", "dark", "pastel")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
MODULE_NAMES = ("system", "greeting", "weather", "github", "linear_stalled")


@dataclass(frozen=True)
class UserConfig:
    """Who the dashboard greets."""
    user_name: str = ""


@dataclass(frozen=True)
class WeatherConfig:
    """Location and display toggles for the weather module."""
    city: str = "New York"
    country: str = "US"
    units: str = "imperial"
    show_humidity: bool = True
    show_wind: bool = False


@dataclass(frozen=True)
class GitHubConfig:
    """Credentials and query toggles for the GitHub module."""
    personal_token: Optional[str] = None
    username: Optional[str] = None
    show_assigned_prs: bool = True
    show_created_prs: bool = False
    show_mentions: bool = False
    max_prs: int = 5
    api_url: str = "https://api.github.com"


@dataclass(frozen=True)
class LinearConfig:
    """Credentials and team selection for the stalled-issue module."""
    api_key: Optional[str] = None
    team_names: Tuple[str, ...] = ("Application", "Security", "Dev Ops")
    days_stalled: int = 3
    base_url: str = "https://linear.app/"
    api_url: str = "https://api.linear.app/graphql"
    states: Tuple[str, ...] = ("In Progress", "In Review")


@dataclass(frozen=True)
class SystemConfig:
    """Which system metrics to show."""
    show_load: bool = True
    show_memory: bool = True
    show_disk: bool = False
    show_battery: bool = True
    show_uptime: bool = True


@dataclass(frozen=True)
class CacheConfig:
    """Maximum age, in seconds, of each category of cached API data."""
    weather_duration: int = 3600
    github_duration: int = 300
    linear_duration: int = 7200
    location_duration: int = 86400


@dataclass(frozen=True)
class PerformanceConfig:
    """Execution policy for the module orchestrator."""
    max_execution_time: float = 5.0
    parallel_execution: bool = False
    show_metrics: bool = False


@dataclass(frozen=True)
class DisplayConfig:
    """Presentation preferences."""
    use_emojis: bool = True
    color_theme: str = "default"
    log_level: str = "WARNING"


@dataclass(frozen=True)
class BriefConfig:
    """Complete configuration, loaded once per invocation."""
    user: UserConfig = field(default_factory=UserConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    linear: LinearConfig = field(default_factory=LinearConfig)
    system: SystemConfig = field(default_factory=SystemConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    enabled_modules: Tuple[str, ...] = MODULE_NAMES
    cache_dir: str = str(DEFAULT_CONFIG_DIR / "cache")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return json.loads(json.dumps(asdict(self)))

    def get_cache_dir(self) -> Path:
        """Get the cache directory with ~ expanded."""
        return Path(self.cache_dir).expanduser()


SECTIONS = {
    "user": UserConfig,
    "weather": WeatherConfig,
    "github": GitHubConfig,
    "linear": LinearConfig,
    "system": SystemConfig,
    "cache": CacheConfig,
    "performance": PerformanceConfig,
    "display": DisplayConfig,
}

# Fields restricted to a fixed set of values
CHOICES = {
    ("weather", "units"): WEATHER_UNITS,
    ("display", "color_theme"): COLOR_THEMES,
    ("display", "log_level"): LOG_LEVELS,
}


def _coerce(value: Any, default: Any,
            choices: Optional[Tuple[str, ...]] = None) -> Tuple[bool, Any]:
    """
    Check a persisted value against the type of its default.

    Args:
        value: Value read from the config file
        default: The field's default, which defines the expected type
        choices: Allowed values for enumerated fields

    Returns:
        Tuple of (accepted, coerced value)
    """
    if isinstance(default, bool):
        return isinstance(value, bool), value
    if isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 0
        return ok, value
    if isinstance(default, float):
        ok = (isinstance(value, (int, float)) and not isinstance(value, bool)
              and value >= 0)
        return ok, float(value) if ok else value
    if isinstance(default, tuple):
        ok = isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)
        return ok, tuple(value) if ok else value
    if default is None:
        # Optional credentials: a string or nothing
        if value is None or value == "":
            return True, None
        return isinstance(value, str), value
    if isinstance(default, str):
        if not isinstance(value, str):
            return False, value
        if choices is not None:
            normalized = value.upper() if choices is LOG_LEVELS else value.lower()
            return normalized in choices, normalized
        return True, value
    return False, value


def _section_from_dict(section: str, cls, raw: Any):
    """Build one section dataclass, falling back to defaults field by field."""
    defaults = cls()
    if raw is None:
        return defaults
    if not isinstance(raw, dict):
        logger.warning("Config section '%s' is not an object, using defaults", section)
        return defaults

    values = {}
    for f in fields(cls):
        if f.name not in raw:
            continue
        default = getattr(defaults, f.name)
        ok, value = _coerce(raw[f.name], default, CHOICES.get((section, f.name)))
        if ok:
            values[f.name] = value
        else:
            logger.warning(
                "Invalid value for %s.%s: %r, using default %r",
                section, f.name, raw[f.name], default
            )
    return replace(defaults, **values)


def config_from_dict(raw: Any) -> BriefConfig:
    """
    Build a BriefConfig from parsed JSON.

    Unknown keys are ignored and invalid values fall back to their defaults.

    Args:
        raw: Parsed contents of the config file

    Returns:
        A fully populated BriefConfig
    """
    if not isinstance(raw, dict):
        logger.warning("Configuration is not a JSON object, using defaults")
        return BriefConfig()

    defaults = BriefConfig()
    values: Dict[str, Any] = {
        name: _section_from_dict(name, cls, raw.get(name))
        for name, cls in SECTIONS.items()
    }

    for key in ("enabled_modules", "cache_dir"):
        if key not in raw:
            continue
        default = getattr(defaults, key)
        ok, value = _coerce(raw[key], default)
        if ok:
            values[key] = value
        else:
            logger.warning("Invalid value for %s: %r, using default", key, raw[key])

    return replace(defaults, **values)


def _apply_environment(config: BriefConfig) -> BriefConfig:
    """Fill missing credentials from the environment."""
    github = config.github
    if not github.personal_token:
        token = os.environ.get("GITHUB_PERSONAL_TOKEN") or os.environ.get("GITHUB_TOKEN")
        if token:
            github = replace(github, personal_token=token)

    linear = config.linear
    if not linear.api_key and os.environ.get("LINEAR_API_KEY"):
        linear = replace(linear, api_key=os.environ["LINEAR_API_KEY"])

    return replace(config, github=github, linear=linear)


def resolve_config_dir(config_dir: Optional[Path] = None) -> Path:
    """Pick the config directory: explicit argument, environment, then default."""
    if config_dir is not None:
        return Path(config_dir).expanduser()
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return DEFAULT_CONFIG_DIR


def save_config(config: BriefConfig, config_dir: Optional[Path] = None) -> Path:
    """
    Save configuration to disk.

    Args:
        config: Configuration to persist
        config_dir: Directory holding config.json

    Returns:
        Path of the written file

    Raises:
        ConfigError: If the file cannot be written
    """
    config_file = resolve_config_dir(config_dir) / CONFIG_FILE_NAME
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
    except OSError as e:
        logger.error("Failed to save configuration to %s: %s", config_file, e)
        raise ConfigError(f"Could not write {config_file}: {e}") from e

    logger.debug("Saved configuration to %s", config_file)
    return config_file


def load_config(config_dir: Optional[Path] = None,
                apply_env: bool = True) -> BriefConfig:
    """
    Load configuration from config.json, creating it with defaults if missing.

    Args:
        config_dir: Directory holding config.json (see resolve_config_dir)
        apply_env: Fill missing credentials from environment variables

    Returns:
        Loaded configuration; defaults when the file is unreadable
    """
    config_file = resolve_config_dir(config_dir) / CONFIG_FILE_NAME

    if not config_file.exists():
        config = BriefConfig()
        try:
            save_config(config, config_dir)
            logger.info("Created default configuration at %s", config_file)
        except ConfigError:
            pass  # already logged, defaults still apply
    else:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s, using defaults: %s", config_file, e)
            raw = {}
        config = config_from_dict(raw)
        logger.debug("Loaded configuration from %s", config_file)

    if apply_env:
        config = _apply_environment(config)
    return config
