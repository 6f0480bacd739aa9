"""
Configuration Management for EcoRating

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables
- Command line arguments

Configuration precedence (highest to lowest):
1. Command line arguments
2. Environment variables (ECORATING_*)
3. Configuration file
4. Default values
"""

import json
import logging
import logging.handlers
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class ProbabilityConfig:
    """Configuration for the win-probability tables."""

    # JSON file of collected observations; tables are rebuilt from it when set
    tables_file: str | None = None

    # Observation floors below which a table entry is ignored
    min_state_samples: int = 10
    min_duel_samples: int = 10
    min_map_samples: int = 20


@dataclass
class AttributionConfig:
    """Configuration for splitting swing between players."""

    killer_base_credit: float = 0.60
    damage_share_credit: float = 0.25
    flash_assist_max_credit: float = 0.15
    # Flash duration that earns the full flash credit
    flash_full_credit_seconds: float = 3.0
    # Trade kills keep (1 - penalty) of the killer credit
    trade_kill_penalty: float = 0.30
    plant_credit_share: float = 0.60
    defuse_credit_share: float = 0.80
    max_plant_swing: float = 0.15
    # Hollow save: survivors of a lost round
    save_penalty: float = 0.02


@dataclass
class RatingConfig:
    """Configuration for the composite rating."""

    kill_weight: float = 0.20
    damage_weight: float = 0.15
    survival_weight: float = 0.10
    kast_weight: float = 0.15
    multi_kill_weight: float = 0.15
    swing_weight: float = 0.25

    min_rating: float = 0.20
    max_rating: float = 3.00

    # Subtracted per attempt when a player attempted clutches and won none
    clutch_loss_penalty: float = 0.02


@dataclass
class BatchConfig:
    """Configuration for multi-match scoring."""

    workers: int = 0  # 0 = CPU count - 1
    use_processes: bool = False


@dataclass
class ExportConfig:
    """Configuration for result export."""

    json_indent: int = 2
    include_round_breakdowns: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class EcoRatingConfig:
    """Main configuration container."""

    probability: ProbabilityConfig = field(default_factory=ProbabilityConfig)
    attribution: AttributionConfig = field(default_factory=AttributionConfig)
    rating: RatingConfig = field(default_factory=RatingConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


_SECTIONS = ("probability", "attribution", "rating", "batch", "export", "logging")


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "ecorating.yaml")
    paths.append(Path.cwd() / "ecorating.toml")
    paths.append(Path.cwd() / "ecorating.json")
    paths.append(Path.cwd() / ".ecorating.yaml")

    # User home directory
    home = Path.home()
    paths.append(home / ".config" / "ecorating" / "config.yaml")
    paths.append(home / ".config" / "ecorating" / "config.toml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "ecorating" / "config.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    try:
        import yaml

        with open(path) as f:
            return yaml.safe_load(f) or {}
    except ImportError:
        logger.warning("PyYAML not installed, cannot load YAML config")
        return {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


def _convert_env_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        "ECORATING_LOG_LEVEL": ("logging", "level"),
        "ECORATING_LOG_FILE": ("logging", "file"),
        "ECORATING_TABLES_FILE": ("probability", "tables_file"),
        "ECORATING_MIN_STATE_SAMPLES": ("probability", "min_state_samples"),
        "ECORATING_MIN_DUEL_SAMPLES": ("probability", "min_duel_samples"),
        "ECORATING_MIN_MAP_SAMPLES": ("probability", "min_map_samples"),
        "ECORATING_SAVE_PENALTY": ("attribution", "save_penalty"),
        "ECORATING_TRADE_KILL_PENALTY": ("attribution", "trade_kill_penalty"),
        "ECORATING_CLUTCH_LOSS_PENALTY": ("rating", "clutch_loss_penalty"),
        "ECORATING_WORKERS": ("batch", "workers"),
        "ECORATING_USE_PROCESSES": ("batch", "use_processes"),
        "ECORATING_JSON_INDENT": ("export", "json_indent"),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            config.setdefault(section, {})[key] = _convert_env_value(value)

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> EcoRatingConfig:
    """Convert a dictionary to EcoRatingConfig, ignoring unknown keys."""
    config = EcoRatingConfig()

    for section in _SECTIONS:
        values = data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section}.{key}")

    if "config_version" in data:
        config.config_version = str(data["config_version"])

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> EcoRatingConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged EcoRatingConfig
    """
    config_data: dict[str, Any] = {}

    # Try to find and load a config file
    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    # Merge environment variables
    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def save_config(config: EcoRatingConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (format detected from extension)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        import yaml

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


def config_to_dict(config: EcoRatingConfig) -> dict[str, Any]:
    """Convert EcoRatingConfig to a dictionary."""
    return asdict(config)


# ============================================================================
# Logging Setup
# ============================================================================


def setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger from a LoggingConfig."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(config.level).upper(), logging.INFO))

    formatter = logging.Formatter(config.format)
    if not root.handlers:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    if config.file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.file,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: EcoRatingConfig | None = None


def get_config() -> EcoRatingConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: EcoRatingConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# EcoRating Configuration

# Win-probability tables
probability:
  # tables_file: /path/to/collected_observations.json
  min_state_samples: 10
  min_duel_samples: 10
  min_map_samples: 20

# Swing attribution between killer, damage assisters and flash assisters
attribution:
  killer_base_credit: 0.60
  damage_share_credit: 0.25
  flash_assist_max_credit: 0.15
  trade_kill_penalty: 0.30
  plant_credit_share: 0.60
  defuse_credit_share: 0.80
  max_plant_swing: 0.15
  save_penalty: 0.02

# Composite rating (weights must sum to 1.0)
rating:
  kill_weight: 0.20
  damage_weight: 0.15
  survival_weight: 0.10
  kast_weight: 0.15
  multi_kill_weight: 0.15
  swing_weight: 0.25
  min_rating: 0.20
  max_rating: 3.00
  clutch_loss_penalty: 0.02

# Multi-match scoring
batch:
  workers: 0  # 0 = CPU count - 1
  use_processes: false

# Export settings
export:
  json_indent: 2
  include_round_breakdowns: true

# Logging settings
logging:
  level: INFO
  # file: /path/to/ecorating.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        config = EcoRatingConfig()
        save_config(config, path)

    logger.info(f"Generated default config at: {path}")
