"""Configuration models for the event registry."""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "EVENT_REGISTRY_CONFIG"
LOG_LEVEL_ENV = "EVENT_REGISTRY_LOG_LEVEL"


# --- CUSTOM EXCEPTIONS ---

class EventRegistryError(Exception):
    """Base exception for event registry errors."""


class ConfigError(EventRegistryError):
    """Configuration loading error."""


class OptionsError(ConfigError):
    """Malformed subscription options (raised only in strict mode)."""


# --- CONFIGURATION DATACLASSES ---

@dataclass
class RegistryConfig:
    """Configuration for a registry instance."""
    name: Optional[str] = None
    strict_options: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""
    level: str = "INFO"
    log_dir: str = "logs"
    write_to_file: bool = True
    show_in_console: bool = True


# --- HELPER FUNCTIONS ---

def safe_load_dataclass(dclass_type, data: dict, section_name: str, strict: bool = False):
    """Safely load a dataclass from a dictionary.

    Ignores unknown keys and logs warnings for them.

    Args:
        dclass_type: Dataclass type to instantiate
        data: Dictionary with configuration data
        section_name: Name of config section (for logging)
        strict: Raise ConfigError on unknown keys instead of ignoring them

    Returns:
        Instance of dclass_type with filtered data

    Raises:
        ConfigError: If strict is set and an unknown key is present
    """
    valid_keys = {f.name for f in fields(dclass_type)}
    filtered_data = {}

    for k, v in (data or {}).items():
        if k in valid_keys:
            filtered_data[k] = v
        elif strict:
            raise ConfigError(f"Unknown key '{k}' in section '{section_name}'.")
        else:
            logger.warning(
                "Config warning: Unknown key '%s' in section '%s' ignored.",
                k, section_name
            )

    return dclass_type(**filtered_data)


@dataclass
class AppConfig:
    """Main application configuration container."""
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Path | str) -> 'AppConfig':
        """Load application configuration from a YAML file.

        Args:
            config_path: Path to config.yaml file

        Returns:
            AppConfig instance with loaded configuration

        Raises:
            ConfigError: If file not found or YAML parsing fails
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Configuration file '{path}' not found.")

        try:
            with path.open('r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file '{path}' must contain a mapping.")

        return cls(
            registry=safe_load_dataclass(
                RegistryConfig, data.get('registry', {}), 'registry'
            ),
            logging=safe_load_dataclass(
                LoggingConfig, data.get('logging', {}), 'logging'
            ),
        )

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration as directed by the environment (and a .env file).

        EVENT_REGISTRY_CONFIG points to a YAML file; without it defaults are
        used. EVENT_REGISTRY_LOG_LEVEL overrides the logging level.
        """
        load_dotenv()

        config_path = os.getenv(CONFIG_PATH_ENV)
        config = cls.load(config_path) if config_path else cls()

        level = os.getenv(LOG_LEVEL_ENV)
        if level:
            config.logging.level = level

        return config
