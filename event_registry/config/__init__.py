"""Configuration package for the event registry."""

from .models import (
    AppConfig,
    RegistryConfig,
    LoggingConfig,
    EventRegistryError,
    ConfigError,
    OptionsError,
    safe_load_dataclass,
)

__all__ = [
    'AppConfig',
    'RegistryConfig',
    'LoggingConfig',
    'EventRegistryError',
    'ConfigError',
    'OptionsError',
    'safe_load_dataclass',
]
