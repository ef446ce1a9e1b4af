"""In-process named-event dispatch with per-subscription lifecycle control."""

from .config import AppConfig, ConfigError, EventRegistryError, OptionsError
from .core import (
    EventRegistry,
    ExecutionState,
    Expiration,
    SubscriptionHandle,
    SubscriptionOptions,
)

__version__ = "0.1.0"

__all__ = [
    'AppConfig',
    'ConfigError',
    'EventRegistryError',
    'OptionsError',
    'EventRegistry',
    'ExecutionState',
    'Expiration',
    'SubscriptionHandle',
    'SubscriptionOptions',
]
