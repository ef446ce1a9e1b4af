"""Value types shared by the registry, its events and their executions."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Callable, Optional

from ..config import ConfigError, OptionsError, safe_load_dataclass

logger = logging.getLogger(__name__)


def _noop() -> None:
    pass


class ExecutionState(Enum):
    """Lifecycle states of a single execution."""
    ARMED = "armed"
    IDLE = "idle"
    RUNNING = "running"
    REMOVED = "removed"


@dataclass
class Expiration:
    """Remove an execution that is not triggered within timeout_ms."""
    timeout_ms: float
    on_expire: Callable[[], Any] = _noop

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass
class SubscriptionOptions:
    """Lifecycle configuration for one subscription."""
    remove_after_execute: bool = False
    expire_after: Optional[Expiration] = None
    only_one_instance: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict], strict: bool = False) -> 'SubscriptionOptions':
        """Build options from a plain dictionary.

        Malformed fields fall back to their defaults with a warning. With
        strict set, they raise OptionsError instead.

        Args:
            data: Mapping with any of remove_after_execute, expire_after,
                only_one_instance
            strict: Reject malformed input instead of tolerating it

        Returns:
            SubscriptionOptions instance

        Raises:
            OptionsError: If strict is set and data is malformed
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            _reject(strict, "Subscription options must be a dict, got %s", type(data).__name__)
            return cls()

        try:
            options = safe_load_dataclass(cls, data, 'options', strict=strict)
        except ConfigError as e:
            raise OptionsError(str(e)) from e

        return options.normalized(strict=strict)

    def normalized(self, strict: bool = False) -> 'SubscriptionOptions':
        """Return a copy with invalid values replaced by defaults."""
        remove_after_execute = _as_flag(self.remove_after_execute, 'remove_after_execute', strict)
        only_one_instance = _as_flag(self.only_one_instance, 'only_one_instance', strict)
        expire_after = _as_expiration(self.expire_after, strict)
        return SubscriptionOptions(
            remove_after_execute=remove_after_execute,
            expire_after=expire_after,
            only_one_instance=only_one_instance,
        )


@dataclass
class SubscriptionHandle:
    """Returned by subscribe; lets the caller cancel the subscription."""
    event_name: str
    execution_id: int
    _remove: Callable[[], None] = field(default=_noop, repr=False, compare=False)

    def remove(self) -> None:
        """Cancel the subscription. Calling it again is a no-op."""
        self._remove()


# --- HELPER FUNCTIONS ---

def _reject(strict: bool, msg: str, *args) -> None:
    if strict:
        raise OptionsError(msg % args)
    logger.warning("Options warning: " + msg, *args)


def _as_flag(value: Any, name: str, strict: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    _reject(strict, "'%s' must be a bool, got %r; using False.", name, value)
    return False


def _as_expiration(value: Any, strict: bool) -> Optional[Expiration]:
    if value is None:
        return None

    if isinstance(value, dict):
        try:
            value = safe_load_dataclass(Expiration, value, 'expire_after', strict=strict)
        except ConfigError as e:
            raise OptionsError(str(e)) from e
        except TypeError:
            _reject(strict, "'expire_after' requires 'timeout_ms'; expiration disabled.")
            return None
    elif not isinstance(value, Expiration):
        _reject(strict, "'expire_after' must be an Expiration or dict, got %r.", value)
        return None

    timeout = value.timeout_ms
    if isinstance(timeout, bool) or not isinstance(timeout, Real) or timeout <= 0:
        _reject(strict, "'timeout_ms' must be a positive number, got %r; expiration disabled.",
                timeout)
        return None

    on_expire = value.on_expire
    if on_expire is None:
        on_expire = _noop
    elif not callable(on_expire):
        _reject(strict, "'on_expire' must be callable, got %r; ignoring it.", on_expire)
        on_expire = _noop

    return Expiration(timeout_ms=float(timeout), on_expire=on_expire)
