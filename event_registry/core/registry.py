"""Registry of named events for one in-process bus."""

import dataclasses
import functools
import logging
import random
import string
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from ..config import AppConfig, OptionsError
from .event import Event
from .execution import Execution
from .types import SubscriptionHandle, SubscriptionOptions

logger = logging.getLogger(__name__)

_NAME_ALPHABET = string.digits + string.ascii_lowercase

ErrorHook = Callable[[Exception, str, int], Any]
OptionsLike = Union[SubscriptionOptions, dict, None]


class EventRegistry:
    """Named-event bus with per-subscription lifecycle control.

    Components subscribe callbacks to string-named events and emit events
    with arbitrary arguments. Each subscription can be one-shot, expire if
    not triggered in time, refuse to run concurrently with itself, or be
    cancelled through the handle returned by subscribe.

    Emission is synchronous fan-out in registration order. Failing callbacks
    are isolated: they never reach the emitter or sibling subscribers, and
    are only observable through the optional error_hook.

    Example:
        >>> registry = EventRegistry('ui')
        >>> handle = registry.subscribe('progress', lambda pct: print(f"{pct}%"))
        >>> registry.emit('progress', 50)
        50%
        >>> handle.remove()
    """

    def __init__(
        self,
        name: Optional[str] = None,
        strict_options: bool = False,
        error_hook: Optional[ErrorHook] = None,
    ):
        """Initialize an empty registry.

        Args:
            name: Identifier for diagnostics (generated if omitted)
            strict_options: Raise OptionsError on malformed options
                instead of falling back to defaults
            error_hook: Called as error_hook(error, event_name, execution_id)
                for every error swallowed at a callback boundary
        """
        self.name = name or f"EventRegistry-{''.join(random.choices(_NAME_ALPHABET, k=6))}"
        self.strict_options = strict_options
        self.error_hook = error_hook
        self.events: Dict[str, Event] = {}
        self._next_event_id = 0
        self._execution_id_floor: Dict[str, int] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: AppConfig, error_hook: Optional[ErrorHook] = None) -> 'EventRegistry':
        """Create a registry from application configuration."""
        return cls(
            name=config.registry.name,
            strict_options=config.registry.strict_options,
            error_hook=error_hook,
        )

    def __repr__(self) -> str:
        return f"EventRegistry(name={self.name!r}, events={len(self.events)})"

    def __len__(self) -> int:
        return len(self.events)

    def __contains__(self, event_name: str) -> bool:
        return event_name in self.events

    # --- subscription ---

    def subscribe(
        self,
        event_name: str,
        callback: Callable[..., Any],
        options: OptionsLike = None,
    ) -> SubscriptionHandle:
        """Subscribe a callback to an event.

        Args:
            event_name: Name of the event to listen for
            callback: Callable invoked with the emitted arguments; may
                return an awaitable
            options: SubscriptionOptions or dict with any of
                remove_after_execute, expire_after, only_one_instance

        Returns:
            Handle exposing remove(), event_name and execution_id

        Raises:
            TypeError: If callback is not callable
            OptionsError: If options are malformed and strict_options is set
        """
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        opts = self._coerce_options(options)

        with self._lock:
            event = self.events.get(event_name)
            if event is None:
                event = self._create_event(event_name)
            execution = event.add_execution(callback, opts)

        logger.debug("[%s] Subscribed execution %d to '%s'", self.name, execution.id, event_name)

        return SubscriptionHandle(
            event_name=event_name,
            execution_id=execution.id,
            _remove=functools.partial(self.unsubscribe_execution, event_name, execution.id),
        )

    def once(
        self,
        event_name: str,
        callback: Callable[..., Any],
        options: OptionsLike = None,
    ) -> SubscriptionHandle:
        """Subscribe a callback that removes itself after its first run."""
        opts = dataclasses.replace(self._coerce_options(options), remove_after_execute=True)
        return self.subscribe(event_name, callback, opts)

    def _coerce_options(self, options: OptionsLike) -> SubscriptionOptions:
        if options is None:
            return SubscriptionOptions()
        if isinstance(options, SubscriptionOptions):
            return options.normalized(strict=self.strict_options)
        if isinstance(options, dict):
            return SubscriptionOptions.from_dict(options, strict=self.strict_options)
        if self.strict_options:
            raise OptionsError(f"Unsupported options type: {type(options).__name__}")
        logger.warning("Options warning: unsupported options type %s ignored.",
                       type(options).__name__)
        return SubscriptionOptions()

    def _create_event(self, event_name: str) -> Event:
        event = Event(
            self,
            event_name,
            self._next_event_id,
            first_execution_id=self._execution_id_floor.get(event_name, 0),
        )
        self._next_event_id += 1
        self.events[event_name] = event
        logger.debug("[%s] Created event '%s' (id %d)", self.name, event_name, event.id)
        return event

    # --- emission ---

    def emit(self, event_name: str, *args, **kwargs) -> None:
        """Trigger every execution of an event with the given arguments.

        Emitting an event nobody listens to is a no-op. Returns once every
        execution has been dispatched; awaitable callbacks may still be
        running.
        """
        with self._lock:
            event = self.events.get(event_name)

        if event is None:
            return

        event.trigger(*args, **kwargs)

    # --- removal ---

    def unsubscribe_event(self, event_name: str) -> None:
        """Remove an event together with all of its executions."""
        with self._lock:
            event = self.events.pop(event_name, None)
            if event is None:
                return
            self._execution_id_floor[event_name] = event.next_execution_id

        event.close()
        logger.debug("[%s] Removed event '%s'", self.name, event_name)

    def unsubscribe_execution(self, event_name: str, execution_id: int) -> None:
        """Remove one execution; the event goes too if it was the last one."""
        with self._lock:
            event = self.events.get(event_name)

        if event is None:
            return

        execution = event.get_execution(execution_id)
        if execution is not None:
            execution.remove()

    def clear(self) -> None:
        """Remove all events."""
        with self._lock:
            events, self.events = self.events, {}
            for event in events.values():
                self._execution_id_floor[event.name] = event.next_execution_id

        for event in events.values():
            event.close()
        logger.debug("[%s] Cleared %d events", self.name, len(events))

    def release_event(self, event: Event) -> None:
        """Drop an event whose last execution was removed."""
        with self._lock:
            if self.events.get(event.name) is not event or len(event):
                return
            del self.events[event.name]
            self._execution_id_floor[event.name] = event.next_execution_id

        logger.debug("[%s] Removed empty event '%s'", self.name, event.name)

    # --- introspection ---

    def has_event(self, event_name: str) -> bool:
        return event_name in self.events

    def event_names(self) -> List[str]:
        with self._lock:
            return list(self.events)

    def execution_count(self, event_name: str) -> int:
        event = self.events.get(event_name)
        return len(event) if event is not None else 0

    def get_execution(self, event_name: str, execution_id: int) -> Optional[Execution]:
        event = self.events.get(event_name)
        if event is None:
            return None
        return event.get_execution(execution_id)
