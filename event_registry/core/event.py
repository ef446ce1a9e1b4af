"""A named bucket of executions owned by a registry."""

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .execution import Execution
from .types import SubscriptionOptions

if TYPE_CHECKING:
    from .registry import EventRegistry

logger = logging.getLogger(__name__)


class Event:
    """Registration-ordered executions sharing one emission trigger."""

    def __init__(self, registry: 'EventRegistry', name: str, event_id: int,
                 first_execution_id: int = 0):
        self.registry = registry
        self.name = name
        self.id = event_id
        self.executions: List[Execution] = []
        self.next_execution_id = first_execution_id
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.executions)

    def __repr__(self) -> str:
        return f"Event(name={self.name!r}, id={self.id}, executions={len(self.executions)})"

    def add_execution(self, callback: Callable[..., Any], options: SubscriptionOptions) -> Execution:
        """Register a callback and return its execution."""
        with self._lock:
            execution_id = self.next_execution_id
            self.next_execution_id += 1
            execution = Execution(self, execution_id, callback, options)
            self.executions.append(execution)
        return execution

    def get_execution(self, execution_id: int) -> Optional[Execution]:
        with self._lock:
            for execution in self.executions:
                if execution.id == execution_id:
                    return execution
        return None

    def trigger(self, *args, **kwargs) -> None:
        """Fan out to every execution, in registration order.

        Iterates over a snapshot so executions removing themselves (or
        siblings) mid-fan-out do not shift the iteration.
        """
        with self._lock:
            snapshot = list(self.executions)

        for execution in snapshot:
            execution.trigger(*args, **kwargs)

    def discard(self, execution: Execution) -> None:
        """Drop an execution; an emptied event is released by its registry."""
        with self._lock:
            try:
                self.executions.remove(execution)
            except ValueError:
                return
            empty = not self.executions

        if empty:
            self.registry.release_event(self)

    def close(self) -> int:
        """Remove every execution at once, cancelling their timers.

        Returns:
            Number of executions removed
        """
        with self._lock:
            executions, self.executions = self.executions, []

        for execution in executions:
            execution.close()

        logger.debug("Event '%s' closed with %d executions", self.name, len(executions))
        return len(executions)
