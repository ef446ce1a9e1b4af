"""A single subscribed callback and its lifecycle guards."""

import asyncio
import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Set

from .types import ExecutionState, SubscriptionOptions

if TYPE_CHECKING:
    from .event import Event

logger = logging.getLogger(__name__)


async def _run_until_settled(coro: Awaitable) -> None:
    """Await coro, then every task it left on the loop (e.g. nested async emits)."""
    await coro
    current = asyncio.current_task()
    while True:
        pending = [t for t in asyncio.all_tasks() if t is not current]
        if not pending:
            return
        await asyncio.gather(*pending, return_exceptions=True)


class Execution:
    """One registered callback plus its runtime state.

    An execution is triggered by its event's fan-out and decides on its own
    whether the callback runs:

    - a pending expiration timer is disarmed by any trigger
    - with only_one_instance, a trigger arriving while the callback is still
      in flight is dropped
    - with remove_after_execute, the execution detaches itself once the
      first run completes

    Callbacks may be plain functions or return awaitables. Awaitables are
    scheduled on the running event loop (or driven with asyncio.run when
    there is none) and are not awaited by the emitter. Errors raised by the
    callback never leave this class; they are handed to the registry's
    error_hook when one is set.
    """

    def __init__(
        self,
        event: 'Event',
        execution_id: int,
        callback: Callable[..., Any],
        options: SubscriptionOptions,
    ):
        self.event = event
        self.id = execution_id
        self.callback = callback
        self.options = options

        self.has_executed = False
        self.removed = False
        self._running = 0
        self._expiration_timer = None
        self._tasks: Set[asyncio.Task] = set()
        self._lock = threading.RLock()

        if options.expire_after is not None:
            self._arm()

    def __repr__(self) -> str:
        return (f"Execution(event={self.event.name!r}, id={self.id}, "
                f"state={self.state.value})")

    @property
    def is_executing(self) -> bool:
        return self._running > 0

    @property
    def is_armed(self) -> bool:
        return self._expiration_timer is not None

    @property
    def state(self) -> ExecutionState:
        with self._lock:
            if self.removed:
                return ExecutionState.REMOVED
            if self._running:
                return ExecutionState.RUNNING
            if self._expiration_timer is not None:
                return ExecutionState.ARMED
            return ExecutionState.IDLE

    # --- expiration ---

    def _arm(self) -> None:
        """Start the expiration timer.

        The timer runs on its own thread so it still fires after the loop
        that was running at subscribe time has ended. While that loop is
        alive, expiry is handed back to it.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        timer = threading.Timer(
            self.options.expire_after.timeout_seconds, self._on_timer, args=(loop,)
        )
        timer.daemon = True
        self._expiration_timer = timer
        timer.start()

    def _on_timer(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        if loop is not None and loop.is_running():
            try:
                loop.call_soon_threadsafe(self._expire)
                return
            except RuntimeError:
                # Loop closed in between
                pass
        self._expire()

    def _disarm(self) -> None:
        with self._lock:
            timer, self._expiration_timer = self._expiration_timer, None
        if timer is not None:
            timer.cancel()

    def _expire(self) -> None:
        with self._lock:
            # A trigger or removal got here first
            if self._expiration_timer is None or self.removed:
                return
            self._expiration_timer = None
            self.removed = True

        logger.debug("Execution %d of '%s' expired after %.0fms",
                     self.id, self.event.name, self.options.expire_after.timeout_ms)
        self._invoke(self.options.expire_after.on_expire, (), {}, on_done=None)
        self.event.discard(self)

    # --- triggering ---

    def trigger(self, *args, **kwargs) -> None:
        """Run the callback with the emitted arguments, unless a guard drops it."""
        self._disarm()

        with self._lock:
            if self.removed:
                return
            if self._running and self.options.only_one_instance:
                logger.debug("Execution %d of '%s' already running, trigger dropped",
                             self.id, self.event.name)
                return
            self._running += 1

        self._invoke(self.callback, args, kwargs, on_done=self._finish)

    def _finish(self) -> None:
        with self._lock:
            self._running -= 1
            self.has_executed = True
            one_shot = self.options.remove_after_execute

        if one_shot:
            self.remove()

    def _invoke(
        self,
        func: Callable[..., Any],
        args: tuple,
        kwargs: dict,
        on_done: Optional[Callable[[], None]],
    ) -> None:
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._report(e)
            result = None
        except BaseException:
            if on_done is not None:
                on_done()
            raise

        if inspect.isawaitable(result):
            self._schedule(result, on_done)
        elif on_done is not None:
            on_done()

    def _schedule(self, awaitable: Awaitable, on_done: Optional[Callable[[], None]]) -> None:
        async def drive():
            try:
                await awaitable
            except Exception as e:
                self._report(e)
            finally:
                if on_done is not None:
                    on_done()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_run_until_settled(drive()))
            return

        task = loop.create_task(drive())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _report(self, error: Exception) -> None:
        hook = self.event.registry.error_hook
        if hook is None:
            return
        try:
            hook(error, self.event.name, self.id)
        except Exception:
            pass

    # --- removal ---

    def close(self) -> bool:
        """Mark as removed and disarm the timer without detaching from the event.

        Returns:
            True if this call performed the removal
        """
        with self._lock:
            was_removed, self.removed = self.removed, True
        self._disarm()
        return not was_removed

    def remove(self) -> None:
        """Detach from the event. An in-flight callback still runs to completion."""
        if self.close():
            logger.debug("Execution %d of '%s' removed", self.id, self.event.name)
        self.event.discard(self)
