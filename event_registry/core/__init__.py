"""Named-event dispatch core."""

from .types import ExecutionState, Expiration, SubscriptionHandle, SubscriptionOptions
from .execution import Execution
from .event import Event
from .registry import EventRegistry

__all__ = [
    'ExecutionState',
    'Expiration',
    'SubscriptionHandle',
    'SubscriptionOptions',
    'Execution',
    'Event',
    'EventRegistry',
]
