"""Utility functions for the event registry."""

from .formatters import format_date, date_from_string
from .log import ChannelLogger, setup_logging
from .timing import pause

__all__ = [
    'format_date',
    'date_from_string',
    'ChannelLogger',
    'setup_logging',
    'pause',
]
