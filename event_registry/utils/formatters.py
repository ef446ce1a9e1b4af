"""Timestamp formatting utilities."""

import re
from datetime import datetime

_DATE_TOKENS = re.compile(r"%year%|%month%|%day%|%hour%|%minute%|%second%|%millis%")


def format_date(date: datetime, template: str) -> str:
    """Format a datetime according to a token template.

    Recognised tokens are substituted literally wherever they appear:
    %year% (unpadded), %month% %day% %hour% %minute% %second% (2 digits)
    and %millis% (3 digits).

    Example:
        >>> format_date(datetime(2024, 3, 7, 9, 5, 2, 45000), "%year%-%month%-%day% %millis%")
        '2024-03-07 045'

    Args:
        date: Date to format
        template: Template containing any of the tokens above

    Returns:
        Template with every token replaced
    """
    replacements = {
        '%year%': str(date.year),
        '%month%': f"{date.month:02d}",
        '%day%': f"{date.day:02d}",
        '%hour%': f"{date.hour:02d}",
        '%minute%': f"{date.minute:02d}",
        '%second%': f"{date.second:02d}",
        '%millis%': f"{date.microsecond // 1000:03d}",
    }
    return _DATE_TOKENS.sub(lambda m: replacements[m.group(0)], template)


def date_from_string(value: str) -> datetime:
    """Parse a 'YYYY-MM-DD HH:mm:ss.SSS' string (milliseconds optional).

    Raises:
        ValueError: If the string does not follow the format
    """
    try:
        date_part, time_part = value.strip().split(' ')
        year, month, day = (int(p) for p in date_part.split('-'))
        hour, minute, second = time_part.split(':')
        seconds, _, millis = second.partition('.')
        return datetime(
            year, month, day, int(hour), int(minute), int(seconds),
            int(millis or 0) * 1000,
        )
    except ValueError as e:
        raise ValueError(f"Invalid date string '{value}': {e}") from e
