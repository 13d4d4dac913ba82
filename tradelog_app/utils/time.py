"""
Calendar date utilities for executions and price bars.

Broker exports carry dates as ``YYYY/MM/DD`` or ``YYYY年MM月DD日``; quote
sources use ISO ``YYYY-MM-DD``. Everything is normalized to ``datetime.date``.
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime, str]

_LOCALIZED_DATE = re.compile(r"^\s*(\d{4})年\s*(\d{1,2})月\s*(\d{1,2})日\s*$")
_NUMERIC_DATE = re.compile(r"^\s*(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})\s*$")

SECONDS_PER_DAY = 24 * 60 * 60


def localized_to_slash_date(value: str) -> str:
    """
    Convert a ``YYYY年MM月DD日`` date into ``YYYY/MM/DD`` form.

    Strings without the localized tokens are returned stripped but otherwise
    unchanged.
    """
    return value.replace("年", "/").replace("月", "/").replace("日", "").strip()


def parse_trade_date(value: DateLike) -> date:
    """
    Parse a date from any supported representation.

    Args:
        value: ``date``/``datetime`` instance, or a string in slash, dash,
            dot or localized year/month/day form

    Returns:
        Calendar date

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    match = _LOCALIZED_DATE.match(value) or _NUMERIC_DATE.match(value)
    if not match:
        raise ValueError(f"Unrecognized date format: {value!r}")

    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def week_start(value: date) -> date:
    """Monday on or before ``value``; Sunday maps back six days."""
    return value - timedelta(days=(value.isoweekday() + 6) % 7)


def month_start(value: date) -> date:
    """First day of the month containing ``value``."""
    return value.replace(day=1)


def holding_days(entry: Union[date, datetime], exit_: Union[date, datetime],
                 ceil: bool = True) -> int:
    """
    Whole days between entry and exit, independent of order.

    Args:
        entry: Entry date or timestamp
        exit_: Exit date or timestamp
        ceil: Round partial days up (otherwise truncate)

    Returns:
        Non-negative number of days
    """
    if isinstance(entry, datetime) != isinstance(exit_, datetime):
        entry = parse_trade_date(entry)
        exit_ = parse_trade_date(exit_)

    seconds = abs((exit_ - entry).total_seconds())
    days = seconds / SECONDS_PER_DAY
    return int(math.ceil(days)) if ceil else int(days)
