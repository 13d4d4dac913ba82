"""Resampling of daily OHLCV bars into weekly and monthly bars"""

from collections.abc import Iterable
from datetime import date
from enum import Enum
from typing import Callable

from ..data.models import Bar
from ..utils.time import month_start, week_start


class Granularity(str, Enum):
    """Target bar period."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def from_timeframe(cls, timeframe: str) -> "Granularity":
        """
        Resolve a chart timeframe string.

        Accepts ``1d``/``1w``/``1M`` as well as ``day``/``week``/``month``.
        ``M`` is case-sensitive because ``1m`` conventionally means minutes.
        """
        aliases = {
            "1d": cls.DAY, "d": cls.DAY, "D": cls.DAY,
            "1w": cls.WEEK, "w": cls.WEEK, "W": cls.WEEK,
            "1M": cls.MONTH, "M": cls.MONTH,
        }
        if timeframe in aliases:
            return aliases[timeframe]
        try:
            return cls(timeframe.lower())
        except ValueError:
            raise ValueError(f"Unsupported timeframe: {timeframe!r}")


BUCKET_KEYS: dict[Granularity, Callable[[date], date]] = {
    Granularity.DAY: lambda d: d,
    Granularity.WEEK: week_start,
    Granularity.MONTH: month_start,
}


def _merge_bucket(key: date, bars: list[Bar]) -> Bar:
    return Bar(
        date=key,
        open=bars[0].open,
        high=max(bar.high for bar in bars),
        low=min(bar.low for bar in bars),
        close=bars[-1].close,
        volume=sum(bar.volume for bar in bars),
    )


def resample(bars: Iterable[Bar], granularity: Granularity) -> list[Bar]:
    """
    Group bars into period buckets and recompute OHLCV per bucket.

    open is the first bar's open and close the last bar's close (by date
    within the bucket), high/low are the extremes and volume the sum. Each
    output bar is dated at its bucket start: the Monday of the week (Sunday
    belongs to the preceding Monday) or the 1st of the month.

    Args:
        bars: Daily bars, any order
        granularity: Target period

    Returns:
        Resampled bars sorted by bucket start
    """
    granularity = Granularity(granularity)
    bucket_key = BUCKET_KEYS[granularity]

    buckets: dict[date, list[Bar]] = {}
    for bar in sorted(bars, key=lambda b: b.date):
        buckets.setdefault(bucket_key(bar.date), []).append(bar)

    return [_merge_bucket(key, buckets[key]) for key in sorted(buckets)]
