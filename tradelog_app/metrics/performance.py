"""
Performance statistics over closed round-trip trades.

Summary figures and the profit/loss percent distribution used to compare
one period of trading against another.
"""

import math
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..data.models import Country, RoundTripTrade


@dataclass(frozen=True)
class PerformanceStats:
    """Summary statistics for a set of round-trip trades."""
    total_pl: float = 0.0
    win_rate: float = 0.0            # Percent of trades with positive P/L
    avg_holding_days: float = 0.0
    profit_factor: float = 0.0       # Gross profit / gross loss
    trade_count: int = 0


@dataclass(frozen=True)
class HistogramBucket:
    """One P/L percent bucket, ``[lower, lower + size)``."""
    lower: float
    label: str
    main_profit_loss: float = 0.0         # Summed P/L of main-period trades
    comparison_profit_loss: float = 0.0
    main_count: int = 0
    comparison_count: int = 0


def calculate_performance_stats(trades: Sequence[RoundTripTrade]) -> PerformanceStats:
    """
    Calculate summary statistics.

    Profit factor falls back to gross profit when there are no losing
    trades. An empty input yields all zeros.
    """
    if not trades:
        return PerformanceStats()

    total_pl = sum(t.profit_loss for t in trades)
    wins = [t for t in trades if t.is_win]
    win_rate = len(wins) / len(trades) * 100
    avg_holding_days = sum(t.holding_days for t in trades) / len(trades)

    gross_profit = sum(t.profit_loss for t in wins)
    gross_loss = abs(sum(t.profit_loss for t in trades if t.profit_loss < 0))
    profit_factor = gross_profit if gross_loss == 0 else gross_profit / gross_loss

    return PerformanceStats(
        total_pl=total_pl,
        win_rate=win_rate,
        avg_holding_days=avg_holding_days,
        profit_factor=profit_factor,
        trade_count=len(trades),
    )


def stats_by_country(trades: Iterable[RoundTripTrade]) -> dict[Country, PerformanceStats]:
    """Performance statistics for each market, every market present."""
    trades = list(trades)
    return {
        country: calculate_performance_stats([t for t in trades if t.country == country])
        for country in Country
    }


def filter_by_exit_date(trades: Iterable[RoundTripTrade],
                        start: Optional[date] = None,
                        end: Optional[date] = None) -> list[RoundTripTrade]:
    """Trades whose exit date lies within ``[start, end]``; open bounds allowed."""
    return [
        t for t in trades
        if (start is None or t.exit_date >= start) and (end is None or t.exit_date <= end)
    ]


def _bucket_index(percent: float, bucket_size: float) -> int:
    return math.floor(percent / bucket_size)


def _format_label(lower: float, bucket_size: float) -> str:
    return f"{lower:g}% ~ {lower + bucket_size:g}%"


def profit_loss_histogram(main: Sequence[RoundTripTrade],
                          comparison: Sequence[RoundTripTrade] = (),
                          bucket_size: float = 5.0) -> list[HistogramBucket]:
    """
    Distribution of P/L across fixed-width P/L percent buckets.

    Each bucket sums the P/L of the trades whose P/L percent falls in it,
    separately for the two periods, and counts them. The range always
    includes the 0% bucket and covers every value in both inputs, with
    empty buckets in between, so the two periods can be drawn side by side.

    Args:
        main: Trades of the primary period
        comparison: Trades of the comparison period
        bucket_size: Bucket width in percent

    Returns:
        Buckets in ascending order; empty if both inputs are empty
    """
    if bucket_size <= 0:
        raise ValueError(f"bucket_size must be positive, got {bucket_size}")

    percents = [t.profit_loss_percent for t in (*main, *comparison)]
    if not percents:
        return []

    first = _bucket_index(min(0.0, *percents), bucket_size)
    last = _bucket_index(max(0.0, *percents), bucket_size)

    main_totals: dict[int, float] = defaultdict(float)
    comparison_totals: dict[int, float] = defaultdict(float)
    for trade in main:
        main_totals[_bucket_index(trade.profit_loss_percent, bucket_size)] += trade.profit_loss
    for trade in comparison:
        comparison_totals[_bucket_index(trade.profit_loss_percent, bucket_size)] += trade.profit_loss

    main_counts = Counter(_bucket_index(t.profit_loss_percent, bucket_size) for t in main)
    comparison_counts = Counter(_bucket_index(t.profit_loss_percent, bucket_size) for t in comparison)

    buckets = []
    for index in range(first, last + 1):
        lower = index * bucket_size
        buckets.append(HistogramBucket(
            lower=lower,
            label=_format_label(lower, bucket_size),
            main_profit_loss=main_totals[index],
            comparison_profit_loss=comparison_totals[index],
            main_count=main_counts[index],
            comparison_count=comparison_counts[index],
        ))
    return buckets
