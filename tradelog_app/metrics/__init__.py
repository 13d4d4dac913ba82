"""Price bar resampling and trade performance analysis"""

from .performance import (
    HistogramBucket,
    PerformanceStats,
    calculate_performance_stats,
    filter_by_exit_date,
    profit_loss_histogram,
    stats_by_country,
)
from .resample import Granularity, resample

__all__ = [
    "Granularity",
    "resample",
    "HistogramBucket",
    "PerformanceStats",
    "calculate_performance_stats",
    "filter_by_exit_date",
    "profit_loss_histogram",
    "stats_by_country",
]
