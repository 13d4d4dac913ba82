"""
Main trade log service coordinator.

Orchestrates the import pipeline, coordinating decoding, parsing,
execution storage and round-trip recomputation, and exposes the
analysis operations over the stored trades.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .config.defaults import ParserParams
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import Bar, Country, ExecutionRecord, Layout, RoundTripTrade
from .data.encoding import decode_export
from .data.parsers import detect_layout, parse_execution_csv
from .errors import ImportDataError, PersistenceError
from .logging.config import get_import_logger
from .matching import aggregate
from .metrics.performance import (
    HistogramBucket,
    PerformanceStats,
    calculate_performance_stats,
    profit_loss_histogram,
    stats_by_country,
)
from .metrics.resample import Granularity, resample
from .persistence import TradeStore

logger = structlog.get_logger(__name__)
import_logger = get_import_logger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of importing one execution export."""
    layout: Layout
    imported: int
    skipped: int
    round_trips: int

    @property
    def country(self) -> Country:
        return self.layout.country


class TradeLogService:
    """
    Coordinator for the trade log.

    Manages the pipeline:
    Export bytes → Decode → Parse → Store executions → Aggregate → Store round trips

    Round trips are always rebuilt from the full execution set after any
    change to executions.
    """

    def __init__(self, db_path: Optional[str] = None,
                 config_dir: Optional[Union[str, Path]] = None,
                 overrides: Optional[dict[str, Any]] = None) -> None:
        """Initialize the service and its store."""
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        self.overrides = overrides or {}
        self.config = self.config_loader.merge_config(overrides=self.overrides)

        errors = ConfigValidator.validate_config(self.config)
        if errors:
            for error in errors:
                logger.error("Invalid configuration", field=error.field,
                             message=error.message, value=error.value)
            raise ValueError(f"Invalid configuration: {', '.join(e.field for e in errors)}")

        store_config = self.config["store"]
        self.store = TradeStore(
            db_path or store_config["db_path"],
            timeout=store_config["timeout_seconds"],
        )
        self.ceil_holding_days = self.config["matching"]["ceil_holding_days"]
        self.histogram_bucket_pct = self.config["analysis"]["histogram_bucket_pct"]

        logger.info("Trade log service initialized", db_path=str(self.store.db_path))

    def parser_params(self, country: Optional[Country] = None) -> ParserParams:
        """Parser parameters, including the market section for ``country``."""
        config = self.config_loader.merge_config(
            country.value if country else None, self.overrides
        )
        return ParserParams(**config["parser"])

    def import_csv(self, data: Union[bytes, str]) -> ImportSummary:
        """
        Import a broker execution export.

        Args:
            data: Raw export bytes (or decoded text)

        Returns:
            ImportSummary with record counts

        Raises:
            FormatUndetectedError: If the file is not a recognized export
            NoRecordsParsedError: If no executions could be read
        """
        params = self.parser_params()
        try:
            text = decode_export(data, params.encoding)
            layout = detect_layout(text, scan_lines=params.heuristic_scan_lines)
            result = parse_execution_csv(text, self.parser_params(layout.country), layout=layout)
        except ImportDataError as e:
            import_logger.warning("Import rejected", error=str(e),
                                  error_type=type(e).__name__, context=e.context)
            raise

        stored = self.store.insert_executions(result.records)
        try:
            round_trips = self.recalculate()
        except PersistenceError as e:
            # executions are stored; round trips still reflect the previous set
            logger.error("Round trip rebuild failed after import",
                         imported=len(stored), error=str(e))
            raise

        return ImportSummary(
            layout=result.layout,
            imported=len(stored),
            skipped=result.skipped_rows,
            round_trips=round_trips,
        )

    def add_execution(self, execution: ExecutionRecord) -> ExecutionRecord:
        """Store a manually entered execution and rebuild round trips."""
        stored = self.store.insert_execution(execution)
        self.recalculate()
        return stored

    def delete_execution(self, execution_id: int) -> bool:
        """Delete an execution and rebuild round trips. Returns False if unknown."""
        execution = self.store.get_execution(execution_id)
        if execution is None:
            return False

        deleted = self.store.delete_execution(execution_id)
        if deleted:
            logger.info("Execution removed", execution_id=execution_id,
                        symbol=execution.symbol, side=execution.side.value)
            self.recalculate()
        return deleted

    def clear_all(self) -> None:
        """Remove every execution and every round trip."""
        removed = self.store.clear_executions()
        self.store.replace_round_trips([])
        logger.info("Trade log cleared", executions_removed=removed)

    def executions(self) -> list[ExecutionRecord]:
        return self.store.list_executions()

    def recalculate(self) -> int:
        """
        Rebuild the round-trip table from all stored executions.

        Returns:
            Number of round trips stored
        """
        trades = aggregate(self.store.list_executions(), ceil_holding_days=self.ceil_holding_days)
        count = self.store.replace_round_trips(trades)
        logger.info("Round trips recalculated", round_trips=count)
        return count

    def round_trips(self, start: Optional[date] = None,
                    end: Optional[date] = None) -> list[RoundTripTrade]:
        """Stored round trips, optionally limited to an exit date range."""
        if start is None and end is None:
            return self.store.list_round_trips()
        return self.store.round_trips_between(start or date.min, end or date.max)

    def performance(self, start: Optional[date] = None,
                    end: Optional[date] = None) -> PerformanceStats:
        """Summary statistics over round trips exiting in the range."""
        return calculate_performance_stats(self.round_trips(start, end))

    def performance_by_country(self, start: Optional[date] = None,
                               end: Optional[date] = None) -> dict[Country, PerformanceStats]:
        """Summary statistics per market."""
        return stats_by_country(self.round_trips(start, end))

    def resample_bars(self, bars: list[Bar], timeframe: Union[str, Granularity]) -> list[Bar]:
        """Resample daily bars supplied by a quote source to a chart timeframe."""
        granularity = timeframe if isinstance(timeframe, Granularity) else Granularity.from_timeframe(timeframe)
        return resample(bars, granularity)

    def histogram(self, main_range: tuple[Optional[date], Optional[date]],
                  comparison_range: Optional[tuple[Optional[date], Optional[date]]] = None,
                  country: Optional[Country] = None) -> list[HistogramBucket]:
        """
        P/L percent histogram of one exit-date range against another.

        Args:
            main_range: (start, end) exit dates of the primary period
            comparison_range: (start, end) of the comparison period, if any
            country: Limit both periods to one market

        Returns:
            Buckets of ``analysis.histogram_bucket_pct`` width
        """
        main = self.round_trips(*main_range)
        comparison = self.round_trips(*comparison_range) if comparison_range else []
        if country is not None:
            main = [t for t in main if t.country is country]
            comparison = [t for t in comparison if t.country is country]
        return profit_loss_histogram(main, comparison, bucket_size=self.histogram_bucket_pct)
