"""Default configuration parameters for the trade log engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParserParams:
    """Execution export parsing parameters."""
    encoding: str = "cp932"                  # Legacy Shift_JIS superset used by the broker
    heuristic_scan_lines: int = 9            # Data lines inspected when no header matches
    min_cells_domestic: int = 10             # Layout A minimum row width
    min_cells_foreign: int = 7               # Layout B minimum row width


@dataclass(frozen=True)
class MatchingParams:
    """Lot matching parameters."""
    ceil_holding_days: bool = True           # Round partial days up


@dataclass(frozen=True)
class AnalysisParams:
    """Performance analysis parameters."""
    histogram_bucket_pct: float = 5.0        # Width of P/L percent buckets


@dataclass(frozen=True)
class StoreParams:
    """Trade store parameters."""
    db_path: str = "tradelog.db"
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    parser: ParserParams
    matching: MatchingParams
    analysis: AnalysisParams
    store: StoreParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        parser=ParserParams(),
        matching=MatchingParams(),
        analysis=AnalysisParams(),
        store=StoreParams(),
    )
