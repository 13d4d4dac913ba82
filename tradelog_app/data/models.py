"""
Canonical data models for executions, round-trip trades and price bars.

This module defines immutable data structures that represent clean, validated
records after normalization from raw broker exports and quote sources.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional

from ..errors import MalformedRowError


class Side(str, Enum):
    """Execution side."""
    BUY = "BUY"
    SELL = "SELL"


class Country(str, Enum):
    """Supported markets."""
    JP = "JP"
    US = "US"


class Layout(str, Enum):
    """Broker export column layouts."""
    DOMESTIC = "domestic"    # Layout A, Japanese equities
    FOREIGN = "foreign"      # Layout B, US equities

    @property
    def country(self) -> Country:
        """Market whose executions this layout carries."""
        return Country.JP if self is Layout.DOMESTIC else Country.US


@dataclass(frozen=True)
class ExecutionRecord:
    """One fill of a buy or sell order."""
    symbol: str                # Ticker or numeric security code
    name: str                  # Display name
    country: Country
    date: date                 # Execution date
    side: Side
    price: float               # Unit price, positive
    quantity: float            # Filled quantity, positive
    id: Optional[int] = None   # Assigned by the trade store on insert

    def __post_init__(self):
        """Reject non-positive or non-finite prices and quantities."""
        if not (math.isfinite(self.price) and self.price > 0):
            raise MalformedRowError(f"Price must be positive and finite: {self.price}", column="price")
        if not (math.isfinite(self.quantity) and self.quantity > 0):
            raise MalformedRowError(f"Quantity must be positive and finite: {self.quantity}", column="quantity")

    @property
    def instrument_key(self) -> tuple[str, Country]:
        """Grouping key for lot matching."""
        return (self.symbol, self.country)

    def with_id(self, record_id: int) -> "ExecutionRecord":
        """Copy of this record carrying a store-assigned id."""
        return replace(self, id=record_id)


@dataclass(frozen=True)
class RoundTripTrade:
    """Closed position: matched buy fragments against a single sell."""
    symbol: str
    name: str
    country: Country

    # Entry
    entry_date: date                # Date of the oldest matched buy
    avg_entry_price: float          # Quantity-weighted buy price
    total_quantity: float
    total_entry_cost: float

    # Exit
    exit_date: date
    avg_exit_price: float           # Sell unit price
    total_exit_revenue: float

    # Result
    profit_loss: float
    profit_loss_percent: float
    holding_days: int

    # Contributing executions
    entry_execution_ids: tuple[int, ...] = field(default_factory=tuple)
    exit_execution_ids: tuple[int, ...] = field(default_factory=tuple)

    id: Optional[int] = None

    @property
    def is_win(self) -> bool:
        """True if the position closed with a profit."""
        return self.profit_loss > 0


@dataclass(frozen=True)
class Bar:
    """Daily or resampled OHLCV price bar."""
    date: date          # Trading day, or bucket start for resampled bars
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class ParseResult:
    """Result of parsing one execution export."""
    layout: Layout
    records: list[ExecutionRecord]
    skipped_rows: int = 0

    @property
    def country(self) -> Country:
        """Market of every record in this result."""
        return self.layout.country

    def __len__(self) -> int:
        return len(self.records)
