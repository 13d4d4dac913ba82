"""SQLite persistence for executions and round-trip trades."""

from .trade_store import TradeStore

__all__ = ["TradeStore"]
