"""Trade persistence layer for raw executions and derived round-trip trades."""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

import structlog

from ..data.models import Country, ExecutionRecord, RoundTripTrade, Side
from ..errors import PersistenceError


class TradeStore:
    """
    SQLite-based store with two tables.

    ``executions`` holds raw fills as imported or entered. ``round_trips``
    holds the trades derived from them and is only ever replaced as a
    whole, so it stays consistent with the current execution set.
    """

    def __init__(self, db_path: str = "tradelog.db", timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.logger = structlog.get_logger("trade.store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init", "schema") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS executions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    name TEXT NOT NULL,
                    country TEXT NOT NULL,
                    date TEXT NOT NULL,
                    side TEXT NOT NULL,
                    price REAL NOT NULL,
                    quantity REAL NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS round_trips (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    name TEXT NOT NULL,
                    country TEXT NOT NULL,
                    entry_date TEXT NOT NULL,
                    avg_entry_price REAL NOT NULL,
                    total_quantity REAL NOT NULL,
                    total_entry_cost REAL NOT NULL,
                    exit_date TEXT NOT NULL,
                    avg_exit_price REAL NOT NULL,
                    total_exit_revenue REAL NOT NULL,
                    profit_loss REAL NOT NULL,
                    profit_loss_percent REAL NOT NULL,
                    holding_days INTEGER NOT NULL,
                    entry_execution_ids TEXT NOT NULL,
                    exit_execution_ids TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_executions_symbol ON executions(symbol, country)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_executions_date ON executions(date)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_round_trips_exit_date ON round_trips(exit_date)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str, target: str):
        """Get database connection; sqlite errors surface as PersistenceError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, target=target, error=str(e))
            raise PersistenceError(
                f"{operation} on {target} failed: {e}",
                operation=operation,
                target=target,
            ) from e
        finally:
            if conn:
                conn.close()

    @staticmethod
    def _execution_params(execution: ExecutionRecord, created_at: str) -> tuple:
        return (
            execution.symbol,
            execution.name,
            execution.country.value,
            execution.date.isoformat(),
            execution.side.value,
            execution.price,
            execution.quantity,
            created_at,
        )

    # Executions

    def insert_execution(self, execution: ExecutionRecord) -> ExecutionRecord:
        """
        Store a single execution.

        Returns:
            The execution carrying its assigned id
        """
        return self.insert_executions([execution])[0]

    def insert_executions(self, executions: Iterable[ExecutionRecord]) -> list[ExecutionRecord]:
        """
        Store executions in a single transaction.

        Returns:
            The executions carrying their assigned ids, in input order
        """
        stored = []
        with self._lock:
            with self._get_connection("insert", "executions") as conn:
                now = datetime.now(timezone.utc).isoformat()
                for execution in executions:
                    cursor = conn.execute("""
                        INSERT INTO executions (
                            symbol, name, country, date, side, price, quantity, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """, self._execution_params(execution, now))
                    stored.append(execution.with_id(cursor.lastrowid))
                conn.commit()

        self.logger.info("Executions stored", count=len(stored))
        return stored

    def delete_execution(self, execution_id: int) -> bool:
        """Delete an execution by id. Returns False if it did not exist."""
        with self._lock:
            with self._get_connection("delete", "executions") as conn:
                cursor = conn.execute("DELETE FROM executions WHERE id = ?", (execution_id,))
                conn.commit()
                deleted = cursor.rowcount > 0

        self.logger.info("Execution deleted", execution_id=execution_id, deleted=deleted)
        return deleted

    def clear_executions(self) -> int:
        """Remove every execution. Returns the number removed."""
        with self._lock:
            with self._get_connection("clear", "executions") as conn:
                cursor = conn.execute("DELETE FROM executions")
                conn.commit()
                return cursor.rowcount

    def get_execution(self, execution_id: int) -> Optional[ExecutionRecord]:
        """Get an execution by id."""
        with self._get_connection("select", "executions") as conn:
            row = conn.execute(
                "SELECT * FROM executions WHERE id = ?", (execution_id,)
            ).fetchone()

        return self._row_to_execution(row) if row else None

    def list_executions(self) -> list[ExecutionRecord]:
        """All executions ordered by date, then insertion order."""
        with self._get_connection("select", "executions") as conn:
            rows = conn.execute("SELECT * FROM executions ORDER BY date, id").fetchall()

        return [self._row_to_execution(row) for row in rows]

    # Round trips

    def replace_round_trips(self, trades: Iterable[RoundTripTrade]) -> int:
        """
        Replace the whole round-trip table in one transaction.

        Returns:
            Number of trades stored
        """
        with self._lock:
            with self._get_connection("replace", "round_trips") as conn:
                now = datetime.now(timezone.utc).isoformat()
                conn.execute("DELETE FROM round_trips")
                count = 0
                for trade in trades:
                    conn.execute("""
                        INSERT INTO round_trips (
                            symbol, name, country, entry_date, avg_entry_price,
                            total_quantity, total_entry_cost, exit_date, avg_exit_price,
                            total_exit_revenue, profit_loss, profit_loss_percent,
                            holding_days, entry_execution_ids, exit_execution_ids, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """, (
                        trade.symbol,
                        trade.name,
                        trade.country.value,
                        trade.entry_date.isoformat(),
                        trade.avg_entry_price,
                        trade.total_quantity,
                        trade.total_entry_cost,
                        trade.exit_date.isoformat(),
                        trade.avg_exit_price,
                        trade.total_exit_revenue,
                        trade.profit_loss,
                        trade.profit_loss_percent,
                        trade.holding_days,
                        json.dumps(list(trade.entry_execution_ids)),
                        json.dumps(list(trade.exit_execution_ids)),
                        now,
                    ))
                    count += 1
                conn.commit()

        self.logger.info("Round trips replaced", count=count)
        return count

    def list_round_trips(self) -> list[RoundTripTrade]:
        """All round-trip trades in storage order."""
        with self._get_connection("select", "round_trips") as conn:
            rows = conn.execute("SELECT * FROM round_trips ORDER BY id").fetchall()

        return [self._row_to_round_trip(row) for row in rows]

    def round_trips_between(self, start: date, end: date) -> list[RoundTripTrade]:
        """Round-trip trades with an exit date in ``[start, end]``."""
        with self._get_connection("select", "round_trips") as conn:
            rows = conn.execute("""
                SELECT * FROM round_trips
                WHERE exit_date BETWEEN ? AND ?
                ORDER BY exit_date, id
            """, (start.isoformat(), end.isoformat())).fetchall()

        return [self._row_to_round_trip(row) for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get database statistics."""
        with self._get_connection("stats", "database") as conn:
            execution_count = conn.execute("SELECT COUNT(*) FROM executions").fetchone()[0]
            round_trip_count = conn.execute("SELECT COUNT(*) FROM round_trips").fetchone()[0]

            executions_by_country = {}
            for row in conn.execute("""
                SELECT country, COUNT(*) as count FROM executions GROUP BY country
            """):
                executions_by_country[row[0]] = row[1]

            exit_range = conn.execute(
                "SELECT MIN(exit_date), MAX(exit_date) FROM round_trips"
            ).fetchone()

        return {
            "total_executions": execution_count,
            "total_round_trips": round_trip_count,
            "executions_by_country": executions_by_country,
            "first_exit_date": exit_range[0],
            "last_exit_date": exit_range[1],
        }

    def _row_to_execution(self, row: sqlite3.Row) -> ExecutionRecord:
        """Convert database row to ExecutionRecord."""
        return ExecutionRecord(
            id=row["id"],
            symbol=row["symbol"],
            name=row["name"],
            country=Country(row["country"]),
            date=date.fromisoformat(row["date"]),
            side=Side(row["side"]),
            price=row["price"],
            quantity=row["quantity"],
        )

    def _row_to_round_trip(self, row: sqlite3.Row) -> RoundTripTrade:
        """Convert database row to RoundTripTrade."""
        return RoundTripTrade(
            id=row["id"],
            symbol=row["symbol"],
            name=row["name"],
            country=Country(row["country"]),
            entry_date=date.fromisoformat(row["entry_date"]),
            avg_entry_price=row["avg_entry_price"],
            total_quantity=row["total_quantity"],
            total_entry_cost=row["total_entry_cost"],
            exit_date=date.fromisoformat(row["exit_date"]),
            avg_exit_price=row["avg_exit_price"],
            total_exit_revenue=row["total_exit_revenue"],
            profit_loss=row["profit_loss"],
            profit_loss_percent=row["profit_loss_percent"],
            holding_days=row["holding_days"],
            entry_execution_ids=tuple(json.loads(row["entry_execution_ids"])),
            exit_execution_ids=tuple(json.loads(row["exit_execution_ids"])),
        )
