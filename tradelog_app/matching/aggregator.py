"""
FIFO aggregation of executions into closed round-trip trades.

Executions are grouped per (symbol, country), ordered by date, and replayed
through a LotQueue. Every sell that finds open buy lots closes exactly one
round-trip trade. The output is a pure function of the input list, so the
stored round-trip set can always be discarded and rebuilt.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

import structlog

from ..data.models import Country, ExecutionRecord, RoundTripTrade, Side
from ..utils.time import holding_days
from .lot_queue import LotFragment, LotQueue

logger = structlog.get_logger(__name__)


def group_by_instrument(
    executions: Iterable[ExecutionRecord],
) -> dict[tuple[str, Country], list[ExecutionRecord]]:
    """Group executions by (symbol, country), preserving first-appearance order."""
    grouped: dict[tuple[str, Country], list[ExecutionRecord]] = {}
    for execution in executions:
        grouped.setdefault(execution.instrument_key, []).append(execution)
    return grouped


def build_round_trip(buys: Sequence[LotFragment], sell: ExecutionRecord,
                     ceil_holding_days: bool = True) -> RoundTripTrade:
    """
    Build a round-trip trade from matched buy fragments and the closing sell.

    Args:
        buys: Matched buy fragments, oldest first (must be non-empty)
        sell: Sell execution that consumed them
        ceil_holding_days: Round partial holding days up

    Returns:
        RoundTripTrade with weighted-average entry and P/L
    """
    total_quantity = sum(buy.quantity for buy in buys)
    total_entry_cost = sum(buy.cost for buy in buys)
    avg_entry_price = total_entry_cost / total_quantity

    total_exit_revenue = sell.price * total_quantity
    profit_loss = total_exit_revenue - total_entry_cost
    # 0% when the cost basis is zero
    profit_loss_percent = (profit_loss / total_entry_cost) * 100 if total_entry_cost else 0.0

    entry_date = buys[0].date

    return RoundTripTrade(
        symbol=sell.symbol,
        name=sell.name,
        country=sell.country,
        entry_date=entry_date,
        avg_entry_price=avg_entry_price,
        total_quantity=total_quantity,
        total_entry_cost=total_entry_cost,
        exit_date=sell.date,
        avg_exit_price=sell.price,
        total_exit_revenue=total_exit_revenue,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss_percent,
        holding_days=holding_days(entry_date, sell.date, ceil=ceil_holding_days),
        entry_execution_ids=tuple(buy.source_id for buy in buys if buy.source_id is not None),
        exit_execution_ids=tuple(i for i in (sell.id,) if i is not None),
    )


def match_instrument(executions: Sequence[ExecutionRecord],
                     ceil_holding_days: bool = True,
                     queue: Optional[LotQueue] = None) -> list[RoundTripTrade]:
    """
    Replay one instrument's executions through a FIFO lot queue.

    Executions are stably sorted by date, so same-day executions keep their
    input order. A sell with no open lots produces no trade, and any sell
    quantity beyond the open lots is dropped.

    Args:
        executions: Executions of a single (symbol, country)
        ceil_holding_days: Round partial holding days up
        queue: Optional queue to replay into; its final state holds the
            unmatched buy lots

    Returns:
        Round-trip trades in sell order
    """
    queue = queue if queue is not None else LotQueue()
    trades: list[RoundTripTrade] = []

    for execution in sorted(executions, key=lambda e: e.date):
        if execution.side is Side.BUY:
            queue.push(LotFragment.from_execution(execution))
            continue

        matched, unmatched = queue.consume(execution.quantity)

        if unmatched > 0:
            logger.debug(
                "Sell quantity exceeds open lots, remainder dropped",
                symbol=execution.symbol,
                country=execution.country.value,
                date=execution.date.isoformat(),
                unmatched_quantity=unmatched,
            )

        if matched:
            trades.append(build_round_trip(matched, execution, ceil_holding_days))

    return trades


def aggregate(executions: Iterable[ExecutionRecord],
              ceil_holding_days: bool = True) -> list[RoundTripTrade]:
    """
    Convert executions into closed round-trip trades.

    Instruments appear in the order their first execution appears in the
    input; within an instrument trades follow sell order. Input records are
    never modified, and repeated calls on the same input give identical
    output.

    Args:
        executions: Executions for any number of instruments
        ceil_holding_days: Round partial holding days up

    Returns:
        List of round-trip trades
    """
    trades: list[RoundTripTrade] = []

    for executions_for_instrument in group_by_instrument(executions).values():
        trades.extend(match_instrument(executions_for_instrument, ceil_holding_days))

    logger.debug("Aggregated round trips", trade_count=len(trades))
    return trades
