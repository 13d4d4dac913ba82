"""FIFO lot matching of executions into round-trip trades."""

from .aggregator import aggregate, build_round_trip, match_instrument
from .lot_queue import LotFragment, LotQueue

__all__ = [
    "aggregate",
    "build_round_trip",
    "match_instrument",
    "LotFragment",
    "LotQueue",
]
