"""
Trade Log Engine - Brokerage Execution Aggregation

Parses broker execution exports, matches buys against sells on a FIFO basis
into closed round-trip trades with profit/loss, and resamples daily price
bars into weekly and monthly bars for charting.
"""

__version__ = "0.1.0"
__author__ = "Trade Log Team"
