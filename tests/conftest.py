"""Pytest configuration and shared fixtures."""

from datetime import date
from typing import Callable, Optional

import pytest

from tradelog_app.data.models import Bar, Country, ExecutionRecord, Side


DOMESTIC_EXPORT = "\n".join([
    '"約定履歴照会"',
    '"検索件数","3件"',
    '',
    '"約定日","銘柄","銘柄コード","市場","取引","期限","預り","課税","約定数量","約定単価","手数料/諸経費等","税額","受渡日","受渡金額/決済損益"',
    '"2025/10/03","トヨタ自動車","7203","東証","株式現物買","--","特定","--","100","2,500","0","0","2025/10/07","250,000"',
    '"2025/10/10","トヨタ自動車","7203","東証","株式現物売","--","特定","--","100","2,650","0","0","2025/10/14","265,000"',
    '"2025/10/15","eMAXIS Slim 全世界株式","--","--","投信金額買付","--","特定","--","10,000","1","0","0","2025/10/16","10,000"',
])

FOREIGN_EXPORT = "\n".join([
    '"国内約定日","通貨","銘柄名","取引","預り区分","約定数量","約定単価","約定代金"',
    '"2026年01月30日","USD","アメンタム ホールディングス インク AMTM / New York Stock Exchange","買付","特定","10","25.50","255.00"',
    '"2026年02月12日","USD","アップル AAPL / NASDAQ","買付","特定","5","230.10","1,150.50"',
    '"2026年02月20日","USD","アメンタム ホールディングス インク AMTM / New York Stock Exchange","売却","特定","10","27.00","270.00"',
])


@pytest.fixture
def domestic_export() -> str:
    """Domestic-layout execution history with a fund row."""
    return DOMESTIC_EXPORT


@pytest.fixture
def foreign_export() -> str:
    """Foreign-layout execution history."""
    return FOREIGN_EXPORT


@pytest.fixture
def make_execution() -> Callable[..., ExecutionRecord]:
    """Factory for execution records with sensible defaults."""
    def _make(side: Side, quantity: float, price: float, day: date,
              symbol: str = "7203", country: Country = Country.JP,
              name: str = "トヨタ自動車", id: Optional[int] = None) -> ExecutionRecord:
        return ExecutionRecord(
            symbol=symbol,
            name=name,
            country=country,
            date=day,
            side=side,
            price=price,
            quantity=quantity,
            id=id,
        )
    return _make


@pytest.fixture
def weekday_bars() -> list[Bar]:
    """Five daily bars, Monday 2025-01-06 through Friday 2025-01-10."""
    opens = [10, 11, 9, 12, 13]
    highs = [12, 13, 11, 14, 15]
    lows = [9, 10, 8, 11, 12]
    closes = [11, 9, 12, 13, 14]
    volumes = [100, 200, 150, 300, 250]
    return [
        Bar(date=date(2025, 1, 6 + i), open=o, high=h, low=l, close=c, volume=v)
        for i, (o, h, l, c, v) in enumerate(zip(opens, highs, lows, closes, volumes))
    ]
