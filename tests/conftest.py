"""
Shared fixtures for the desk tests.
"""
from datetime import datetime

import pytest

from tradedesk.account.book import PositionBook
from tradedesk.account.cash import CashBook
from tradedesk.domain.asset import AssetPrice
from tradedesk.domain.fx import FXConverter, FXRates
from tradedesk.events import EventSink
from tradedesk.market.catalog import MarketCatalog


class RecordingSink(EventSink):
    """Keeps emitted events in memory."""

    def __init__(self):
        self.events = []

    def emit(self, event_kind, account_id, payload=None):
        self.events.append((event_kind, account_id, dict(payload or {})))

    def kinds(self):
        return [kind for kind, _, _ in self.events]


class FixedRng:
    """Stand-in for random.Random that always draws the same value."""

    def __init__(self, value: float):
        self.value = value
        self.draws = 0

    def uniform(self, a, b):
        self.draws += 1
        return self.value


# Monday 10:00 local: IN, US and EU sessions all open
TRADING_HOURS = datetime(2025, 1, 6, 10, 0, 0)
# 20:00 local: only the always-open asset trades
AFTER_HOURS = datetime(2025, 1, 6, 20, 0, 0)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def aapl():
    return AssetPrice("AAPL", "Apple Inc", 190.0, 0.02, "US", 9, 17, "2025-01-06 09:00:00")


@pytest.fixture
def infy():
    return AssetPrice("INFY", "Infosys Ltd", 1500.0, 0.01, "IN", 9, 15, "2025-01-06 09:00:00")


@pytest.fixture
def sie():
    return AssetPrice("SIE", "Siemens", 120.0, 0.018, "EU", 8, 18, "2025-01-06 09:00:00")


@pytest.fixture
def btc():
    return AssetPrice("BTC", "Bitcoin", 35000.0, 0.05, "US", 0, 24, "2025-01-06 09:00:00")


@pytest.fixture
def fx():
    return FXConverter(FXRates(83.5, 88.2, "2025-01-06 09:00:00"))


@pytest.fixture
def catalog(aapl, infy, sie, btc):
    return MarketCatalog([aapl, infy, sie, btc], rng=FixedRng(0.0))


@pytest.fixture
def book():
    return PositionBook()


@pytest.fixture
def cash():
    return CashBook({1001: 50000.0, 1002: 1000.0})
