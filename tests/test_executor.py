"""
Tests for trading layer: buy/sell execution and its all-or-nothing guarantees.
"""
from datetime import datetime

import pytest

from conftest import AFTER_HOURS, TRADING_HOURS
from tradedesk.account.cash import CashBook
from tradedesk.data.store import DurableStore
from tradedesk.domain.errors import (
    AssetNotFound,
    InsufficientFunds,
    InsufficientQuantity,
    InvalidQuantity,
    MarketClosed,
    NoSuchPosition,
    StoreUnavailable,
)
from tradedesk.trading.executor import TradeExecutor


class ReadOnlyStore(DurableStore):
    """Store whose position file cannot be written."""

    def save_positions(self, positions):
        raise StoreUnavailable(str(self.holdings_path), "read-only")


@pytest.fixture
def store(tmp_path):
    return DurableStore(tmp_path)


@pytest.fixture
def executor(catalog, book, fx, cash, store, sink):
    return TradeExecutor(catalog, book, fx, cash, store=store, sink=sink, clock=lambda: TRADING_HOURS)


class TestBuy:
    """Tests for buys."""

    def test_buy_scenario(self, executor, cash, book):
        trade = executor.buy(1001, "AAPL", 2)

        assert trade.amount_inr == 31730.00
        assert cash.get_cash(1001) == 18270.00
        assert trade.cash_after == 18270.00
        pos = book.get(1001, "AAPL")
        assert (pos.quantity, pos.avg_price) == (2.0, 190.0)

    def test_cost_matches_converter(self, executor, cash, fx, sie):
        before = cash.get_cash(1001)
        trade = executor.buy(1001, "SIE", 3.5)

        expected = fx.to_inr(sie.price * 3.5, "EU")
        assert trade.amount_inr == expected
        assert cash.get_cash(1001) == before - expected

    def test_second_buy_updates_average(self, executor, book, aapl):
        executor.buy(1001, "AAPL", 2)
        aapl.set_price(200.0, TRADING_HOURS)
        executor.buy(1001, "AAPL", 1)

        pos = book.get(1001, "AAPL")
        assert pos.avg_price == pytest.approx((2 * 190.0 + 1 * 200.0) / 3)
        assert pos.quantity == 3.0

    def test_insufficient_funds_changes_nothing(self, executor, cash, book, store, sink):
        with pytest.raises(InsufficientFunds) as excinfo:
            executor.buy(1002, "AAPL", 1)

        assert excinfo.value.required == pytest.approx(190.0 * 83.5)
        assert cash.get_cash(1002) == 1000.0
        assert len(book) == 0
        assert not store.holdings_path.exists()
        assert sink.events == []

    def test_unknown_asset(self, executor, cash):
        with pytest.raises(AssetNotFound):
            executor.buy(1001, "MSFT", 1)
        assert cash.get_cash(1001) == 50000.0

    def test_market_closed(self, executor, cash, book):
        with pytest.raises(MarketClosed):
            executor.buy(1001, "AAPL", 1, now=AFTER_HOURS)
        assert cash.get_cash(1001) == 50000.0
        assert len(book) == 0

    def test_always_open_asset_after_hours(self, executor, book):
        executor.buy(1001, "BTC", 0.01, now=AFTER_HOURS)
        assert book.held_quantity(1001, "BTC") == 0.01

    def test_dust_buy_rejected_before_debit(self, executor, cash, book, store, sink):
        with pytest.raises(InvalidQuantity):
            executor.buy(1001, "BTC", 5e-7)

        assert cash.get_cash(1001) == 50000.0
        assert len(book) == 0
        assert not store.holdings_path.exists()
        assert sink.events == []

    @pytest.mark.parametrize("qty", [0, -2, float("nan"), float("inf")])
    def test_invalid_quantity(self, executor, cash, qty):
        with pytest.raises(InvalidQuantity):
            executor.buy(1001, "AAPL", qty)
        assert cash.get_cash(1001) == 50000.0


class TestSell:
    """Tests for sells."""

    def test_sell_scenario(self, executor, cash, book, fx, aapl):
        executor.buy(1001, "AAPL", 2)
        aapl.set_price(200.0, TRADING_HOURS)
        executor.buy(1001, "AAPL", 1)

        aapl.set_price(210.0, TRADING_HOURS)
        fx.update_rates(84.0, 88.2, TRADING_HOURS)
        cash_before = cash.get_cash(1001)

        trade = executor.sell(1001, "AAPL", 3)

        assert trade.amount_inr == 52920.00
        assert cash.get_cash(1001) == pytest.approx(cash_before + 52920.00)
        assert book.get(1001, "AAPL") is None

    def test_partial_sell_keeps_average(self, executor, book):
        executor.buy(1001, "INFY", 10)
        executor.sell(1001, "INFY", 4)

        pos = book.get(1001, "INFY")
        assert pos.quantity == 6.0
        assert pos.avg_price == 1500.0

    def test_oversell_rejected(self, executor, cash, book):
        executor.buy(1001, "AAPL", 2)
        cash_before = cash.get_cash(1001)

        with pytest.raises(InsufficientQuantity):
            executor.sell(1001, "AAPL", 3)

        assert book.held_quantity(1001, "AAPL") == 2.0
        assert cash.get_cash(1001) == cash_before

    def test_sell_full_total_of_fractional_buys(self, executor, cash, store):
        executor.buy(1001, "INFY", 0.1)
        executor.buy(1001, "INFY", 0.7)

        trade = executor.sell(1001, "INFY", 0.8)

        assert trade.amount_inr == pytest.approx(0.8 * 1500.0)
        assert cash.get_cash(1001) == pytest.approx(50000.0)
        assert store.load_positions() == []

    def test_sell_without_position(self, executor):
        with pytest.raises(NoSuchPosition):
            executor.sell(1001, "AAPL", 1)

    def test_sell_gated_by_market_hours(self, executor, book):
        executor.buy(1001, "AAPL", 2)
        with pytest.raises(MarketClosed):
            executor.sell(1001, "AAPL", 1, now=AFTER_HOURS)
        assert book.held_quantity(1001, "AAPL") == 2.0

    def test_round_trip_conserves_cash_at_flat_price(self, executor, cash):
        executor.buy(1001, "SIE", 4)
        executor.sell(1001, "SIE", 4)
        assert cash.get_cash(1001) == pytest.approx(50000.0)


class TestSettlement:
    """Tests for persistence, journal and events after a trade."""

    def test_trade_is_persisted_and_journaled(self, executor, store):
        executor.buy(1001, "AAPL", 2)
        executor.sell(1001, "AAPL", 1)

        positions = store.load_positions()
        assert [(p.key, p.quantity) for p in positions] == [((1001, "AAPL"), 1.0)]

        journal = store.load_journal(account_id=1001)
        assert [e.kind for e in journal] == ["BUY", "SELL"]
        assert journal[0].amount == -31730.00
        assert journal[0].balance_after == 18270.00
        assert journal[0].note == "Bought AAPL x 2.0000"
        assert journal[1].amount == pytest.approx(190.0 * 83.5)

    def test_one_audit_event_per_trade(self, executor, sink):
        executor.buy(1001, "AAPL", 2)

        assert sink.kinds() == ["BUY"]
        kind, account_id, payload = sink.events[0]
        assert account_id == 1001
        assert payload["asset"] == "AAPL"
        assert payload["inr"] == "31730.00"

    def test_save_failure_keeps_trade_in_memory(self, tmp_path, catalog, book, fx, cash, sink):
        store = ReadOnlyStore(tmp_path)
        executor = TradeExecutor(catalog, book, fx, cash, store=store, sink=sink, clock=lambda: TRADING_HOURS)

        trade = executor.buy(1001, "AAPL", 2)

        assert not trade.persisted
        assert book.held_quantity(1001, "AAPL") == 2.0
        assert cash.get_cash(1001) == 18270.00
        assert len(store.load_journal()) == 1

    def test_trade_summary(self, executor):
        assert executor.trade_summary().empty
        executor.buy(1001, "AAPL", 2)
        executor.sell(1001, "AAPL", 2)

        summary = executor.trade_summary()
        assert list(summary["direction"]) == ["BUY", "SELL"]
        assert summary["amount_inr"].iloc[0] == 31730.00

    def test_works_without_store(self, catalog, book, fx):
        executor = TradeExecutor(catalog, book, fx, CashBook({7: 100000.0}))
        trade = executor.buy(7, "BTC", 0.01, now=datetime(2025, 1, 6, 3, 0))
        assert trade.persisted
        assert trade.direction == "BUY"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
