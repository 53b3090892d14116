"""
Tests for the desk context lifecycle, config and event sinks.
"""
from pathlib import Path

import pytest

from conftest import TRADING_HOURS
from tradedesk.account.cash import CashBook
from tradedesk.config import DeskConfig
from tradedesk.context import DeskContext
from tradedesk.events import AuditLogSink, CompositeSink, NotificationSink


@pytest.fixture
def config(tmp_path):
    return DeskConfig(data_dir=tmp_path, seed=42)


class TestDeskContext:
    """Tests for DeskContext open/flush."""

    def test_open_seeds_fresh_directory(self, config):
        desk = DeskContext.open(config, now=TRADING_HOURS)

        assert len(desk.catalog) == 6
        assert (config.data_dir / "prices.txt").exists()
        assert (config.data_dir / "fx_rates.txt").read_text().startswith("83.500000|88.200000|")
        audit = (config.data_dir / "admin_audit.txt").read_text()
        assert "INITIALIZED_DEFAULT_PRICES" in audit

    def test_state_survives_restart(self, config):
        cash = CashBook({1001: 50000.0})
        with DeskContext.open(config, ledger=cash, now=TRADING_HOURS) as desk:
            desk.executor.buy(1001, "AAPL", 2, now=TRADING_HOURS)
            desk.fx.update_rates(84.0, 89.0, TRADING_HOURS)
            desk.catalog.set_price("AAPL", 200.0, TRADING_HOURS)

        reopened = DeskContext.open(config, ledger=cash, now=TRADING_HOURS)

        pos = reopened.book.get(1001, "AAPL")
        assert (pos.quantity, pos.avg_price) == (2.0, 190.0)
        assert reopened.fx.rates.inr_per_usd == 84.0
        assert reopened.catalog.get("AAPL").price == 200.0
        assert reopened.valuator.unrealized_pl(1001) == pytest.approx(2 * 10.0 * 84.0)

    def test_trade_writes_audit_and_notification(self, config):
        desk = DeskContext.open(config, ledger=CashBook({1001: 50000.0}), now=TRADING_HOURS)
        desk.executor.buy(1001, "AAPL", 2, now=TRADING_HOURS)

        audit_lines = (config.data_dir / "admin_audit.txt").read_text().splitlines()
        assert audit_lines[-1].split("|")[1:] == ["BUY", "1001", "asset=AAPL", "qty=2.0000", "inr=31730.00"]

        notes = (config.data_dir / "notifications.txt").read_text().splitlines()
        assert notes[-1].endswith("|1001|Bought AAPL x 2.0000")

        statement = desk.store.load_journal(account_id=1001, limit=10)
        assert [e.kind for e in statement] == ["BUY"]

    def test_flush_reports_failure(self, config):
        desk = DeskContext.open(config, now=TRADING_HOURS)
        config.data_dir.joinpath("holdings.txt").mkdir()

        assert desk.flush() is False

    def test_seeded_rng_is_reproducible(self, tmp_path):
        first = DeskContext.open(DeskConfig(data_dir=tmp_path / "a", seed=7), now=TRADING_HOURS)
        second = DeskContext.open(DeskConfig(data_dir=tmp_path / "b", seed=7), now=TRADING_HOURS)

        first.catalog.tick(TRADING_HOURS)
        second.catalog.tick(TRADING_HOURS)

        assert [a.price for a in first.catalog.assets()] == [a.price for a in second.catalog.assets()]


class TestDeskConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        config = DeskConfig()
        assert config.prices_file == "prices.txt"
        assert config.big_move_factor == 5.0
        assert config.seed is None

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TRADEDESK_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("TRADEDESK_SEED", "11")
        monkeypatch.setenv("TRADEDESK_DEFAULT_INR_PER_USD", "82.0")

        config = DeskConfig.from_env(big_move_factor=3.0)

        assert config.data_dir == Path(tmp_path)
        assert config.seed == 11
        assert config.default_inr_per_usd == 82.0
        assert config.big_move_factor == 3.0


class TestEventSinks:
    """Tests for the append-only sinks."""

    def test_audit_line_format(self, tmp_path):
        sink = AuditLogSink(tmp_path / "audit.txt")
        sink.emit("ADMIN_SET_PRICE", None, {"asset": "AAPL", "old": "190.0000", "new": "200.0000"})

        fields = (tmp_path / "audit.txt").read_text().rstrip("\n").split("|")
        assert fields[1:] == ["ADMIN_SET_PRICE", "asset=AAPL", "old=190.0000", "new=200.0000"]

    def test_notification_skips_desk_wide_events(self, tmp_path):
        sink = NotificationSink(tmp_path / "notes.txt")
        sink.emit("MARKET_TICK", None, {"moved": 3})
        assert not (tmp_path / "notes.txt").exists()

    def test_unwritable_sink_does_not_raise(self, tmp_path):
        sink = CompositeSink([AuditLogSink(tmp_path / "missing" / "audit.txt")])
        sink.emit("BUY", 1001, {"message": "Bought AAPL x 1.0000"})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
