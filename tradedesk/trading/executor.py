"""
Trade executor - all-or-nothing buys and sells against cash and positions.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

import pandas as pd
from loguru import logger

from ..account.book import PositionBook, check_quantity
from ..account.cash import CashLedger
from ..data.records import JournalEntry
from ..data.store import DurableStore
from ..domain.asset import AssetPrice
from ..domain.clock import format_timestamp, local_now
from ..domain.errors import InsufficientFunds, MarketClosed, StoreUnavailable
from ..domain.fx import FXConverter
from ..events import EventSink, NullSink
from ..market.catalog import MarketCatalog

BUY = "BUY"
SELL = "SELL"


@dataclass
class TradeRecord:
    """Record of a single executed trade."""
    timestamp: str
    account_id: int
    asset_id: str
    direction: str          # 'BUY' or 'SELL'
    quantity: float
    price: float            # native currency
    market: str
    amount_inr: float       # cost for buys, proceeds for sells
    cash_after: float
    persisted: bool = True  # False if the post-trade save failed


class TradeExecutor:
    """
    Executes trades as one logical unit:
    validate -> price -> check affordability/ownership -> mutate cash and
    position back to back -> persist -> journal + events.

    Every check runs before the first mutation, so a rejected trade leaves
    cash, positions and files untouched.
    """

    def __init__(
        self,
        catalog: MarketCatalog,
        book: PositionBook,
        fx: FXConverter,
        ledger: CashLedger,
        store: Optional[DurableStore] = None,
        sink: Optional[EventSink] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.catalog = catalog
        self.book = book
        self.fx = fx
        self.ledger = ledger
        self._store = store
        self._sink = sink or NullSink()
        self._clock = clock
        self._trade_log: List[TradeRecord] = []

    def __repr__(self) -> str:
        return f"TradeExecutor(trades={len(self._trade_log)})"

    @property
    def trade_log(self) -> List[TradeRecord]:
        return self._trade_log

    def _tradable_asset(self, asset_id: str, now: datetime) -> AssetPrice:
        asset = self.catalog.require(asset_id)
        if not asset.is_open(now):
            raise MarketClosed(asset.asset_id, asset.market, asset.open_hour, asset.close_hour)
        return asset

    def quote_inr(self, asset: AssetPrice, quantity: float) -> float:
        """INR value of `quantity` units at the asset's current price."""
        return self.fx.to_inr(asset.price * quantity, asset.market)

    def buy(self, account_id: int, asset_id: str, quantity: float, now: Optional[datetime] = None) -> TradeRecord:
        """
        Buy at the current catalog price, paying in INR.

        Raises: InvalidQuantity, AssetNotFound, MarketClosed, InsufficientFunds
        """
        now = now or self._clock()
        quantity = self.book.check_increase(account_id, asset_id, quantity)
        asset = self._tradable_asset(asset_id, now)
        cost_inr = self.quote_inr(asset, quantity)

        available = self.ledger.get_cash(account_id)
        if cost_inr > available:
            raise InsufficientFunds(account_id, cost_inr, available)

        cash_after = self.ledger.debit(account_id, cost_inr)
        self.book.open_or_increase(account_id, asset, quantity, asset.price)

        return self._settle(BUY, account_id, asset, quantity, cost_inr, cash_after, now)

    def sell(self, account_id: int, asset_id: str, quantity: float, now: Optional[datetime] = None) -> TradeRecord:
        """
        Sell at the current catalog price, crediting INR proceeds.

        Raises: InvalidQuantity, AssetNotFound, MarketClosed, NoSuchPosition, InsufficientQuantity
        """
        now = now or self._clock()
        quantity = check_quantity(quantity)
        asset = self._tradable_asset(asset_id, now)
        self.book.check_reduce(account_id, asset.asset_id, quantity)
        proceeds_inr = self.quote_inr(asset, quantity)

        self.book.reduce(account_id, asset.asset_id, quantity)
        cash_after = self.ledger.credit(account_id, proceeds_inr)

        return self._settle(SELL, account_id, asset, quantity, proceeds_inr, cash_after, now)

    def _settle(
        self,
        direction: str,
        account_id: int,
        asset: AssetPrice,
        quantity: float,
        amount_inr: float,
        cash_after: float,
        now: datetime,
    ) -> TradeRecord:
        """Persist, journal and announce an applied trade."""
        timestamp = format_timestamp(now)
        persisted = True
        verb = "Bought" if direction == BUY else "Sold"
        note = f"{verb} {asset.asset_id} x {quantity:.4f}"

        if self._store is not None:
            try:
                self._store.save_positions(self.book.all())
            except StoreUnavailable as exc:
                persisted = False
                logger.error(f"{direction} for account {account_id} applied in memory only: {exc}")
            try:
                self._store.append_journal(JournalEntry(
                    account_id=account_id,
                    timestamp=timestamp,
                    kind=direction,
                    amount=-amount_inr if direction == BUY else amount_inr,
                    balance_after=cash_after,
                    note=note,
                ))
            except StoreUnavailable as exc:
                persisted = False
                logger.error(f"Journal entry for account {account_id} lost: {exc}")

        trade = TradeRecord(
            timestamp=timestamp,
            account_id=account_id,
            asset_id=asset.asset_id,
            direction=direction,
            quantity=quantity,
            price=asset.price,
            market=asset.market,
            amount_inr=amount_inr,
            cash_after=cash_after,
            persisted=persisted,
        )
        self._trade_log.append(trade)

        logger.info(f"{note} for {amount_inr:.2f} INR (account {account_id}, cash {cash_after:.2f})")
        self._sink.emit(direction, account_id, {
            "asset": asset.asset_id,
            "qty": f"{quantity:.4f}",
            "inr": f"{amount_inr:.2f}",
            "message": note,
        })
        return trade

    def trade_summary(self) -> pd.DataFrame:
        """Get the session's trade log as a DataFrame."""
        if not self._trade_log:
            return pd.DataFrame()

        records = [
            {
                "timestamp": t.timestamp,
                "account_id": t.account_id,
                "asset_id": t.asset_id,
                "direction": t.direction,
                "quantity": t.quantity,
                "price": t.price,
                "market": t.market,
                "amount_inr": t.amount_inr,
                "cash_after": t.cash_after,
            }
            for t in self._trade_log
        ]
        return pd.DataFrame(records)
