"""
Desk context - owns every state handle for one process.

    with DeskContext.open(DeskConfig(data_dir=Path("data")), ledger=cash) as desk:
        desk.executor.buy(1001, "AAPL", 2)
        desk.valuator.summary(1001)
"""
import random
from datetime import datetime
from typing import Optional

from loguru import logger

from .account.book import PositionBook
from .account.cash import CashBook, CashLedger
from .config import DeskConfig
from .data.store import DurableStore
from .domain.clock import format_timestamp, local_now
from .domain.errors import StoreUnavailable
from .domain.fx import FXConverter, FXRates
from .events import AuditLogSink, CompositeSink, EventSink, NotificationSink
from .market.catalog import MarketCatalog
from .portfolio.valuator import PortfolioValuator
from .trading.executor import TradeExecutor


class DeskContext:
    """
    Process-wide container for the store, catalog, FX converter, position
    book, valuator and executor. Created by `open` (load + seed) and flushed
    on `close` or context-manager exit.
    """

    def __init__(
        self,
        config: DeskConfig,
        store: DurableStore,
        catalog: MarketCatalog,
        fx: FXConverter,
        book: PositionBook,
        ledger: CashLedger,
        sink: EventSink,
    ):
        self.config = config
        self.store = store
        self.catalog = catalog
        self.fx = fx
        self.book = book
        self.ledger = ledger
        self.sink = sink
        self.valuator = PortfolioValuator(book, catalog, fx)
        self.executor = TradeExecutor(catalog, book, fx, ledger, store=store, sink=sink)

    def __repr__(self) -> str:
        return f"DeskContext({self.config.data_dir}, {self.catalog!r}, {self.book!r})"

    @classmethod
    def open(
        cls,
        config: Optional[DeskConfig] = None,
        ledger: Optional[CashLedger] = None,
        sink: Optional[EventSink] = None,
        now: Optional[datetime] = None,
    ) -> "DeskContext":
        """Load all persisted state, seed defaults where missing."""
        config = config or DeskConfig.from_env()
        now = now or local_now()
        data_dir = config.data_dir

        store = DurableStore(
            data_dir,
            prices_file=config.prices_file,
            fx_file=config.fx_file,
            holdings_file=config.holdings_file,
            journal_file=config.journal_file,
        )
        try:
            store.ensure_layout()
        except StoreUnavailable as exc:
            logger.error(f"Data directory unavailable, running in memory: {exc}")

        if sink is None:
            sink = CompositeSink([
                AuditLogSink(data_dir / config.audit_file),
                NotificationSink(data_dir / config.notifications_file),
            ])

        rates = store.load_fx()
        fx_missing = rates is None
        if fx_missing:
            rates = FXRates(config.default_inr_per_usd, config.default_inr_per_eur, format_timestamp(now))
        fx = FXConverter(rates, store=store, sink=sink)

        catalog = MarketCatalog(
            store.load_prices(),
            store=store,
            rng=random.Random(config.seed),
            sink=sink,
            price_floor=config.price_floor,
            big_move_factor=config.big_move_factor,
        )
        catalog.ensure_seeded(now)

        book = PositionBook(config.quantity_epsilon)
        book.load(store.load_positions())

        desk = cls(config, store, catalog, fx, book, ledger or CashBook(), sink)
        if fx_missing:
            desk._save("FX rates", lambda: store.save_fx(fx.rates))

        logger.info(f"Desk opened at {data_dir}: {len(catalog)} assets, {len(book)} positions")
        return desk

    def _save(self, label: str, action) -> bool:
        try:
            action()
            return True
        except StoreUnavailable as exc:
            logger.error(f"{label} not saved: {exc}")
            return False

    def flush(self) -> bool:
        """
        Write prices, FX rates and positions back to the store.
        Returns: True if every save succeeded
        """
        results = [
            self._save("Price catalog", lambda: self.store.save_prices(self.catalog.assets())),
            self._save("FX rates", lambda: self.store.save_fx(self.fx.rates)),
            self._save("Positions", lambda: self.store.save_positions(self.book.all())),
        ]
        return all(results)

    def close(self) -> bool:
        ok = self.flush()
        logger.info(f"Desk closed ({'saved' if ok else 'save failed'})")
        return ok

    def __enter__(self) -> "DeskContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
