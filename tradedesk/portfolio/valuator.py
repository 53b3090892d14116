"""
Portfolio valuation - mark-to-market value and unrealized PnL in INR.
"""
from dataclasses import dataclass
from typing import List

import pandas as pd

from ..account.book import PositionBook
from ..account.position import Position
from ..domain.fx import FXConverter
from ..market.catalog import MarketCatalog


@dataclass(frozen=True)
class PortfolioSummary:
    account_id: int
    value_inr: float
    unrealized_pl_inr: float
    positions: int


class PortfolioValuator:
    """
    Read-only view over the position book, market catalog and FX converter.

    Both legs of unrealized PnL are converted at *today's* FX rates, so the
    figure is "unrealized in today's FX terms": currency moves since purchase
    are not reported as PnL.
    """

    def __init__(self, book: PositionBook, catalog: MarketCatalog, fx: FXConverter):
        self.book = book
        self.catalog = catalog
        self.fx = fx

    def current_price(self, position: Position) -> float:
        """Native price from the catalog, or the cost basis if the asset was withdrawn."""
        asset = self.catalog.get(position.asset_id)
        return asset.price if asset is not None else position.avg_price

    def position_value(self, position: Position) -> float:
        return self.fx.to_inr(position.market_value(self.current_price(position)), position.market)

    def position_pl(self, position: Position) -> float:
        current_inr = self.fx.to_inr(self.current_price(position), position.market)
        avg_inr = self.fx.to_inr(position.avg_price, position.market)
        return (current_inr - avg_inr) * position.quantity

    def mark_to_market(self, account_id: int) -> float:
        return sum(self.position_value(p) for p in self.book.positions_for(account_id))

    def unrealized_pl(self, account_id: int) -> float:
        return sum(self.position_pl(p) for p in self.book.positions_for(account_id))

    def summary(self, account_id: int) -> PortfolioSummary:
        positions = self.book.positions_for(account_id)
        return PortfolioSummary(
            account_id=account_id,
            value_inr=sum(self.position_value(p) for p in positions),
            unrealized_pl_inr=sum(self.position_pl(p) for p in positions),
            positions=len(positions),
        )

    def holdings_frame(self, account_id: int) -> pd.DataFrame:
        """Per-position breakdown for display."""
        columns: List[str] = [
            "asset_id", "market", "quantity", "avg_price", "current_price", "value_inr", "pl_inr",
        ]
        records = [
            {
                "asset_id": p.asset_id,
                "market": p.market,
                "quantity": p.quantity,
                "avg_price": p.avg_price,
                "current_price": self.current_price(p),
                "value_inr": self.position_value(p),
                "pl_inr": self.position_pl(p),
            }
            for p in self.book.positions_for(account_id)
        ]
        return pd.DataFrame(records, columns=columns)
