"""
Market catalog - tradable assets, trading hours and the stochastic price tick.
"""
import random
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import pandas as pd
from loguru import logger

from ..data.store import DurableStore
from ..domain.asset import PRICE_FLOOR, AssetPrice
from ..domain.errors import AssetNotFound, StoreUnavailable
from ..events import EventSink, NullSink
from .defaults import default_assets

BIG_MOVE_FACTOR = 5.0


class MarketCatalog:
    """
    Set of tradable assets keyed by asset id, in seeding order.

    Prices move only through `tick` (random walk for open assets) or the
    administrative `set_price`; each mutation rewrites the price file atomically.
    """

    def __init__(
        self,
        assets: Optional[Iterable[AssetPrice]] = None,
        store: Optional[DurableStore] = None,
        rng: Optional[random.Random] = None,
        sink: Optional[EventSink] = None,
        price_floor: float = PRICE_FLOOR,
        big_move_factor: float = BIG_MOVE_FACTOR,
    ):
        self._assets: Dict[str, AssetPrice] = {}
        for asset in assets or []:
            self._assets[asset.asset_id] = asset
        self._store = store
        self._rng = rng or random.Random()
        self._sink = sink or NullSink()
        self.price_floor = price_floor
        self.big_move_factor = big_move_factor

    def __repr__(self) -> str:
        return f"MarketCatalog(assets={len(self._assets)})"

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def assets(self) -> List[AssetPrice]:
        return list(self._assets.values())

    def get(self, asset_id: str) -> Optional[AssetPrice]:
        return self._assets.get(asset_id)

    def require(self, asset_id: str) -> AssetPrice:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFound(asset_id)
        return asset

    def add(self, asset: AssetPrice) -> None:
        """Register an asset (replacing one with the same id) and persist."""
        self._assets[asset.asset_id] = asset
        self._persist()

    def is_open(self, asset_id: str, now: datetime) -> bool:
        return self.require(asset_id).is_open(now)

    def _persist(self) -> bool:
        if self._store is None:
            return True
        try:
            self._store.save_prices(self._assets.values())
            return True
        except StoreUnavailable as exc:
            logger.error(f"Price catalog not persisted: {exc}")
            return False

    def ensure_seeded(self, now: datetime) -> bool:
        """
        Install the default asset set if the catalog is empty.
        Returns: True if defaults were installed
        """
        if self._assets:
            return False
        for asset in default_assets(now):
            self._assets[asset.asset_id] = asset
        self._persist()
        logger.info(f"Seeded catalog with {len(self._assets)} default assets")
        self._sink.emit("INITIALIZED_DEFAULT_PRICES", None, {"assets": len(self._assets)})
        return True

    def tick(self, now: datetime, big_move: bool = False) -> List[str]:
        """
        Apply one random price move to every asset open at `now`.
        change = U[-1, 1] * volatility (times big_move_factor for an admin big move)

        Returns: Ids of the assets that moved
        """
        if not self._assets:
            logger.info("Tick skipped: catalog is empty")
            return []

        scale = self.big_move_factor if big_move else 1.0
        moved = []
        for asset in self._assets.values():
            if not asset.is_open(now):
                continue
            change = self._rng.uniform(-1.0, 1.0) * asset.volatility * scale
            asset.apply_change(change, now, self.price_floor)
            moved.append(asset.asset_id)

        self._persist()
        kind = "ADMIN_RANDOMIZE_PRICES" if big_move else "MARKET_TICK"
        logger.info(f"{kind}: {len(moved)}/{len(self._assets)} assets moved")
        self._sink.emit(kind, None, {"moved": len(moved)})
        return moved

    def set_price(self, asset_id: str, price: float, now: datetime) -> float:
        """
        Administrative price override.
        Returns: The previous price
        """
        asset = self.require(asset_id)
        old = asset.set_price(price, now)
        self._persist()
        logger.info(f"Price of {asset_id} set {old:.4f} -> {price:.4f}")
        self._sink.emit("ADMIN_SET_PRICE", None, {"asset": asset_id, "old": f"{old:.4f}", "new": f"{price:.4f}"})
        return old

    def listing(self, now: datetime) -> pd.DataFrame:
        """Tick once (live simulation on display), then tabulate the catalog."""
        self.tick(now)
        records = [
            {
                "asset_id": a.asset_id,
                "market": a.market,
                "name": a.name,
                "price": a.price,
                "currency": a.currency,
                "open": a.is_open(now),
                "last_update": a.last_update,
            }
            for a in self._assets.values()
        ]
        return pd.DataFrame(records, columns=["asset_id", "market", "name", "price", "currency", "open", "last_update"])
