"""
FX rates and INR conversion for the three desk currencies.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from loguru import logger

from .asset import MARKET_EU, MARKET_US
from .clock import format_timestamp
from .errors import StoreUnavailable

if TYPE_CHECKING:
    from ..data.store import DurableStore
    from ..events import EventSink

DEFAULT_INR_PER_USD = 83.5
DEFAULT_INR_PER_EUR = 88.2


@dataclass(frozen=True)
class FXRates:
    """Reference rates, expressed as INR per unit of foreign currency."""
    inr_per_usd: float = DEFAULT_INR_PER_USD
    inr_per_eur: float = DEFAULT_INR_PER_EUR
    last_update: str = ""

    def __post_init__(self):
        for label, rate in (("inr_per_usd", self.inr_per_usd), ("inr_per_eur", self.inr_per_eur)):
            if not math.isfinite(rate) or rate <= 0:
                raise ValueError(f"{label} must be positive: {rate!r}")


class FXConverter:
    """
    Converts native amounts to INR at the *current* rates.

    The converter is the single owner of the live rates; every valuation and
    trade reads them through it, so a rate update is visible everywhere at once.
    """

    def __init__(
        self,
        rates: Optional[FXRates] = None,
        store: Optional["DurableStore"] = None,
        sink: Optional["EventSink"] = None,
    ):
        self._rates = rates or FXRates()
        self._store = store
        self._sink = sink

    def __repr__(self) -> str:
        return f"FXConverter(USD={self._rates.inr_per_usd}, EUR={self._rates.inr_per_eur})"

    @property
    def rates(self) -> FXRates:
        return self._rates

    def rate_for(self, market: str) -> float:
        """INR per unit of the market's currency; 1.0 for IN and unknown markets."""
        if market == MARKET_US:
            return self._rates.inr_per_usd
        if market == MARKET_EU:
            return self._rates.inr_per_eur
        return 1.0

    def to_inr(self, amount_native: float, market: str) -> float:
        return amount_native * self.rate_for(market)

    def update_rates(self, inr_per_usd: float, inr_per_eur: float, now: datetime) -> FXRates:
        """
        Administrative rate change. Persists atomically and emits ADMIN_SET_FX.
        A failed save is logged; the new rates stay in effect in memory.
        """
        rates = FXRates(inr_per_usd, inr_per_eur, format_timestamp(now))
        self._rates = rates
        logger.info(f"FX updated: INR/USD={inr_per_usd:.6f} INR/EUR={inr_per_eur:.6f}")

        if self._store is not None:
            try:
                self._store.save_fx(rates)
            except StoreUnavailable as exc:
                logger.error(f"FX rates not persisted: {exc}")
        if self._sink is not None:
            self._sink.emit(
                "ADMIN_SET_FX",
                None,
                {"INR_USD": f"{inr_per_usd:.6f}", "INR_EUR": f"{inr_per_eur:.6f}"},
            )
        return rates
