"""
Tradable asset price record - the core domain object of the market catalog.
"""
import math
from datetime import datetime
from typing import Dict

from .clock import format_timestamp

MARKET_IN = "IN"
MARKET_US = "US"
MARKET_EU = "EU"

# Market -> native currency
MARKET_CURRENCY: Dict[str, str] = {
    MARKET_IN: "INR",
    MARKET_US: "USD",
    MARKET_EU: "EUR",
}

PRICE_FLOOR = 0.0001

_FORBIDDEN_TEXT = ("|", "\n", "\r")


def check_text_field(field_name: str, value: str) -> str:
    """Reject text that would break the pipe-delimited record format."""
    if any(ch in value for ch in _FORBIDDEN_TEXT):
        raise ValueError(f"{field_name} must not contain '|' or line breaks: {value!r}")
    return value


def is_market_open(open_hour: int, close_hour: int, hour: int) -> bool:
    """
    Half-open trading window [open_hour, close_hour) on the local hour.
    A window with open_hour > close_hour wraps past midnight (20 -> 4 is open
    at 23 and at 2). close_hour == 24 with open_hour == 0 is open all day.
    """
    if open_hour <= close_hour:
        return open_hour <= hour < close_hour
    return hour >= open_hour or hour < close_hour


class AssetPrice:
    """
    A tradable asset with its live native-currency price, volatility and
    trading-hours window (e.g., AAPL on the US market, 09:00-17:00).
    """

    def __init__(
        self,
        asset_id: str,
        name: str,
        price: float,
        volatility: float,
        market: str,
        open_hour: int,
        close_hour: int,
        last_update: str = "",
    ):
        if not asset_id:
            raise ValueError("asset_id must not be empty")
        if not math.isfinite(price) or price <= 0:
            raise ValueError(f"price must be positive: {price!r}")
        if not math.isfinite(volatility) or volatility < 0:
            raise ValueError(f"volatility must be non-negative: {volatility!r}")
        if not 0 <= open_hour <= 23:
            raise ValueError(f"open_hour out of range: {open_hour}")
        if not 0 <= close_hour <= 24:
            raise ValueError(f"close_hour out of range: {close_hour}")

        self.asset_id = check_text_field("asset_id", asset_id)
        self.name = check_text_field("name", name)
        self.price = price
        self.volatility = volatility
        self.market = check_text_field("market", market)
        self.open_hour = open_hour
        self.close_hour = close_hour
        self.last_update = check_text_field("last_update", last_update)

    def __repr__(self) -> str:
        return f"AssetPrice({self.asset_id}, {self.market}, price={self.price:.4f}, vol={self.volatility})"

    def __hash__(self) -> int:
        return hash(self.asset_id)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AssetPrice):
            return False
        return self.asset_id == other.asset_id

    @property
    def currency(self) -> str:
        """Native currency; unknown markets are treated as INR."""
        return MARKET_CURRENCY.get(self.market, "INR")

    def is_open(self, now: datetime) -> bool:
        """Check whether the asset trades at the given local time."""
        return is_market_open(self.open_hour, self.close_hour, now.hour)

    def apply_change(self, change: float, now: datetime, floor: float = PRICE_FLOOR) -> float:
        """
        Move the price by a fractional change, clamped to a positive floor.
        Returns: The new price
        """
        self.price = max(self.price * (1.0 + change), floor)
        self.last_update = format_timestamp(now)
        return self.price

    def set_price(self, price: float, now: datetime) -> float:
        """
        Administrative override of the price.
        Returns: The previous price
        """
        if not math.isfinite(price) or price <= 0:
            raise ValueError(f"price must be positive: {price!r}")
        old = self.price
        self.price = price
        self.last_update = format_timestamp(now)
        return old
