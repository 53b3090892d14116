"""
Domain Layer: Assets, FX rates and the error taxonomy.
"""
from .asset import AssetPrice, is_market_open, MARKET_IN, MARKET_US, MARKET_EU
from .fx import FXRates, FXConverter
from .errors import (
    TradingError,
    AssetNotFound,
    MarketClosed,
    InsufficientFunds,
    NoSuchPosition,
    InsufficientQuantity,
    InvalidQuantity,
    StoreError,
    StoreUnavailable,
    MalformedRecord,
)

__all__ = [
    "AssetPrice",
    "is_market_open",
    "MARKET_IN",
    "MARKET_US",
    "MARKET_EU",
    "FXRates",
    "FXConverter",
    "TradingError",
    "AssetNotFound",
    "MarketClosed",
    "InsufficientFunds",
    "NoSuchPosition",
    "InsufficientQuantity",
    "InvalidQuantity",
    "StoreError",
    "StoreUnavailable",
    "MalformedRecord",
]
