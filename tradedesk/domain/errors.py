"""
Error taxonomy for the trading desk.
"""
from typing import Optional


class TradingError(Exception):
    """Base class for recoverable trading failures. No state is mutated when raised."""


class AssetNotFound(TradingError):
    def __init__(self, asset_id: str):
        super().__init__(f"Asset not found: {asset_id}")
        self.asset_id = asset_id


class MarketClosed(TradingError):
    def __init__(self, asset_id: str, market: str, open_hour: int, close_hour: int):
        super().__init__(
            f"Market for {asset_id} ({market}) is closed "
            f"(open {open_hour:02d}:00 to {close_hour:02d}:00)"
        )
        self.asset_id = asset_id
        self.market = market
        self.open_hour = open_hour
        self.close_hour = close_hour


class InsufficientFunds(TradingError):
    def __init__(self, account_id: int, required: float, available: float):
        super().__init__(
            f"Insufficient cash for account {account_id}: need {required:.2f} INR, have {available:.2f} INR"
        )
        self.account_id = account_id
        self.required = required
        self.available = available


class NoSuchPosition(TradingError):
    def __init__(self, account_id: int, asset_id: str):
        super().__init__(f"Account {account_id} holds no position in {asset_id}")
        self.account_id = account_id
        self.asset_id = asset_id


class InsufficientQuantity(TradingError):
    def __init__(self, account_id: int, asset_id: str, requested: float, held: float):
        super().__init__(
            f"Account {account_id} holds {held:.6f} {asset_id}, cannot sell {requested:.6f}"
        )
        self.account_id = account_id
        self.asset_id = asset_id
        self.requested = requested
        self.held = held


class InvalidQuantity(TradingError):
    def __init__(self, quantity: float):
        super().__init__(f"Invalid quantity: {quantity!r}")
        self.quantity = quantity


class StoreError(Exception):
    """Base class for persistence failures."""


class StoreUnavailable(StoreError):
    """Backing medium could not be read or written."""

    def __init__(self, path: str, reason: Optional[str] = None):
        message = f"Store unavailable: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path
        self.reason = reason


class MalformedRecord(StoreError):
    """A persisted line could not be parsed."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Malformed record {line!r}: {reason}")
        self.line = line
        self.reason = reason
