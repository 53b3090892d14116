"""
Trading Layer: Buy/sell execution.
"""
from .executor import TradeExecutor, TradeRecord

__all__ = [
    "TradeExecutor",
    "TradeRecord",
]
