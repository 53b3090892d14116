"""
Account Layer: Positions, the position book and the cash ledger interface.
"""
from .position import Position
from .book import PositionBook
from .cash import CashLedger, CashBook

__all__ = [
    "Position",
    "PositionBook",
    "CashLedger",
    "CashBook",
]
