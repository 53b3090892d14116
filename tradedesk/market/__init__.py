"""
Market Layer: Asset catalog and price tick simulation.
"""
from .catalog import MarketCatalog

__all__ = [
    "MarketCatalog",
]
