"""
Default asset set installed into an empty catalog.
"""
from datetime import datetime
from typing import List

from ..domain.asset import MARKET_EU, MARKET_IN, MARKET_US, AssetPrice
from ..domain.clock import format_timestamp

# asset_id, name, price, volatility, market, open_hour, close_hour
DEFAULT_ASSETS = [
    ("INFY", "Infosys Ltd", 1500.0, 0.01, MARKET_IN, 9, 15),
    ("TCS", "TCS", 3200.0, 0.008, MARKET_IN, 9, 15),
    ("AAPL", "Apple Inc", 190.0, 0.02, MARKET_US, 9, 17),
    ("NVDA", "NVIDIA Corp", 190.0, 0.03, MARKET_US, 9, 17),
    ("BTC", "Bitcoin", 35000.0, 0.05, MARKET_US, 0, 24),
    ("SIE", "Siemens", 120.0, 0.018, MARKET_EU, 8, 18),
]


def default_assets(now: datetime) -> List[AssetPrice]:
    stamp = format_timestamp(now)
    return [
        AssetPrice(asset_id, name, price, vol, market, open_hour, close_hour, stamp)
        for asset_id, name, price, vol, market, open_hour, close_hour in DEFAULT_ASSETS
    ]
