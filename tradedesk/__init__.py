"""
tradedesk: trading & portfolio accounting engine for a retail bank's
multi-market desk (IN/US/EU assets, INR reporting).
"""
from .config import DeskConfig
from .context import DeskContext

__version__ = "0.1.0"

__all__ = [
    "DeskConfig",
    "DeskContext",
]
