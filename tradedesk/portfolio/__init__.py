"""
Portfolio Layer: Mark-to-market valuation.
"""
from .valuator import PortfolioValuator, PortfolioSummary

__all__ = [
    "PortfolioValuator",
    "PortfolioSummary",
]
