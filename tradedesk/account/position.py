"""
Position class - represents an account's holding of a single asset.
"""
from typing import Tuple


class Position:
    """
    Holding of one asset by one account, tracked at average cost.
    The market is copied from the asset when the position is opened and is
    used for currency mapping from then on.
    """

    def __init__(
        self,
        account_id: int,
        asset_id: str,
        asset_name: str,
        quantity: float,
        avg_price: float,
        market: str,
    ):
        """
        Args:
            account_id: Owning account
            asset_id: Asset identifier (soft reference into the market catalog)
            asset_name: Asset display name at acquisition time
            quantity: Units held (non-negative)
            avg_price: Average cost per unit in the asset's native currency
            market: Market code (IN/US/EU) used for FX mapping
        """
        self.account_id = account_id
        self.asset_id = asset_id
        self.asset_name = asset_name
        self.quantity = quantity
        self.avg_price = avg_price
        self.market = market

    def __repr__(self) -> str:
        return f"Position({self.account_id}, {self.asset_id}, {self.quantity:.6f} @ {self.avg_price:.4f} {self.market})"

    @property
    def key(self) -> Tuple[int, str]:
        return (self.account_id, self.asset_id)

    @property
    def cost_basis(self) -> float:
        """Total native-currency cost of the units held."""
        return self.avg_price * self.quantity

    def add(self, quantity: float, price: float) -> float:
        """
        Add units bought at the given native price.
        avg' = (avg * q_old + price * q_new) / (q_old + q_new)

        Returns: New average price
        """
        old_value = self.avg_price * self.quantity
        new_value = price * quantity
        self.quantity += quantity
        self.avg_price = (old_value + new_value) / self.quantity
        return self.avg_price

    def remove(self, quantity: float) -> float:
        """
        Remove sold units. Cost per remaining unit is unchanged.
        Returns: Remaining quantity
        """
        self.quantity -= quantity
        return self.quantity

    def market_value(self, price: float) -> float:
        """Native-currency value at the given price."""
        return price * self.quantity

    def unrealized_pnl(self, price: float) -> float:
        """Native-currency PnL against the average cost."""
        return (price - self.avg_price) * self.quantity
