"""
Position book - per-account, per-asset holdings at average cost.
"""
import math
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from ..domain.asset import AssetPrice
from ..domain.errors import InsufficientQuantity, InvalidQuantity, NoSuchPosition
from .position import Position

QUANTITY_EPSILON = 1e-6

PositionKey = Tuple[int, str]


def check_quantity(quantity: float) -> float:
    """Reject non-positive or non-finite quantities."""
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidQuantity(quantity)
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidQuantity(quantity)
    return float(quantity)


class PositionBook:
    """
    All open positions keyed by (account_id, asset_id).
    Insertion order is preserved so holdings display in acquisition order.
    """

    def __init__(self, quantity_epsilon: float = QUANTITY_EPSILON):
        self.quantity_epsilon = quantity_epsilon
        self._positions: Dict[PositionKey, Position] = {}

    def __repr__(self) -> str:
        return f"PositionBook(positions={len(self._positions)})"

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, key: PositionKey) -> bool:
        return key in self._positions

    def load(self, positions: Iterable[Position]) -> None:
        """Replace the book contents, dropping dust rows."""
        self._positions.clear()
        for position in positions:
            if position.quantity <= self.quantity_epsilon:
                logger.warning(f"Dropping near-zero position on load: {position}")
                continue
            self._positions[position.key] = position

    def get(self, account_id: int, asset_id: str) -> Optional[Position]:
        return self._positions.get((account_id, asset_id))

    def held_quantity(self, account_id: int, asset_id: str) -> float:
        pos = self.get(account_id, asset_id)
        return pos.quantity if pos else 0.0

    def positions_for(self, account_id: int) -> List[Position]:
        """Positions of one account, in acquisition order."""
        return [p for p in self._positions.values() if p.account_id == account_id]

    def all(self) -> List[Position]:
        return list(self._positions.values())

    def check_increase(self, account_id: int, asset_id: str, quantity: float) -> float:
        """
        Validate a buy without touching the book. A fill that would leave the
        position at or below the dust threshold is rejected.
        """
        quantity = check_quantity(quantity)
        if self.held_quantity(account_id, asset_id) + quantity <= self.quantity_epsilon:
            raise InvalidQuantity(quantity)
        return quantity

    def open_or_increase(
        self,
        account_id: int,
        asset: AssetPrice,
        quantity: float,
        fill_price: float,
    ) -> Position:
        """
        Record a buy fill. Opens a new position at the fill price or folds the
        fill into the existing average cost.
        """
        quantity = self.check_increase(account_id, asset.asset_id, quantity)
        position = self.get(account_id, asset.asset_id)

        if position is None:
            position = Position(
                account_id=account_id,
                asset_id=asset.asset_id,
                asset_name=asset.name,
                quantity=quantity,
                avg_price=fill_price,
                market=asset.market,
            )
            self._positions[position.key] = position
        else:
            position.add(quantity, fill_price)

        return position

    def check_reduce(self, account_id: int, asset_id: str, quantity: float) -> Position:
        """Validate a sell without touching the book."""
        quantity = check_quantity(quantity)
        position = self.get(account_id, asset_id)
        if position is None:
            raise NoSuchPosition(account_id, asset_id)
        # within epsilon of the holding counts as the whole holding
        if quantity > position.quantity + self.quantity_epsilon:
            raise InsufficientQuantity(account_id, asset_id, quantity, position.quantity)
        return position

    def reduce(self, account_id: int, asset_id: str, quantity: float) -> Optional[Position]:
        """
        Record a sell. The position is removed once the remainder is dust.
        Returns: The remaining position, or None if it was closed
        """
        position = self.check_reduce(account_id, asset_id, quantity)
        remaining = position.remove(float(quantity))

        if remaining <= self.quantity_epsilon:
            del self._positions[position.key]
            return None
        return position
