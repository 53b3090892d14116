"""
Cash ledger interface consumed by the trade executor.
"""
import math
from abc import ABC, abstractmethod
from typing import Dict, Optional


class CashLedger(ABC):
    """
    The account ledger owns authoritative INR cash balances. The desk only
    reads a balance and requests debits and credits; amounts are always
    positive and the direction is implied by the call.
    """

    @abstractmethod
    def get_cash(self, account_id: int) -> float:
        pass

    @abstractmethod
    def debit(self, account_id: int, amount: float) -> float:
        """Returns: Balance after the debit"""
        pass

    @abstractmethod
    def credit(self, account_id: int, amount: float) -> float:
        """Returns: Balance after the credit"""
        pass


class CashBook(CashLedger):
    """In-memory ledger, keyed by account id."""

    def __init__(self, balances: Optional[Dict[int, float]] = None):
        self._balances: Dict[int, float] = dict(balances or {})

    def __repr__(self) -> str:
        return f"CashBook(accounts={len(self._balances)})"

    @property
    def balances(self) -> Dict[int, float]:
        return self._balances

    def open_account(self, account_id: int, balance: float = 0.0) -> None:
        if account_id in self._balances:
            raise ValueError(f"Account already exists: {account_id}")
        self._balances[account_id] = balance

    def get_cash(self, account_id: int) -> float:
        return self._balances.get(account_id, 0.0)

    def debit(self, account_id: int, amount: float) -> float:
        self._check_amount(amount)
        self._balances[account_id] = self.get_cash(account_id) - amount
        return self._balances[account_id]

    def credit(self, account_id: int, amount: float) -> float:
        self._check_amount(amount)
        self._balances[account_id] = self.get_cash(account_id) + amount
        return self._balances[account_id]

    @staticmethod
    def _check_amount(amount: float) -> None:
        if not math.isfinite(amount) or amount < 0:
            raise ValueError(f"amount must be non-negative: {amount!r}")
