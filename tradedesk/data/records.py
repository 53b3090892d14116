"""
Pipe-delimited record codec for the persisted desk files.

Layouts (one record per line):
    price    asset_id|name|price|volatility|market|last_update|open_hour|close_hour
    fx       inr_per_usd|inr_per_eur|last_update
    position account_id|asset_id|asset_name|quantity|avg_price|market
    journal  account_id|timestamp|kind|amount|balance_after|note
"""
from dataclasses import dataclass
from typing import Callable, List, TypeVar

from ..account.position import Position
from ..domain.asset import AssetPrice, check_text_field
from ..domain.errors import MalformedRecord
from ..domain.fx import FXRates

DELIMITER = "|"

T = TypeVar("T")


@dataclass(frozen=True)
class JournalEntry:
    """One cash ledger delta caused by a trade."""
    account_id: int
    timestamp: str
    kind: str           # 'BUY' or 'SELL'
    amount: float       # signed INR: negative for buys
    balance_after: float
    note: str = ""

    def __post_init__(self):
        check_text_field("kind", self.kind)
        check_text_field("note", self.note)


def _split(line: str, expected: int) -> List[str]:
    fields = line.rstrip("\r\n").split(DELIMITER)
    if len(fields) != expected:
        raise MalformedRecord(line, f"expected {expected} fields, got {len(fields)}")
    return fields


def _decode(line: str, expected: int, build: Callable[[List[str]], T]) -> T:
    fields = _split(line, expected)
    try:
        return build(fields)
    except ValueError as exc:
        raise MalformedRecord(line, str(exc)) from exc


# ---------------------------------------------------------------- prices

def encode_price(asset: AssetPrice) -> str:
    return (
        f"{asset.asset_id}|{asset.name}|{asset.price:.4f}|{asset.volatility:.6f}|"
        f"{asset.market}|{asset.last_update}|{asset.open_hour}|{asset.close_hour}"
    )


def decode_price(line: str) -> AssetPrice:
    return _decode(line, 8, lambda f: AssetPrice(
        asset_id=f[0],
        name=f[1],
        price=float(f[2]),
        volatility=float(f[3]),
        market=f[4],
        last_update=f[5],
        open_hour=int(f[6]),
        close_hour=int(f[7]),
    ))


# ---------------------------------------------------------------- fx

def encode_fx(rates: FXRates) -> str:
    return f"{rates.inr_per_usd:.6f}|{rates.inr_per_eur:.6f}|{rates.last_update}"


def decode_fx(line: str) -> FXRates:
    return _decode(line, 3, lambda f: FXRates(
        inr_per_usd=float(f[0]),
        inr_per_eur=float(f[1]),
        last_update=f[2],
    ))


# ---------------------------------------------------------------- positions

def encode_position(position: Position) -> str:
    check_text_field("asset_name", position.asset_name)
    return (
        f"{position.account_id}|{position.asset_id}|{position.asset_name}|"
        f"{position.quantity:.6f}|{position.avg_price:.4f}|{position.market}"
    )


def _build_position(f: List[str]) -> Position:
    quantity = float(f[3])
    avg_price = float(f[4])
    if quantity < 0:
        raise ValueError(f"negative quantity {quantity}")
    if avg_price <= 0:
        raise ValueError(f"non-positive avg_price {avg_price}")
    return Position(
        account_id=int(f[0]),
        asset_id=f[1],
        asset_name=f[2],
        quantity=quantity,
        avg_price=avg_price,
        market=f[5],
    )


def decode_position(line: str) -> Position:
    return _decode(line, 6, _build_position)


# ---------------------------------------------------------------- journal

def encode_journal(entry: JournalEntry) -> str:
    return (
        f"{entry.account_id}|{entry.timestamp}|{entry.kind}|"
        f"{entry.amount:.2f}|{entry.balance_after:.2f}|{entry.note}"
    )


def decode_journal(line: str) -> JournalEntry:
    return _decode(line, 6, lambda f: JournalEntry(
        account_id=int(f[0]),
        timestamp=f[1],
        kind=f[2],
        amount=float(f[3]),
        balance_after=float(f[4]),
        note=f[5],
    ))
