"""
Durable store - file-backed load/save of the desk's record sets.
"""
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TypeVar, Union

from loguru import logger

from ..account.position import Position
from ..domain.asset import AssetPrice
from ..domain.errors import MalformedRecord, StoreUnavailable
from ..domain.fx import FXRates
from .records import (
    JournalEntry,
    decode_fx,
    decode_journal,
    decode_position,
    decode_price,
    encode_fx,
    encode_journal,
    encode_position,
    encode_price,
)

T = TypeVar("T")

PRICES_FILE = "prices.txt"
FX_FILE = "fx_rates.txt"
HOLDINGS_FILE = "holdings.txt"
JOURNAL_FILE = "transactions.txt"


def atomic_write_text(path: Path, content: str) -> None:
    """
    Write content to a temp file next to `path`, fsync it, then replace `path`
    in one step. On failure the previous content of `path` is left intact.
    """
    fd, tmp_name = None, None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            fd = None
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise StoreUnavailable(str(path), str(exc)) from exc
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)


def parse_records(lines: Iterable[str], decode: Callable[[str], T], source: str = "") -> List[T]:
    """
    Decode records until the first malformed line; the remainder of the file
    is dropped. Blank lines are skipped.
    """
    records: List[T] = []
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            records.append(decode(line))
        except MalformedRecord as exc:
            logger.warning(f"{source}:{lineno}: {exc.reason}; keeping {len(records)} records, dropping the rest")
            break
    return records


class DurableStore:
    """
    Persists the price catalog, FX rates, positions and the cash journal as
    pipe-delimited text files in one data directory.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        prices_file: str = PRICES_FILE,
        fx_file: str = FX_FILE,
        holdings_file: str = HOLDINGS_FILE,
        journal_file: str = JOURNAL_FILE,
    ):
        self.data_dir = Path(data_dir)
        self.prices_path = self.data_dir / prices_file
        self.fx_path = self.data_dir / fx_file
        self.holdings_path = self.data_dir / holdings_file
        self.journal_path = self.data_dir / journal_file

    def __repr__(self) -> str:
        return f"DurableStore({self.data_dir})"

    def ensure_layout(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailable(str(self.data_dir), str(exc)) from exc

    def _read_lines(self, path: Path) -> Optional[List[str]]:
        """None when the file is missing or unreadable."""
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                return fh.readlines()
        except (OSError, UnicodeDecodeError) as exc:
            logger.error(f"Cannot read {path}: {exc}")
            return None

    # ------------------------------------------------------------ prices

    def load_prices(self) -> List[AssetPrice]:
        lines = self._read_lines(self.prices_path)
        if lines is None:
            return []
        records = parse_records(lines, decode_price, str(self.prices_path))
        logger.info(f"Loaded {len(records)} price records from {self.prices_path}")
        return records

    def save_prices(self, assets: Iterable[AssetPrice]) -> None:
        content = "".join(encode_price(a) + "\n" for a in assets)
        atomic_write_text(self.prices_path, content)

    # ------------------------------------------------------------ fx

    def load_fx(self) -> Optional[FXRates]:
        """None when no FX file has been written yet or it cannot be parsed."""
        lines = self._read_lines(self.fx_path)
        if lines is None:
            return None
        records = parse_records(lines[:1], decode_fx, str(self.fx_path))
        return records[0] if records else None

    def save_fx(self, rates: FXRates) -> None:
        atomic_write_text(self.fx_path, encode_fx(rates) + "\n")

    # ------------------------------------------------------------ positions

    def load_positions(self) -> List[Position]:
        lines = self._read_lines(self.holdings_path)
        if lines is None:
            return []
        records = parse_records(lines, decode_position, str(self.holdings_path))
        logger.info(f"Loaded {len(records)} positions from {self.holdings_path}")
        return records

    def save_positions(self, positions: Iterable[Position]) -> None:
        content = "".join(encode_position(p) + "\n" for p in positions)
        atomic_write_text(self.holdings_path, content)

    # ------------------------------------------------------------ journal

    def append_journal(self, entry: JournalEntry) -> None:
        try:
            with self.journal_path.open("a", encoding="utf-8", newline="\n") as fh:
                fh.write(encode_journal(entry) + "\n")
        except OSError as exc:
            raise StoreUnavailable(str(self.journal_path), str(exc)) from exc

    def load_journal(self, account_id: Optional[int] = None, limit: Optional[int] = None) -> List[JournalEntry]:
        """
        Read journal entries, optionally for one account.
        With `limit`, only the most recent entries are returned (mini statement).
        """
        lines = self._read_lines(self.journal_path)
        if lines is None:
            return []
        entries = parse_records(lines, decode_journal, str(self.journal_path))
        if account_id is not None:
            entries = [e for e in entries if e.account_id == account_id]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries
