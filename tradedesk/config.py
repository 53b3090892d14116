"""
Desk configuration: file locations and simulation constants.
"""
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .account.book import QUANTITY_EPSILON
from .data.store import FX_FILE, HOLDINGS_FILE, JOURNAL_FILE, PRICES_FILE
from .domain.asset import PRICE_FLOOR
from .domain.fx import DEFAULT_INR_PER_EUR, DEFAULT_INR_PER_USD
from .events import AUDIT_FILE, NOTIFICATIONS_FILE
from .market.catalog import BIG_MOVE_FACTOR

ENV_PREFIX = "TRADEDESK_"


@dataclass(frozen=True)
class DeskConfig:
    data_dir: Path = Path(".")
    prices_file: str = PRICES_FILE
    fx_file: str = FX_FILE
    holdings_file: str = HOLDINGS_FILE
    journal_file: str = JOURNAL_FILE
    audit_file: str = AUDIT_FILE
    notifications_file: str = NOTIFICATIONS_FILE
    default_inr_per_usd: float = DEFAULT_INR_PER_USD
    default_inr_per_eur: float = DEFAULT_INR_PER_EUR
    price_floor: float = PRICE_FLOOR
    big_move_factor: float = BIG_MOVE_FACTOR
    quantity_epsilon: float = QUANTITY_EPSILON
    seed: Optional[int] = None  # RNG seed for reproducible ticks

    @classmethod
    def from_env(cls, **overrides) -> "DeskConfig":
        """
        Build a config from TRADEDESK_* environment variables, e.g.
        TRADEDESK_DATA_DIR=/var/lib/desk TRADEDESK_SEED=42.
        Keyword overrides win over the environment.
        """
        config = cls()
        data_dir = os.getenv(f"{ENV_PREFIX}DATA_DIR")
        if data_dir:
            config = replace(config, data_dir=Path(data_dir))

        float_fields = ("default_inr_per_usd", "default_inr_per_eur", "price_floor", "big_move_factor")
        for name in float_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                config = replace(config, **{name: float(raw)})

        seed = os.getenv(f"{ENV_PREFIX}SEED")
        if seed:
            config = replace(config, seed=int(seed))

        return replace(config, **overrides)
