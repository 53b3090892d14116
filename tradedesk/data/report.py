"""
Journal analytics: load the pipe-delimited cash journal into polars and
aggregate per-account trading flows.
"""
from pathlib import Path
from typing import Union

import polars as pl

JOURNAL_SCHEMA = {
    "account_id": pl.Int64,
    "timestamp": pl.Utf8,
    "kind": pl.Utf8,
    "amount": pl.Float64,
    "balance_after": pl.Float64,
    "note": pl.Utf8,
}


def read_journal(path: Union[str, Path]) -> pl.DataFrame:
    """Read the journal file; a missing or empty file gives an empty frame."""
    path = Path(path)
    if not path.exists() or path.stat().st_size == 0:
        return pl.DataFrame(schema={**JOURNAL_SCHEMA, "timestamp": pl.Datetime})

    df = pl.read_csv(
        path,
        separator="|",
        has_header=False,
        schema=JOURNAL_SCHEMA,
        quote_char=None,
    )
    return df.with_columns(
        pl.col("timestamp").str.strptime(pl.Datetime, "%Y-%m-%d %H:%M:%S").alias("timestamp")
    )


def account_flows(journal: pl.DataFrame) -> pl.DataFrame:
    """
    Per-account totals: trade count, INR spent on buys, INR received from
    sells, net cash flow and the latest balance.
    """
    return (
        journal.sort("timestamp")
        .group_by("account_id")
        .agg([
            pl.len().alias("trades"),
            (-pl.col("amount").filter(pl.col("kind") == "BUY").sum()).alias("bought_inr"),
            pl.col("amount").filter(pl.col("kind") == "SELL").sum().alias("sold_inr"),
            pl.col("amount").sum().alias("net_cash_flow_inr"),
            pl.col("balance_after").last().alias("last_balance"),
            pl.col("timestamp").max().alias("last_trade"),
        ])
        .sort("account_id")
    )
