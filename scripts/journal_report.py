"""
Journal report script: summarize per-account trading flows from the cash journal.
"""
import os
from pathlib import Path

from loguru import logger

from tradedesk.data.report import account_flows, read_journal
from tradedesk.data.store import JOURNAL_FILE

DATA_PATH = Path(os.getenv("TRADEDESK_DATA_DIR", "."))
REPORT_PATH = DATA_PATH / "reports"


def ensure_dirs():
    REPORT_PATH.mkdir(parents=True, exist_ok=True)
    logger.info(f"Report directory: {REPORT_PATH}")


def build_report():
    journal_path = DATA_PATH / JOURNAL_FILE
    journal = read_journal(journal_path)
    if journal.is_empty():
        logger.warning(f"No journal entries in {journal_path}")
        return None

    flows = account_flows(journal)
    logger.info(f"Journal: {len(journal)} entries across {len(flows)} accounts")

    output_path = REPORT_PATH / "account_flows.parquet"
    flows.write_parquet(output_path)
    logger.info(f"Account flows -> {output_path}")
    return flows


def main():
    logger.info("Building journal report...")
    ensure_dirs()
    flows = build_report()
    if flows is not None:
        print(flows)
    logger.info("Journal report completed!")


if __name__ == "__main__":
    main()
