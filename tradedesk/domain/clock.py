"""
Wall-clock helpers. All timestamps are local time, second resolution.
"""
from datetime import datetime
from typing import Optional

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_now() -> datetime:
    return datetime.now()


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Render a moment (default: now) in the persisted timestamp format."""
    return (moment or local_now()).strftime(TIMESTAMP_FORMAT)
