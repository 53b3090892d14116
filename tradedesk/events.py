"""
Fire-and-forget event sinks for audit and customer notifications.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from loguru import logger

from .domain.clock import format_timestamp

AUDIT_FILE = "admin_audit.txt"
NOTIFICATIONS_FILE = "notifications.txt"

Payload = Dict[str, Any]


class EventSink(ABC):
    """Receives structured desk events. Implementations must not raise on I/O failure."""

    @abstractmethod
    def emit(self, event_kind: str, account_id: Optional[int], payload: Optional[Payload] = None) -> None:
        pass


class NullSink(EventSink):
    def emit(self, event_kind: str, account_id: Optional[int], payload: Optional[Payload] = None) -> None:
        return None


def _flatten(value: Any) -> str:
    return str(value).replace("|", "/").replace("\n", " ")


class _AppendFileSink(EventSink):
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path})"

    def _append(self, line: str) -> None:
        try:
            with self.path.open("a", encoding="utf-8", newline="\n") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            logger.warning(f"Event not written to {self.path}: {exc}")


class AuditLogSink(_AppendFileSink):
    """
    Appends `timestamp|KIND[|account_id][|key=value...]` lines.
    The free-form `message` payload key is left to the notification sink.
    """

    def emit(self, event_kind: str, account_id: Optional[int], payload: Optional[Payload] = None) -> None:
        parts = [format_timestamp(), _flatten(event_kind)]
        if account_id is not None:
            parts.append(str(account_id))
        for key, value in (payload or {}).items():
            if key == "message":
                continue
            parts.append(f"{_flatten(key)}={_flatten(value)}")
        self._append("|".join(parts))


class NotificationSink(_AppendFileSink):
    """Appends `timestamp|account_id|message` lines for account-scoped events only."""

    def emit(self, event_kind: str, account_id: Optional[int], payload: Optional[Payload] = None) -> None:
        if account_id is None:
            return
        message = (payload or {}).get("message") or event_kind
        self._append(f"{format_timestamp()}|{account_id}|{_flatten(message)}")


class CompositeSink(EventSink):
    """Fans every event out to several sinks."""

    def __init__(self, sinks: Iterable[EventSink]):
        self.sinks = list(sinks)

    def emit(self, event_kind: str, account_id: Optional[int], payload: Optional[Payload] = None) -> None:
        for sink in self.sinks:
            sink.emit(event_kind, account_id, payload)
