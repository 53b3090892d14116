"""
Data Layer: Record codec and durable file store.
"""
from .records import JournalEntry
from .store import DurableStore

__all__ = [
    "JournalEntry",
    "DurableStore",
]
