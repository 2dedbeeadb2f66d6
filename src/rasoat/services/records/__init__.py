"""Record synchronization services."""

from .live import LiveMergeSession, SessionState, subscribe_records
from .merge import merge_snapshots, sort_by_created_at

__all__ = [
    "LiveMergeSession",
    "SessionState",
    "merge_snapshots",
    "sort_by_created_at",
    "subscribe_records",
]
