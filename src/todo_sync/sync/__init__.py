"""Delta detection, ledger and push logic for todo synchronization."""

from todo_sync.sync.apply import ApplyLayer, ApplyReport
from todo_sync.sync.delta import DeltaEngine, compute_delta
from todo_sync.sync.engine import SyncEngine, SyncResult
from todo_sync.sync.ledger import LedgerLoadResult, SyncLedger, load_ledger, save_ledger
from todo_sync.sync.mapper import IDMapper

__all__ = [
    "ApplyLayer",
    "ApplyReport",
    "DeltaEngine",
    "IDMapper",
    "LedgerLoadResult",
    "SyncEngine",
    "SyncLedger",
    "SyncResult",
    "compute_delta",
    "load_ledger",
    "save_ledger",
]
