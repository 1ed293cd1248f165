"""lofi-sync - offline-first, field-level conflict resolution for synced cards."""

from lofi_sync.core.board import Board, BoardId, Column
from lofi_sync.core.card import (
    MUTABLE_CARD_FIELDS,
    Card,
    CardId,
    CardPriority,
    ColumnId,
    MutableCardField,
    SyncStatus,
)
from lofi_sync.core.equality import values_equal
from lofi_sync.sync.merge import MergeReport, merge_cards, merge_cards_with_report
from lofi_sync.sync.sync_engine import SyncEngine
from lofi_sync.sync.tracking import apply_local_edit, mark_synced

__version__ = "0.1.0"

__all__ = [
    # Core models
    "Board",
    "BoardId",
    "Card",
    "CardId",
    "CardPriority",
    "Column",
    "ColumnId",
    "MutableCardField",
    "MUTABLE_CARD_FIELDS",
    "SyncStatus",
    # Merge engine
    "values_equal",
    "merge_cards",
    "merge_cards_with_report",
    "MergeReport",
    # Dirty tracking
    "apply_local_edit",
    "mark_synced",
    # Sync driver
    "SyncEngine",
    # Version
    "__version__",
]
