"""Field-level merge, dirty tracking and reconciliation of cards."""

from lofi_sync.sync.merge import (
    FieldDecision,
    FieldResolution,
    MergeReport,
    merge_cards,
    merge_cards_with_report,
)
from lofi_sync.sync.sync_engine import SyncAction, SyncEngine, SyncOutcome, SyncSummary
from lofi_sync.sync.tracking import apply_local_edit, mark_synced, take_snapshot

__all__ = [
    "FieldDecision",
    "FieldResolution",
    "MergeReport",
    "merge_cards",
    "merge_cards_with_report",
    "apply_local_edit",
    "mark_synced",
    "take_snapshot",
    "SyncAction",
    "SyncEngine",
    "SyncOutcome",
    "SyncSummary",
]
