"""Core data models for lofi-sync."""

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

__all__ = [
    # Cards
    "Card",
    "CardId",
    "CardPriority",
    "ColumnId",
    "MutableCardField",
    "MUTABLE_CARD_FIELDS",
    "SyncStatus",
    # Boards
    "Board",
    "BoardId",
    "Column",
    # Equality
    "values_equal",
]
