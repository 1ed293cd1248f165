"""Card data structures - the records subject to field-level sync."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, NewType
from uuid import uuid4

from lofi_sync.utils.timeutils import ensure_utc, utcnow

CardId = NewType("CardId", str)
"""Opaque card identifier, produced by the schema boundary."""


class ColumnId(StrEnum):
    """Kanban columns a card can live in."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class CardPriority(StrEnum):
    """Card priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SyncStatus(StrEnum):
    """Synchronization state of a card."""

    SYNCED = "synced"  # Matches the remote copy
    DIRTY = "dirty"  # Local edits pending push
    CONFLICT = "conflict"  # Same field changed on both sides
    LOCAL = "local"  # Never pushed


class MutableCardField(StrEnum):
    """Fields subject to field-level conflict resolution, in merge order."""

    TITLE = "title"
    DESCRIPTION = "description"
    STATUS = "status"
    PRIORITY = "priority"
    LABELS = "labels"
    ASSIGNEES = "assignees"
    POSITION = "position"


MUTABLE_CARD_FIELDS: tuple[MutableCardField, ...] = tuple(MutableCardField)


def coerce_field_name(name: MutableCardField | str) -> MutableCardField | None:
    """Map a field name to its enum member, or None if it is not mutable."""
    try:
        return MutableCardField(name)
    except ValueError:
        return None


def _freeze_snapshot(
    snapshot: Mapping[Any, Any] | None,
) -> Mapping[MutableCardField, Any] | None:
    if snapshot is None:
        return None
    # Unknown keys are kept as-is; the schema layer rejects them, merges never read them
    frozen: dict[Any, Any] = {}
    for key, value in snapshot.items():
        frozen[coerce_field_name(key) or key] = tuple(value) if isinstance(value, list) else value
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class Card:
    """
    A kanban card, as stored locally or fetched from the remote side.

    Cards are immutable; edits and merges produce new instances.

    Attributes:
        id: Stable identifier, never merged
        title: Card title (non-empty at the schema boundary)
        status: Column the card sits in
        priority: Priority level
        labels: Ordered label names
        assignees: Ordered assignee logins
        position: Sort key within the column
        created_at: Creation time (aware UTC)
        updated_at: Last modification time (aware UTC)
        description: Optional body text
        dirty_fields: Fields edited locally since the last sync
        sync_snapshot: Field values as of the last sync, or None before the first sync
        sync_status: Result of the last merge/edit, None when unknown
    """

    id: CardId
    title: str
    status: ColumnId = ColumnId.TODO
    priority: CardPriority = CardPriority.MEDIUM
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    position: float = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    description: str | None = None
    dirty_fields: frozenset[MutableCardField] = frozenset()
    sync_snapshot: Mapping[MutableCardField, Any] | None = None
    sync_status: SyncStatus | None = None

    def __post_init__(self) -> None:
        # Normalize inputs so edited copies compare equal to fresh ones
        object.__setattr__(self, "status", ColumnId(self.status))
        object.__setattr__(self, "priority", CardPriority(self.priority))
        if self.sync_status is not None:
            object.__setattr__(self, "sync_status", SyncStatus(self.sync_status))
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "assignees", tuple(self.assignees))
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))
        object.__setattr__(self, "updated_at", ensure_utc(self.updated_at))
        object.__setattr__(self, "dirty_fields", frozenset(self.dirty_fields))
        object.__setattr__(self, "sync_snapshot", _freeze_snapshot(self.sync_snapshot))

    @classmethod
    def create(
        cls,
        title: str,
        status: ColumnId = ColumnId.TODO,
        priority: CardPriority = CardPriority.MEDIUM,
        labels: tuple[str, ...] | list[str] = (),
        assignees: tuple[str, ...] | list[str] = (),
        position: float = 0,
        description: str | None = None,
        card_id: str | None = None,
    ) -> Card:
        """
        Factory method for a card created locally and never pushed.

        Args:
            title: Card title
            status: Initial column
            priority: Initial priority
            labels: Initial labels
            assignees: Initial assignees
            position: Sort key within the column
            description: Optional body
            card_id: Explicit ID (generates UUID if not provided)

        Returns:
            A new Card with sync_status LOCAL and no snapshot
        """
        now = utcnow()
        return cls(
            id=CardId(card_id or str(uuid4())),
            title=title,
            status=status,
            priority=priority,
            labels=tuple(labels),
            assignees=tuple(assignees),
            position=position,
            description=description,
            created_at=now,
            updated_at=now,
            sync_status=SyncStatus.LOCAL,
        )

    @property
    def is_clean(self) -> bool:
        """True when no local edits are pending."""
        return not self.dirty_fields

    def get_field(self, name: MutableCardField) -> Any:
        """Read a mutable field by name."""
        return getattr(self, name.value)

    def snapshot_value(self, name: MutableCardField) -> Any:
        """Snapshot value for a field; None when absent or when no snapshot exists."""
        if self.sync_snapshot is None:
            return None
        return self.sync_snapshot.get(name)

    def replace(self, **changes: Any) -> Card:
        """Create a copy with the given attributes replaced."""
        return replace(self, **changes)
