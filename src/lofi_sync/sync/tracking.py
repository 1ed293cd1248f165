"""Dirty-field tracking for locally edited cards.

The local-edit path records which fields changed since the last sync and
keeps the snapshot that later merges compare against. The sync driver
refreshes both once a merged card has been pushed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from lofi_sync.core.card import (
    MUTABLE_CARD_FIELDS,
    Card,
    CardPriority,
    ColumnId,
    MutableCardField,
    SyncStatus,
    coerce_field_name,
)
from lofi_sync.core.equality import values_equal
from lofi_sync.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def take_snapshot(card: Card) -> dict[MutableCardField, Any]:
    """Copy every mutable field value of ``card``."""
    return {name: card.get_field(name) for name in MUTABLE_CARD_FIELDS}


def _normalize_value(name: MutableCardField, value: Any) -> Any:
    if value is None:
        return None
    if name in (MutableCardField.LABELS, MutableCardField.ASSIGNEES):
        return tuple(value)
    if name == MutableCardField.STATUS:
        return ColumnId(value)
    if name == MutableCardField.PRIORITY:
        return CardPriority(value)
    return value


def apply_local_edit(
    card: Card,
    changes: Mapping[MutableCardField | str, Any],
    *,
    now: datetime | None = None,
) -> Card:
    """
    Apply a local edit and record the touched fields as dirty.

    Only fields whose value actually changes become dirty. A clean synced
    card without a snapshot gets one from its pre-edit values, since those
    are the last values both sides agreed on.

    Args:
        card: Card before the edit
        changes: Field name -> new value
        now: Edit time (default: current UTC time)

    Returns:
        The edited card, or ``card`` itself if nothing changed

    Raises:
        ValueError: If a key is not a mutable card field
    """
    updates: dict[str, Any] = {}
    touched: set[MutableCardField] = set()

    for raw_name, raw_value in changes.items():
        name = coerce_field_name(raw_name)
        if name is None:
            raise ValueError(f"Not a mutable card field: {raw_name!r}")
        value = _normalize_value(name, raw_value)
        if values_equal(card.get_field(name), value):
            continue
        updates[name.value] = value
        touched.add(name)

    if not touched:
        return card

    snapshot = card.sync_snapshot
    if snapshot is None and card.is_clean and card.sync_status == SyncStatus.SYNCED:
        snapshot = take_snapshot(card)

    status = card.sync_status
    if status not in (SyncStatus.LOCAL, SyncStatus.CONFLICT):
        status = SyncStatus.DIRTY

    logger.debug(
        "Local edit on card %s: %s",
        card.id,
        ", ".join(sorted(n.value for n in touched)),
    )

    return card.replace(
        **updates,
        dirty_fields=card.dirty_fields | touched,
        sync_snapshot=snapshot,
        sync_status=status,
        updated_at=now or utcnow(),
    )


def mark_synced(card: Card) -> Card:
    """Clear pending edits after ``card`` has been stored on both sides.

    The current values become the new snapshot.
    """
    return card.replace(
        dirty_fields=frozenset(),
        sync_snapshot=take_snapshot(card),
        sync_status=SyncStatus.SYNCED,
    )
