"""Field-level merge of a local card with its remote counterpart.

Three-way comparison against the card's sync snapshot:

| local field | remote vs snapshot | result                         |
|-------------|--------------------|--------------------------------|
| clean       | changed            | adopt remote value             |
| dirty       | changed            | keep local, flag conflict      |
| dirty       | unchanged          | keep local (pending push)      |
| clean       | unchanged          | keep local (same as remote)    |

Without a snapshot (first-ever sync) a remote change cannot be told apart
from "no baseline", so remote is treated as unchanged and local edits win.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from lofi_sync.core.card import MUTABLE_CARD_FIELDS, Card, MutableCardField, SyncStatus
from lofi_sync.core.equality import values_equal

logger = logging.getLogger(__name__)


class FieldResolution(StrEnum):
    """How a single field was resolved during a merge."""

    UNCHANGED = "unchanged"  # Clean locally, remote matches snapshot
    ADOPTED_REMOTE = "adopted_remote"  # Clean locally, remote changed
    PENDING_PUSH = "pending_push"  # Dirty locally, remote matches snapshot
    CONFLICT = "conflict"  # Dirty locally, remote changed
    REMOTE_PASSTHROUGH = "remote_passthrough"  # Local had no edits at all


@dataclass(frozen=True)
class FieldDecision:
    """Record of one field's resolution."""

    field: MutableCardField
    resolution: FieldResolution
    local_value: Any
    remote_value: Any
    snapshot_value: Any


@dataclass
class MergeReport:
    """Per-field report of a merge."""

    card_id: str
    fast_path: bool = False
    decisions: list[FieldDecision] = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return any(d.resolution == FieldResolution.CONFLICT for d in self.decisions)

    @property
    def adopted_fields(self) -> list[MutableCardField]:
        return [d.field for d in self.decisions if d.resolution == FieldResolution.ADOPTED_REMOTE]

    @property
    def conflicted_fields(self) -> list[MutableCardField]:
        return [d.field for d in self.decisions if d.resolution == FieldResolution.CONFLICT]

    @property
    def pending_fields(self) -> list[MutableCardField]:
        return [d.field for d in self.decisions if d.resolution == FieldResolution.PENDING_PUSH]

    def summary(self) -> str:
        """Generate human-readable summary."""
        if self.fast_path:
            return f"Merge Report [{self.card_id}]: local clean, remote taken as-is"
        lines = [
            f"Merge Report [{self.card_id}]:",
            f"  Adopted from remote: {_join(self.adopted_fields)}",
            f"  Pending push: {_join(self.pending_fields)}",
            f"  Conflicts: {_join(self.conflicted_fields)}",
        ]
        return "\n".join(lines)


def _join(fields: list[MutableCardField]) -> str:
    return ", ".join(f.value for f in fields) if fields else "-"


def _remote_changed(local: Card, remote_value: Any, name: MutableCardField) -> bool:
    if local.sync_snapshot is None:
        return False
    return not values_equal(remote_value, local.snapshot_value(name))


def merge_cards_with_report(local: Card, remote: Card) -> tuple[Card, MergeReport]:
    """Merge ``local`` with ``remote`` and report how each field was resolved.

    Both cards must share the same id; this is not checked. Names in
    ``local.dirty_fields`` that are not mutable fields are ignored.

    Returns:
        Tuple of (merged_card, report)
    """
    report = MergeReport(card_id=local.id)

    if local.id != remote.id:
        logger.debug("Merging cards with different ids: %s vs %s", local.id, remote.id)

    # No local intent to protect: trust remote entirely
    if not local.dirty_fields:
        report.fast_path = True
        report.decisions = [
            FieldDecision(
                field=name,
                resolution=FieldResolution.REMOTE_PASSTHROUGH,
                local_value=local.get_field(name),
                remote_value=remote.get_field(name),
                snapshot_value=local.snapshot_value(name),
            )
            for name in MUTABLE_CARD_FIELDS
        ]
        return remote, report

    changes: dict[str, Any] = {}
    remote_changed_any = False

    for name in MUTABLE_CARD_FIELDS:
        local_value = local.get_field(name)
        remote_value = remote.get_field(name)
        is_dirty = name in local.dirty_fields
        remote_changed = _remote_changed(local, remote_value, name)

        if not is_dirty and remote_changed:
            changes[name.value] = remote_value
            remote_changed_any = True
            resolution = FieldResolution.ADOPTED_REMOTE
        elif is_dirty and remote_changed:
            resolution = FieldResolution.CONFLICT
        elif is_dirty:
            resolution = FieldResolution.PENDING_PUSH
        else:
            resolution = FieldResolution.UNCHANGED

        logger.debug("Card %s field %s: %s", local.id, name.value, resolution.value)
        report.decisions.append(
            FieldDecision(
                field=name,
                resolution=resolution,
                local_value=local_value,
                remote_value=remote_value,
                snapshot_value=local.snapshot_value(name),
            )
        )

    if remote_changed_any or remote.updated_at > local.updated_at:
        changes["updated_at"] = remote.updated_at

    if report.has_conflict:
        changes["sync_status"] = SyncStatus.CONFLICT
        logger.info(
            "Conflict on card %s: %s",
            local.id,
            ", ".join(f.value for f in report.conflicted_fields),
        )

    merged = local.replace(**changes) if changes else local
    return merged, report


def merge_cards(local: Card, remote: Card) -> Card:
    """Merge a local card with a remote card using offline-first field rules.

    - Local clean (no dirty fields): return ``remote`` unchanged.
    - Field clean locally, changed remotely: take the remote value.
    - Field dirty locally, unchanged remotely: keep the local value.
    - Field dirty locally and changed remotely: keep the local value and
      mark the card ``conflict``.

    ``updated_at`` moves to the remote timestamp when a remote value was
    adopted or the remote card is newer. ``sync_status`` is otherwise
    inherited from ``local``.
    """
    merged, _ = merge_cards_with_report(local, remote)
    return merged
