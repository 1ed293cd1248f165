"""Sync engine reconciling a local card store with its remote counterpart."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from lofi_sync.core.card import Card, CardId, MutableCardField
from lofi_sync.sync.merge import merge_cards_with_report
from lofi_sync.sync.tracking import mark_synced

if TYPE_CHECKING:
    from lofi_sync.storage.base import CardStorage

logger = logging.getLogger(__name__)


class SyncAction(StrEnum):
    """What a reconciliation did to a card."""

    UNCHANGED = "unchanged"  # Both sides already equal
    PULLED = "pulled"  # Remote copy stored locally
    PUSHED = "pushed"  # Local edits merged and stored on both sides
    CREATED_REMOTE = "created_remote"  # Card only existed locally
    CONFLICT = "conflict"  # Stored locally with conflict marker, not pushed
    ERROR = "error"  # Storage failure, nothing applied


@dataclass(frozen=True)
class SyncOutcome:
    """Result of reconciling one card."""

    card_id: CardId
    action: SyncAction
    card: Card | None = None
    adopted_fields: tuple[MutableCardField, ...] = ()
    conflicted_fields: tuple[MutableCardField, ...] = ()
    message: str = ""


@dataclass
class SyncSummary:
    """Counts across a reconcile_all run."""

    outcomes: list[SyncOutcome] = field(default_factory=list)

    def count(self, action: SyncAction) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    @property
    def conflicts(self) -> list[SyncOutcome]:
        return [o for o in self.outcomes if o.action == SyncAction.CONFLICT]

    def to_dict(self) -> dict[str, int]:
        return {action.value: self.count(action) for action in SyncAction}


class SyncEngine:
    """Reconciles cards between a local and a remote store.

    Per card:
    1. Read local and remote copies
    2. Merge field by field
    3. Store the merged card locally
    4. Push it to remote when local edits merged cleanly
    5. Refresh dirty fields and snapshot once both sides hold it

    Reconciliations of the same card are serialized with a per-card lock;
    different cards never wait on each other. A lock is dropped once no task
    holds or waits on it.
    """

    def __init__(self, local: CardStorage, remote: CardStorage) -> None:
        self._local = local
        self._remote = remote
        self._locks: dict[CardId, asyncio.Lock] = {}
        self._lock_users: Counter[CardId] = Counter()

    async def reconcile(self, card_id: CardId) -> SyncOutcome:
        """Reconcile a single card.

        Raises:
            LookupError: If the card exists on neither side
        """
        lock = self._locks.setdefault(card_id, asyncio.Lock())
        self._lock_users[card_id] += 1
        try:
            async with lock:
                return await self._reconcile_locked(card_id)
        finally:
            self._lock_users[card_id] -= 1
            if not self._lock_users[card_id]:
                del self._lock_users[card_id]
                del self._locks[card_id]

    async def reconcile_all(self) -> SyncSummary:
        """Reconcile every card known to either side.

        Storage failures on one card are logged and reported as ERROR
        outcomes; the remaining cards are still processed.
        """
        local_ids = await self._local.list_card_ids()
        remote_ids = await self._remote.list_card_ids()
        card_ids = list(dict.fromkeys([*local_ids, *remote_ids]))

        summary = SyncSummary()
        for card_id in card_ids:
            try:
                outcome = await self.reconcile(card_id)
            except Exception as e:
                logger.warning("Failed to reconcile card %s", card_id, exc_info=True)
                outcome = SyncOutcome(card_id=card_id, action=SyncAction.ERROR, message=str(e))
            summary.outcomes.append(outcome)

        logger.info("Reconciled %d cards: %s", len(card_ids), summary.to_dict())
        return summary

    async def _reconcile_locked(self, card_id: CardId) -> SyncOutcome:
        local = await self._local.get_card(card_id)
        remote = await self._remote.get_card(card_id)

        if local is None and remote is None:
            raise LookupError(f"Card {card_id} not found locally or remotely")

        if remote is None and local is not None:
            synced = mark_synced(local)
            await self._remote.save_card(synced)
            await self._local.save_card(synced)
            logger.info("Created card %s on remote", card_id)
            return SyncOutcome(card_id=card_id, action=SyncAction.CREATED_REMOTE, card=synced)

        if local is None:
            await self._local.save_card(remote)
            logger.info("Pulled new card %s from remote", card_id)
            return SyncOutcome(card_id=card_id, action=SyncAction.PULLED, card=remote)

        merged, report = merge_cards_with_report(local, remote)

        if report.has_conflict:
            await self._local.save_card(merged)
            logger.warning(
                "Card %s left in conflict: %s",
                card_id,
                ", ".join(f.value for f in report.conflicted_fields),
            )
            return SyncOutcome(
                card_id=card_id,
                action=SyncAction.CONFLICT,
                card=merged,
                adopted_fields=tuple(report.adopted_fields),
                conflicted_fields=tuple(report.conflicted_fields),
            )

        if report.fast_path:
            if merged == local:
                return SyncOutcome(card_id=card_id, action=SyncAction.UNCHANGED, card=local)
            await self._local.save_card(merged)
            logger.debug("Pulled remote copy of card %s", card_id)
            return SyncOutcome(card_id=card_id, action=SyncAction.PULLED, card=merged)

        synced = mark_synced(merged)
        await self._remote.save_card(synced)
        await self._local.save_card(synced)
        logger.info(
            "Pushed card %s (%s)",
            card_id,
            ", ".join(f.value for f in report.pending_fields) or "no field changes",
        )
        return SyncOutcome(
            card_id=card_id,
            action=SyncAction.PUSHED,
            card=synced,
            adopted_fields=tuple(report.adopted_fields),
        )

