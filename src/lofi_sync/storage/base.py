"""Abstract base class for card storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lofi_sync.core.card import Card, CardId


class CardStorageError(Exception):
    """Raised when a storage backend cannot complete an operation."""


class CardStorage(ABC):
    """
    Abstract interface for card storage.

    Used for both sides of a sync: the local store and the remote copy.
    Implementations are constructed explicitly and passed to whatever
    needs them.
    """

    @abstractmethod
    async def add_card(self, card: Card) -> CardId:
        """
        Add a card to storage.

        Args:
            card: The card to add

        Returns:
            The card ID

        Raises:
            ValueError: If a card with the same ID already exists
        """
        ...

    @abstractmethod
    async def get_card(self, card_id: CardId) -> Card | None:
        """
        Get a card by ID.

        Returns:
            The card if found, None otherwise
        """
        ...

    @abstractmethod
    async def update_card(self, card: Card) -> None:
        """
        Replace an existing card.

        Raises:
            ValueError: If the card does not exist
        """
        ...

    @abstractmethod
    async def delete_card(self, card_id: CardId) -> bool:
        """
        Delete a card. Idempotent.

        Returns:
            True if a card was removed
        """
        ...

    @abstractmethod
    async def list_card_ids(self) -> list[CardId]:
        """All card IDs in storage."""
        ...

    async def save_card(self, card: Card) -> None:
        """Insert or replace a card."""
        if await self.get_card(card.id) is None:
            await self.add_card(card)
        else:
            await self.update_card(card)
