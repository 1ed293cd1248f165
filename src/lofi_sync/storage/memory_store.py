"""In-memory card storage backend."""

from __future__ import annotations

from lofi_sync.core.card import Card, CardId
from lofi_sync.storage.base import CardStorage


class InMemoryCardStorage(CardStorage):
    """Dict-based storage for development and testing.

    Data is lost when the process exits.
    """

    def __init__(self, cards: list[Card] | None = None) -> None:
        self._cards: dict[CardId, Card] = {card.id: card for card in cards or []}

    async def add_card(self, card: Card) -> CardId:
        if card.id in self._cards:
            raise ValueError(f"Card {card.id} already exists")
        self._cards[card.id] = card
        return card.id

    async def get_card(self, card_id: CardId) -> Card | None:
        return self._cards.get(card_id)

    async def update_card(self, card: Card) -> None:
        if card.id not in self._cards:
            raise ValueError(f"Card {card.id} does not exist")
        self._cards[card.id] = card

    async def delete_card(self, card_id: CardId) -> bool:
        return self._cards.pop(card_id, None) is not None

    async def list_card_ids(self) -> list[CardId]:
        return list(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
