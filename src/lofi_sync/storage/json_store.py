"""JSON-file backed card storage for the CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from lofi_sync.core.card import Card, CardId
from lofi_sync.schema import CardValidationError, card_from_payload, card_to_payload
from lofi_sync.storage.base import CardStorageError
from lofi_sync.storage.memory_store import InMemoryCardStorage

logger = logging.getLogger(__name__)


class JsonFileCardStorage(InMemoryCardStorage):
    """InMemoryCardStorage persisted to a JSON file.

    The file holds ``{"cards": [<card payload>, ...]}``. Every write
    rewrites the whole file. Cards that would not load back (e.g. an empty
    title) are rejected before anything changes.
    """

    def __init__(self, file_path: Path, indent: int = 2) -> None:
        super().__init__()
        self._file_path = file_path
        self._indent = indent

    @property
    def file_path(self) -> Path:
        return self._file_path

    @classmethod
    async def load(cls, file_path: Path, indent: int = 2) -> JsonFileCardStorage:
        """Load storage from file, or start empty if it doesn't exist.

        Raises:
            CardStorageError: If the file is not valid JSON or holds invalid cards
        """
        storage = cls(file_path, indent=indent)
        if file_path.exists():
            storage._load_from_file()
        return storage

    def _load_from_file(self) -> None:
        try:
            with open(self._file_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CardStorageError(f"Cannot read {self._file_path}: {e}") from e

        raw_cards = data.get("cards", []) if isinstance(data, dict) else None
        if not isinstance(raw_cards, list):
            raise CardStorageError(f"{self._file_path}: expected an object with a 'cards' list")

        for raw in raw_cards:
            try:
                card = card_from_payload(raw)
            except CardValidationError as e:
                raise CardStorageError(f"{self._file_path}: {e}") from e
            self._cards[card.id] = card

        logger.debug("Loaded %d cards from %s", len(self._cards), self._file_path)

    def _save_to_file(self) -> None:
        data = {"cards": [card_to_payload(card) for card in self._cards.values()]}
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=self._indent)
        except OSError as e:
            raise CardStorageError(f"Cannot write {self._file_path}: {e}") from e

    def _check_storable(self, card: Card) -> None:
        try:
            card_from_payload(card_to_payload(card))
        except CardValidationError as e:
            raise CardStorageError(f"Refusing to write card {card.id}: {e}") from e

    async def add_card(self, card: Card) -> CardId:
        self._check_storable(card)
        card_id = await super().add_card(card)
        self._save_to_file()
        return card_id

    async def update_card(self, card: Card) -> None:
        self._check_storable(card)
        await super().update_card(card)
        self._save_to_file()

    async def delete_card(self, card_id: CardId) -> bool:
        removed = await super().delete_card(card_id)
        if removed:
            self._save_to_file()
        return removed
