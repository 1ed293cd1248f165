"""Board and column structures grouping cards."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import NewType

from lofi_sync.core.card import Card, CardId, ColumnId, SyncStatus

BoardId = NewType("BoardId", str)

DEFAULT_COLUMN_TITLES: dict[ColumnId, str] = {
    ColumnId.BACKLOG: "Backlog",
    ColumnId.TODO: "To Do",
    ColumnId.IN_PROGRESS: "In Progress",
    ColumnId.REVIEW: "Review",
    ColumnId.DONE: "Done",
}


@dataclass(frozen=True)
class Column:
    """A board column holding card references (normalized by ID)."""

    id: ColumnId
    title: str
    cards: tuple[CardId, ...] = ()

    def without(self, card_id: CardId) -> Column:
        remaining = tuple(c for c in self.cards if c != card_id)
        return Column(id=self.id, title=self.title, cards=remaining)

    def with_card(self, card_id: CardId) -> Column:
        if card_id in self.cards:
            return self
        return Column(id=self.id, title=self.title, cards=(*self.cards, card_id))


@dataclass(frozen=True)
class Board:
    """
    Root aggregate for a kanban project.

    Columns and cards are normalized maps indexed by ID.
    """

    id: BoardId
    title: str
    columns: Mapping[ColumnId, Column] = field(default_factory=dict)
    cards: Mapping[CardId, Card] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))
        object.__setattr__(self, "cards", MappingProxyType(dict(self.cards)))

    @classmethod
    def create(cls, board_id: str, title: str) -> Board:
        """Create an empty board with the default column set."""
        columns = {
            column_id: Column(id=column_id, title=column_title)
            for column_id, column_title in DEFAULT_COLUMN_TITLES.items()
        }
        return cls(id=BoardId(board_id), title=title, columns=columns)

    def cards_in_column(self, column_id: ColumnId) -> list[Card]:
        """Cards whose status is ``column_id``, ordered by position."""
        cards = [card for card in self.cards.values() if card.status == column_id]
        return sorted(cards, key=lambda card: card.position)

    def conflicted_cards(self) -> list[Card]:
        """Cards left in the conflict state by the last merge."""
        return [card for card in self.cards.values() if card.sync_status == SyncStatus.CONFLICT]

    def with_card(self, card: Card) -> Board:
        """Return a new board with ``card`` inserted or replaced.

        Column membership follows the card's status: the card is removed
        from every other column and appended to its own if missing.
        """
        columns: dict[ColumnId, Column] = {}
        for column_id, column in self.columns.items():
            if column_id == card.status:
                columns[column_id] = column.with_card(card.id)
            else:
                columns[column_id] = column.without(card.id)
        if card.status not in columns:
            columns[card.status] = Column(
                id=card.status,
                title=DEFAULT_COLUMN_TITLES[card.status],
                cards=(card.id,),
            )

        cards = dict(self.cards)
        cards[card.id] = card
        return Board(id=self.id, title=self.title, columns=columns, cards=cards)
