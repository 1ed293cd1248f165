"""Pydantic models for the card/board wire format.

Payloads use the camelCase JSON shape of the board API. Everything that
reaches the merge engine goes through these models first, so shape and
type errors are reported here rather than inside a merge.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

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
from lofi_sync.utils.timeutils import ensure_utc, format_timestamp


class CardValidationError(ValueError):
    """Raised when a card or board payload fails validation."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, what: str, exc: ValidationError) -> CardValidationError:
        errors = [dict(e) for e in exc.errors(include_url=False)]
        details = "; ".join(
            f"{'.'.join(str(p) for p in e['loc']) or '<root>'}: {e['msg']}" for e in errors
        )
        return cls(f"Invalid {what}: {details}", errors)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CardModel(_WireModel):
    """Wire representation of a card."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str | None = None
    status: ColumnId
    priority: CardPriority
    labels: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list)
    position: float = 0
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    dirty_fields: list[MutableCardField] | None = Field(None, alias="dirtyFields")
    sync_snapshot: dict[str, Any] | None = Field(None, alias="syncSnapshot")
    sync_status: SyncStatus | None = Field(None, alias="syncStatus")

    @field_validator("dirty_fields")
    @classmethod
    def _unique_dirty_fields(
        cls, value: list[MutableCardField] | None
    ) -> list[MutableCardField] | None:
        if value is not None and len(set(value)) != len(value):
            raise ValueError("dirtyFields must not contain duplicates")
        return value

    @field_validator("sync_snapshot")
    @classmethod
    def _snapshot_keys(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is None:
            return None
        unknown = sorted(set(value) - {f.value for f in MUTABLE_CARD_FIELDS})
        if unknown:
            raise ValueError(f"syncSnapshot has non-mutable keys: {', '.join(unknown)}")
        return value

    def to_card(self) -> Card:
        return Card(
            id=CardId(self.id),
            title=self.title,
            description=self.description,
            status=self.status,
            priority=self.priority,
            labels=tuple(self.labels),
            assignees=tuple(self.assignees),
            position=self.position,
            created_at=ensure_utc(self.created_at),
            updated_at=ensure_utc(self.updated_at),
            dirty_fields=frozenset(self.dirty_fields or ()),
            sync_snapshot=self.sync_snapshot,
            sync_status=self.sync_status,
        )


class ColumnModel(_WireModel):
    """Wire representation of a column."""

    id: ColumnId
    title: str
    cards: list[str] = Field(default_factory=list)


class BoardModel(_WireModel):
    """Wire representation of a board."""

    id: str = Field(..., min_length=1)
    title: str
    columns: dict[ColumnId, ColumnModel] = Field(default_factory=dict)
    cards: dict[str, CardModel] = Field(default_factory=dict)


def card_from_payload(payload: dict[str, Any]) -> Card:
    """Validate a card payload and build a Card.

    Raises:
        CardValidationError: If the payload does not match the card shape
    """
    try:
        model = CardModel.model_validate(payload)
    except ValidationError as e:
        raise CardValidationError.from_pydantic("card", e) from e
    return model.to_card()


def _wire_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def card_to_payload(card: Card) -> dict[str, Any]:
    """Serialize a Card to the camelCase wire format.

    Optional sync fields are omitted when unset, matching the API.
    """
    payload: dict[str, Any] = {
        "id": card.id,
        "title": card.title,
        "status": card.status.value,
        "priority": card.priority.value,
        "labels": list(card.labels),
        "assignees": list(card.assignees),
        "position": card.position,
        "createdAt": format_timestamp(card.created_at),
        "updatedAt": format_timestamp(card.updated_at),
    }
    if card.description is not None:
        payload["description"] = card.description
    if card.dirty_fields:
        payload["dirtyFields"] = [f.value for f in MUTABLE_CARD_FIELDS if f in card.dirty_fields]
    if card.sync_snapshot is not None:
        payload["syncSnapshot"] = {
            str(key): _wire_value(value) for key, value in card.sync_snapshot.items()
        }
    if card.sync_status is not None:
        payload["syncStatus"] = card.sync_status.value
    return payload


def board_from_payload(payload: dict[str, Any]) -> Board:
    """Validate a board payload and build a Board.

    Raises:
        CardValidationError: If the payload does not match the board shape
    """
    try:
        model = BoardModel.model_validate(payload)
    except ValidationError as e:
        raise CardValidationError.from_pydantic("board", e) from e

    cards = {CardId(card_id): card.to_card() for card_id, card in model.cards.items()}
    columns = {
        column_id: Column(
            id=column.id,
            title=column.title,
            cards=tuple(CardId(c) for c in column.cards),
        )
        for column_id, column in model.columns.items()
    }
    return Board(id=BoardId(model.id), title=model.title, columns=columns, cards=cards)


def board_to_payload(board: Board) -> dict[str, Any]:
    """Serialize a Board to the wire format."""
    return {
        "id": board.id,
        "title": board.title,
        "columns": {
            column_id.value: {
                "id": column.id.value,
                "title": column.title,
                "cards": list(column.cards),
            }
            for column_id, column in board.columns.items()
        },
        "cards": {card_id: card_to_payload(card) for card_id, card in board.cards.items()},
    }
