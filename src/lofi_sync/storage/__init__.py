"""Storage backends for cards."""

from lofi_sync.storage.base import CardStorage, CardStorageError
from lofi_sync.storage.json_store import JsonFileCardStorage
from lofi_sync.storage.memory_store import InMemoryCardStorage

__all__ = [
    "CardStorage",
    "CardStorageError",
    "InMemoryCardStorage",
    "JsonFileCardStorage",
]
