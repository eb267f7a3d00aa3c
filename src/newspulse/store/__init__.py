"""存储层."""

from newspulse.store.kv import KeyValueStore, SqlKeyValueStore
from newspulse.store.repository import (
    ArticleStore,
    CheckpointStore,
    IdIndex,
    PendingListStore,
)

__all__ = [
    "ArticleStore",
    "CheckpointStore",
    "IdIndex",
    "KeyValueStore",
    "PendingListStore",
    "SqlKeyValueStore",
]
