"""处理队列核心逻辑."""

from newspulse.core.errors import (
    AIServiceError,
    ContentMismatchError,
    IngestionUnavailable,
    MaxRetriesExceeded,
    MissingLinkError,
    QueueError,
    TransientFetchError,
)
from newspulse.core.pending import MergeResult, PendingQueue, merge_pending

__all__ = [
    "AIServiceError",
    "ContentMismatchError",
    "IngestionUnavailable",
    "MaxRetriesExceeded",
    "MergeResult",
    "MissingLinkError",
    "PendingQueue",
    "QueueError",
    "TransientFetchError",
    "merge_pending",
]
