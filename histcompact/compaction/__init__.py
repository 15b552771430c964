"""History compaction around summary checkpoints."""

from histcompact.compaction.compactor import HistoryCompactor, compact_chat_history
from histcompact.compaction.types import CompactionResult

__all__ = [
    "CompactionResult",
    "HistoryCompactor",
    "compact_chat_history",
]
