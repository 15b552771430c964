"""Compaction of chat history around the latest summary checkpoint."""

from loguru import logger

from histcompact.compaction.types import CompactionResult
from histcompact.config.schema import CompactionConfig
from histcompact.protocol.nodes import HistoryEntry, Node
from histcompact.protocol.summary import HistorySummaryPayload
from histcompact.render.template import render_summary


class HistoryCompactor:
    """Rewrites a history list in place so it starts at the last checkpoint.

    The checkpoint entry's summary marker is replaced by one text node holding
    the rendered summary. When the summary cannot be rendered nothing is
    removed from the entry; its request lists are only merged into one.
    """

    def __init__(self, config: CompactionConfig | None = None):
        self.config = config or CompactionConfig()

    def compact(self, history: list[HistoryEntry]) -> CompactionResult:
        """Compact *history* in place and report what happened."""
        result = CompactionResult()
        if not self.config.enabled:
            logger.debug("Compaction disabled, history left untouched")
            return result

        start = self._find_last_checkpoint_idx(history)
        if start is None:
            logger.debug("Compaction skipped: no history summary node in history")
            return result

        result.checkpoint_index = start
        result.entries_dropped = start
        # Entries before the checkpoint are superseded by its summary
        del history[:start]

        entry = history[0]
        merged = entry.take_request_nodes()

        summary_pos = self._find_summary_pos(merged)
        if summary_pos is None:
            logger.warning("Compaction: checkpoint entry lost its summary node after merge")
            entry.request_nodes = merged
            return result

        marker = merged[summary_pos]
        result.summary_node_id = marker.id
        payload = HistorySummaryPayload.decode(marker.history_summary_node)

        tool_results = [n for n in merged if n.tool_result_payload is not None]

        text = render_summary(payload, tool_results)
        if text is None:
            logger.warning(
                f"Compaction: summary node {marker.id} is not renderable, "
                "keeping checkpoint nodes unchanged"
            )
            entry.request_nodes = merged
            return result

        result.extra_summary_nodes = sum(1 for n in merged if n.is_history_summary) - 1
        if result.extra_summary_nodes:
            logger.warning(
                f"Compaction: dropping {result.extra_summary_nodes} extra summary "
                f"node(s) after rendering node {marker.id}"
            )

        others = [n for n in merged if not n.is_history_summary and not n.is_tool_result]
        entry.request_nodes = [Node.text(marker.id, text), *others]

        result.rendered = True
        result.tool_results_folded = len(tool_results)
        result.rendered_text = text

        logger.info(
            f"Compaction: dropped {start} entries before checkpoint, "
            f"folded {len(tool_results)} tool results into summary "
            f"({len(text)} chars)"
        )
        return result

    @staticmethod
    def _find_last_checkpoint_idx(history: list[HistoryEntry]) -> int | None:
        """Find index of the last entry carrying a summary node."""
        for i in range(len(history) - 1, -1, -1):
            if history[i].has_history_summary():
                return i
        return None

    @staticmethod
    def _find_summary_pos(nodes: list[Node]) -> int | None:
        for i, n in enumerate(nodes):
            if n.is_history_summary:
                return i
        return None


def compact_chat_history(history: list[HistoryEntry]) -> CompactionResult:
    """Compact *history* in place with the default configuration."""
    return HistoryCompactor().compact(history)
