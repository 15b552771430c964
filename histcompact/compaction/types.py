"""Types for the compaction pass."""

from dataclasses import dataclass


@dataclass
class CompactionResult:
    """Outcome of one compaction pass over a history list."""

    checkpoint_index: int | None = None  # index before truncation
    entries_dropped: int = 0
    rendered: bool = False
    summary_node_id: int | None = None
    tool_results_folded: int = 0
    extra_summary_nodes: int = 0
    rendered_text: str | None = None

    @property
    def found_checkpoint(self) -> bool:
        return self.checkpoint_index is not None
