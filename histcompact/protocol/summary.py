"""History summary payload carried by a HISTORY_SUMMARY node."""

from typing import Any

from loguru import logger
from pydantic import Field, ValidationError

from histcompact.protocol.nodes import Node, WireModel


class HistoryEndExchange(WireModel):
    """A recent exchange kept in full inside the summary payload."""

    request_message: str = ""
    response_text: str = ""
    request_nodes: list[Node] = Field(default_factory=list)
    response_nodes: list[Node] = Field(default_factory=list)


class HistorySummaryPayload(WireModel):
    """
    Precomputed summary of the conversation before a checkpoint.

    ``message_template`` holds the placeholders filled in at render time.
    An empty template means the payload cannot be rendered.
    """

    summary_text: str = ""
    summarization_request_id: str = ""
    history_beginning_dropped_num_exchanges: int = 0
    history_middle_abridged_text: str = ""
    history_end: list[HistoryEndExchange] = Field(default_factory=list)
    message_template: str = ""

    @property
    def is_renderable(self) -> bool:
        return bool(self.message_template.strip())

    @classmethod
    def decode(cls, value: Any) -> "HistorySummaryPayload":
        """Decode a raw node value, falling back to an empty payload."""
        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            logger.warning(
                f"Undecodable history summary payload ({e.error_count()} errors), "
                "treating as empty"
            )
            return cls()
