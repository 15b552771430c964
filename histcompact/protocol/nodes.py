"""Node and history entry records as decoded from the chat protocol."""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestNodeType(IntEnum):
    """Type tags for nodes found in a request node list."""

    TEXT = 0
    TOOL_RESULT = 1
    IMAGE = 2
    IMAGE_ID = 3
    IDE_STATE = 4
    EDIT_EVENTS = 5
    CHECKPOINT_REF = 6
    CHANGE_PERSONALITY = 7
    FILE = 8
    FILE_ID = 9
    HISTORY_SUMMARY = 10


class ResponseNodeType(IntEnum):
    """Type tags for nodes found in a response node list."""

    RAW_RESPONSE = 0
    SUGGESTED_QUESTIONS = 1
    MAIN_TEXT_FINISHED = 2
    WORKSPACE_FILE_CHUNKS = 3
    RELEVANT_SOURCES = 4
    TOOL_USE = 5
    TOOL_USE_START = 7
    THINKING = 8


class WireModel(BaseModel):
    """Base for protocol records: accepts snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextNode(WireModel):
    content: str = ""


class ToolResultContentNode(WireModel):
    type: int = 0
    text_content: str = ""
    image_content: Any = None


class ToolResultNode(WireModel):
    tool_use_id: str = ""
    content: str = ""
    content_nodes: list[ToolResultContentNode] = Field(default_factory=list)
    is_error: bool = False


class ToolUseNode(WireModel):
    tool_name: str = ""
    tool_use_id: str = ""
    input_json: str = ""


class ThinkingNode(WireModel):
    summary: str = ""


class Node(WireModel):
    """
    One unit of conversation content.

    The ``type`` tag decides which payload is meaningful. Payload fields for
    other kinds (image, file, ide state ...) are kept as extra fields and
    passed through untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    id: int = 0
    type: int = 0
    content: str = ""  # streaming response text (raw / finished)
    text_node: TextNode | None = None
    tool_result_node: ToolResultNode | None = None
    tool_use: ToolUseNode | None = None
    thinking: ThinkingNode | None = None
    history_summary_node: Any = None  # opaque until decoded by HistorySummaryPayload

    @classmethod
    def text(cls, node_id: int, content: str) -> "Node":
        """Build a request-side text node."""
        return cls(id=node_id, type=RequestNodeType.TEXT, text_node=TextNode(content=content))

    @property
    def is_history_summary(self) -> bool:
        return self.type == RequestNodeType.HISTORY_SUMMARY

    @property
    def is_tool_result(self) -> bool:
        return self.type == RequestNodeType.TOOL_RESULT

    # Typed accessors: a payload is only visible when the tag matches.

    @property
    def text_payload(self) -> TextNode | None:
        return self.text_node if self.type == RequestNodeType.TEXT else None

    @property
    def tool_result_payload(self) -> ToolResultNode | None:
        return self.tool_result_node if self.type == RequestNodeType.TOOL_RESULT else None

    @property
    def tool_use_payload(self) -> ToolUseNode | None:
        return self.tool_use if self.type == ResponseNodeType.TOOL_USE else None

    @property
    def thinking_payload(self) -> ThinkingNode | None:
        return self.thinking if self.type == ResponseNodeType.THINKING else None


def has_history_summary_node(nodes: list[Node]) -> bool:
    """Check if any node in the list is a history summary marker."""
    return any(n.is_history_summary for n in nodes)


class HistoryEntry(WireModel):
    """
    One turn of the conversation.

    ``request_nodes``, ``structured_request_nodes`` and ``nodes`` are
    alternative encodings of the same turn input left over from protocol
    revisions; the compactor merges them into ``request_nodes``.
    """

    response_text: str = ""
    request_message: str = ""
    request_id: str = ""
    request_nodes: list[Node] = Field(default_factory=list)
    structured_request_nodes: list[Node] = Field(default_factory=list)
    nodes: list[Node] = Field(default_factory=list)
    response_nodes: list[Node] = Field(default_factory=list)
    structured_output_nodes: list[Node] = Field(default_factory=list)

    def has_history_summary(self) -> bool:
        """Check all three request node lists for a summary marker."""
        return (
            has_history_summary_node(self.request_nodes)
            or has_history_summary_node(self.structured_request_nodes)
            or has_history_summary_node(self.nodes)
        )

    def take_request_nodes(self) -> list[Node]:
        """Drain the three request lists into one, in declaration order."""
        merged = [*self.request_nodes, *self.structured_request_nodes, *self.nodes]
        self.request_nodes = []
        self.structured_request_nodes = []
        self.nodes = []
        return merged
