"""Decoded chat protocol records consumed by the compaction core."""

from histcompact.protocol.nodes import (
    HistoryEntry,
    Node,
    RequestNodeType,
    ResponseNodeType,
    TextNode,
    ThinkingNode,
    ToolResultContentNode,
    ToolResultNode,
    ToolUseNode,
)
from histcompact.protocol.summary import HistoryEndExchange, HistorySummaryPayload

__all__ = [
    "HistoryEndExchange",
    "HistoryEntry",
    "HistorySummaryPayload",
    "Node",
    "RequestNodeType",
    "ResponseNodeType",
    "TextNode",
    "ThinkingNode",
    "ToolResultContentNode",
    "ToolResultNode",
    "ToolUseNode",
]
