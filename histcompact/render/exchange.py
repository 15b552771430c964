"""Render a preserved exchange into the nested-tag transcript block."""

from dataclasses import dataclass, field
from typing import Iterable

from histcompact.protocol.nodes import Node, ResponseNodeType
from histcompact.protocol.summary import HistoryEndExchange


@dataclass
class ToolResultContext:
    id: str
    content: str
    is_error: bool


@dataclass
class ToolUseContext:
    name: str
    id: str
    input: str


@dataclass
class ExchangeRenderContext:
    """Normalized view of one exchange, built fresh for each render."""

    user_message: str = ""
    tool_results: list[ToolResultContext] = field(default_factory=list)
    thinking: str = ""
    response_text: str = ""
    tool_uses: list[ToolUseContext] = field(default_factory=list)
    has_response: bool = False


def normalize_joined_lines(lines: Iterable[str]) -> str:
    """Join fragments with single newlines, skipping ones that end up empty.

    Trailing newlines are stripped from every fragment first, so blank
    fragments never leave gaps in the joined text.
    """
    kept = []
    for line in lines:
        line = line.rstrip("\n")
        if line:
            kept.append(line)
    return "\n".join(kept)


def extract_user_message(nodes: list[Node], fallback: str) -> str:
    """Join the text request nodes, or return *fallback* when that is blank."""
    joined = normalize_joined_lines(
        n.text_payload.content for n in nodes if n.text_payload is not None
    )
    if joined.strip():
        return joined
    return fallback


def _extract_response_text(nodes: list[Node], fallback: str) -> str:
    # The last finished text wins over raw streaming chunks.
    finished: str | None = None
    raw_parts: list[str] = []
    for n in nodes:
        if not n.content.strip():
            continue
        if n.type == ResponseNodeType.MAIN_TEXT_FINISHED:
            finished = n.content
        elif n.type == ResponseNodeType.RAW_RESPONSE:
            raw_parts.append(n.content)

    text = (finished if finished is not None else "".join(raw_parts)).strip()
    if not text and fallback.strip():
        text = fallback.strip()
    return text


def build_exchange_context(exchange: HistoryEndExchange) -> ExchangeRenderContext:
    """Normalize an exchange's request/response nodes for rendering."""
    user_message = extract_user_message(exchange.request_nodes, exchange.request_message)

    tool_results = []
    for n in exchange.request_nodes:
        tr = n.tool_result_payload
        # Results without an id cannot be matched to a tool use
        if tr is None or not tr.tool_use_id.strip():
            continue
        tool_results.append(
            ToolResultContext(id=tr.tool_use_id, content=tr.content, is_error=tr.is_error)
        )

    thinking = normalize_joined_lines(
        n.thinking_payload.summary
        for n in exchange.response_nodes
        if n.thinking_payload is not None and n.thinking_payload.summary.strip()
    )

    response_text = _extract_response_text(exchange.response_nodes, exchange.response_text)

    tool_uses = []
    for n in exchange.response_nodes:
        tu = n.tool_use_payload
        if tu is None or not tu.tool_use_id.strip() or not tu.tool_name.strip():
            continue
        tool_uses.append(ToolUseContext(name=tu.tool_name, id=tu.tool_use_id, input=tu.input_json))

    return ExchangeRenderContext(
        user_message=user_message,
        tool_results=tool_results,
        thinking=thinking,
        response_text=response_text,
        tool_uses=tool_uses,
        has_response=bool(thinking or response_text or tool_uses),
    )


def render_exchange(ctx: ExchangeRenderContext) -> str:
    """Render one exchange context into its ``<exchange>`` block.

    Attribute values are inserted verbatim, without escaping: the block is
    transcript text for a language model, not markup for a parser.
    """
    out = ["<exchange>\n", "  <user_request_or_tool_results>\n"]
    if ctx.user_message.strip():
        out.append(ctx.user_message.rstrip("\n") + "\n")
    for tr in ctx.tool_results:
        is_error = "true" if tr.is_error else "false"
        out.append(f'    <tool_result tool_use_id="{tr.id.strip()}" is_error="{is_error}">\n')
        if tr.content.strip():
            out.append(tr.content.rstrip("\n") + "\n")
        out.append("    </tool_result>\n")
    out.append("  </user_request_or_tool_results>\n")

    if ctx.has_response:
        out.append("  <agent_response_or_tool_uses>\n")
        if ctx.thinking.strip():
            out.append("    <thinking>\n")
            out.append(ctx.thinking.rstrip("\n") + "\n")
            out.append("    </thinking>\n")
        if ctx.response_text.strip():
            out.append(ctx.response_text.rstrip("\n") + "\n")
        for tu in ctx.tool_uses:
            out.append(f'    <tool_use name="{tu.name.strip()}" tool_use_id="{tu.id.strip()}">\n')
            if tu.input.strip():
                out.append(tu.input.rstrip("\n") + "\n")
            out.append("    </tool_use>\n")
        out.append("  </agent_response_or_tool_uses>\n")

    out.append("</exchange>")
    return "".join(out)


def render_exchanges(exchanges: Iterable[HistoryEndExchange]) -> str:
    """Render exchanges in order, one block per exchange, newline-separated."""
    return "\n".join(render_exchange(build_exchange_context(ex)) for ex in exchanges)
