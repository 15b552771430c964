"""Tests for exchange rendering."""

from histcompact.protocol.nodes import (
    Node,
    RequestNodeType,
    ResponseNodeType,
    TextNode,
    ThinkingNode,
    ToolResultNode,
    ToolUseNode,
)
from histcompact.protocol.summary import HistoryEndExchange
from histcompact.render.exchange import (
    ExchangeRenderContext,
    ToolResultContext,
    ToolUseContext,
    build_exchange_context,
    extract_user_message,
    normalize_joined_lines,
    render_exchange,
    render_exchanges,
)


def _text(content, node_id=1):
    return Node(id=node_id, type=RequestNodeType.TEXT, text_node=TextNode(content=content))


def _tool_result(tool_use_id, content="", is_error=False):
    return Node(
        id=2,
        type=RequestNodeType.TOOL_RESULT,
        tool_result_node=ToolResultNode(tool_use_id=tool_use_id, content=content, is_error=is_error),
    )


def _finished(content):
    return Node(id=3, type=ResponseNodeType.MAIN_TEXT_FINISHED, content=content)


def _raw(content):
    return Node(id=4, type=ResponseNodeType.RAW_RESPONSE, content=content)


def _thinking(summary):
    return Node(id=5, type=ResponseNodeType.THINKING, thinking=ThinkingNode(summary=summary))


def _tool_use(name, tool_use_id, input_json=""):
    return Node(
        id=6,
        type=ResponseNodeType.TOOL_USE,
        tool_use=ToolUseNode(tool_name=name, tool_use_id=tool_use_id, input_json=input_json),
    )


# ── normalize_joined_lines ──────────────────────────────────────


class TestNormalizeJoinedLines:
    def test_empty(self):
        assert normalize_joined_lines([]) == ""

    def test_joins_with_single_newline(self):
        assert normalize_joined_lines(["a", "b"]) == "a\nb"

    def test_strips_trailing_newlines(self):
        assert normalize_joined_lines(["a\n\n", "b\n"]) == "a\nb"

    def test_skips_empty_fragments(self):
        assert normalize_joined_lines(["", "a", "\n", "b"]) == "a\nb"

    def test_keeps_leading_whitespace(self):
        assert normalize_joined_lines(["  indented"]) == "  indented"


# ── context building ────────────────────────────────────────────


class TestUserMessage:
    def test_joins_text_nodes(self):
        nodes = [_text("first\n"), _text("second")]
        assert extract_user_message(nodes, "fallback") == "first\nsecond"

    def test_fallback_when_blank(self):
        assert extract_user_message([_text("  ")], "fallback") == "fallback"

    def test_fallback_verbatim(self):
        assert extract_user_message([], "  padded\n") == "  padded\n"

    def test_ignores_payload_under_wrong_tag(self):
        wrong = Node(id=1, type=RequestNodeType.IMAGE, text_node=TextNode(content="hidden"))
        assert extract_user_message([wrong], "fallback") == "fallback"


class TestBuildContext:
    def test_tool_results_drop_blank_ids(self):
        ex = HistoryEndExchange(
            request_nodes=[_tool_result(" t1 ", "ok"), _tool_result("  ", "dropped")]
        )
        ctx = build_exchange_context(ex)
        assert ctx.tool_results == [ToolResultContext(id=" t1 ", content="ok", is_error=False)]

    def test_tool_result_tag_without_payload_skipped(self):
        ex = HistoryEndExchange(request_nodes=[Node(id=1, type=RequestNodeType.TOOL_RESULT)])
        assert build_exchange_context(ex).tool_results == []

    def test_thinking_joined_and_blank_skipped(self):
        ex = HistoryEndExchange(response_nodes=[_thinking("one\n"), _thinking("   "), _thinking("two")])
        assert build_exchange_context(ex).thinking == "one\ntwo"

    def test_last_finished_text_wins(self):
        ex = HistoryEndExchange(
            response_text="fallback",
            response_nodes=[_raw("raw"), _finished("first"), _finished("second"), _finished("  ")],
        )
        assert build_exchange_context(ex).response_text == "second"

    def test_raw_chunks_concatenated(self):
        ex = HistoryEndExchange(response_nodes=[_raw("Hel"), _raw("lo "), _raw("world\n")])
        assert build_exchange_context(ex).response_text == "Hello world"

    def test_response_text_fallback_trimmed(self):
        ex = HistoryEndExchange(response_text="  plain answer \n", response_nodes=[_raw("  ")])
        assert build_exchange_context(ex).response_text == "plain answer"

    def test_tool_uses_require_id_and_name(self):
        ex = HistoryEndExchange(
            response_nodes=[
                _tool_use("view", "tu1", '{"path": "a.py"}'),
                _tool_use("", "tu2"),
                _tool_use("view", " "),
            ]
        )
        ctx = build_exchange_context(ex)
        assert ctx.tool_uses == [ToolUseContext(name="view", id="tu1", input='{"path": "a.py"}')]

    def test_has_response_false_when_empty(self):
        ex = HistoryEndExchange(request_message="hi")
        assert build_exchange_context(ex).has_response is False

    def test_has_response_from_tool_use_only(self):
        ex = HistoryEndExchange(response_nodes=[_tool_use("view", "tu1")])
        ctx = build_exchange_context(ex)
        assert ctx.has_response is True
        assert ctx.response_text == ""


# ── render_exchange ─────────────────────────────────────────────


class TestRenderExchange:
    def test_user_and_response(self):
        ex = HistoryEndExchange(request_message="hello", response_nodes=[_finished("world")])
        rendered = render_exchange(build_exchange_context(ex))
        assert rendered == (
            "<exchange>\n"
            "  <user_request_or_tool_results>\n"
            "hello\n"
            "  </user_request_or_tool_results>\n"
            "  <agent_response_or_tool_uses>\n"
            "world\n"
            "  </agent_response_or_tool_uses>\n"
            "</exchange>"
        )
        assert "<thinking>" not in rendered

    def test_no_response_section_without_response(self):
        ex = HistoryEndExchange(request_nodes=[_tool_result("t1", "out\n")])
        rendered = render_exchange(build_exchange_context(ex))
        assert rendered == (
            "<exchange>\n"
            "  <user_request_or_tool_results>\n"
            '    <tool_result tool_use_id="t1" is_error="false">\n'
            "out\n"
            "    </tool_result>\n"
            "  </user_request_or_tool_results>\n"
            "</exchange>"
        )

    def test_full_layout(self):
        ctx = ExchangeRenderContext(
            user_message="run it\n",
            tool_results=[ToolResultContext(id=" t0 ", content="", is_error=True)],
            thinking="plan",
            response_text="running",
            tool_uses=[ToolUseContext(name=" shell ", id="t1", input='{"cmd": "ls"}\n')],
            has_response=True,
        )
        assert render_exchange(ctx) == (
            "<exchange>\n"
            "  <user_request_or_tool_results>\n"
            "run it\n"
            '    <tool_result tool_use_id="t0" is_error="true">\n'
            "    </tool_result>\n"
            "  </user_request_or_tool_results>\n"
            "  <agent_response_or_tool_uses>\n"
            "    <thinking>\n"
            "plan\n"
            "    </thinking>\n"
            "running\n"
            '    <tool_use name="shell" tool_use_id="t1">\n'
            '{"cmd": "ls"}\n'
            "    </tool_use>\n"
            "  </agent_response_or_tool_uses>\n"
            "</exchange>"
        )

    def test_attribute_values_not_escaped(self):
        ctx = ExchangeRenderContext(tool_results=[ToolResultContext(id='a"<b>', content="x", is_error=False)])
        assert 'tool_use_id="a"<b>"' in render_exchange(ctx)

    def test_blank_user_message_omitted(self):
        rendered = render_exchange(ExchangeRenderContext(user_message="  \n"))
        assert rendered == (
            "<exchange>\n"
            "  <user_request_or_tool_results>\n"
            "  </user_request_or_tool_results>\n"
            "</exchange>"
        )


class TestRenderExchanges:
    def test_joined_with_newline(self):
        a = HistoryEndExchange(request_message="a")
        b = HistoryEndExchange(request_message="b")
        rendered = render_exchanges([a, b])
        assert rendered.count("<exchange>") == 2
        assert "</exchange>\n<exchange>" in rendered

    def test_empty(self):
        assert render_exchanges([]) == ""
