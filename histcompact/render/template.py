"""Fill a history summary message template."""

import re
from typing import Any

from loguru import logger

from histcompact.protocol.nodes import Node
from histcompact.protocol.summary import HistoryEndExchange, HistorySummaryPayload
from histcompact.render.exchange import render_exchanges

PLACEHOLDER_SUMMARY = "{summary}"
PLACEHOLDER_REQUEST_ID = "{summarization_request_id}"
PLACEHOLDER_DROPPED = "{beginning_part_dropped_num_exchanges}"
PLACEHOLDER_MIDDLE = "{middle_part_abridged}"
PLACEHOLDER_END = "{end_part_full}"
PLACEHOLDER_ABRIDGED_LEGACY = "{abridged_history}"  # older templates


def replace_placeholders(template: str, replacements: dict[str, str]) -> str:
    """Replace every occurrence of each token in a single pass.

    Inserted values are never scanned again, so a value that happens to
    contain a token string is left as is. Tokens absent from the template
    are ignored.
    """
    if not replacements:
        return template
    pattern = re.compile("|".join(re.escape(token) for token in replacements))
    return pattern.sub(lambda m: replacements[m.group(0)], template)


def render_summary(
    payload: HistorySummaryPayload | Any,
    extra_tool_results: list[Node] | None = None,
) -> str | None:
    """
    Render a history summary payload into its final message text.

    Args:
        payload: Decoded payload, or the raw value of a HISTORY_SUMMARY node.
        extra_tool_results: Tool result nodes that arrived after the
            checkpoint. They are rendered as one extra trailing exchange.

    Returns:
        The rendered text, or None when the template is blank.
    """
    payload = HistorySummaryPayload.decode(payload)
    if not payload.is_renderable:
        logger.debug("History summary has a blank message template, not renderable")
        return None

    exchanges = list(payload.history_end)
    if extra_tool_results:
        exchanges.append(HistoryEndExchange(request_nodes=list(extra_tool_results)))

    abridged = payload.history_middle_abridged_text
    return replace_placeholders(
        payload.message_template,
        {
            PLACEHOLDER_SUMMARY: payload.summary_text,
            PLACEHOLDER_REQUEST_ID: payload.summarization_request_id,
            PLACEHOLDER_DROPPED: str(payload.history_beginning_dropped_num_exchanges),
            PLACEHOLDER_MIDDLE: abridged,
            PLACEHOLDER_END: render_exchanges(exchanges),
            PLACEHOLDER_ABRIDGED_LEGACY: abridged,
        },
    )
