"""Transcript rendering for history summaries."""

from histcompact.render.exchange import (
    ExchangeRenderContext,
    build_exchange_context,
    normalize_joined_lines,
    render_exchange,
    render_exchanges,
)
from histcompact.render.template import render_summary, replace_placeholders

__all__ = [
    "ExchangeRenderContext",
    "build_exchange_context",
    "normalize_joined_lines",
    "render_exchange",
    "render_exchanges",
    "render_summary",
    "replace_placeholders",
]
