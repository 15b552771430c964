"""CLI commands for histcompact."""

import json
import sys
from pathlib import Path

import typer
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape

from histcompact import __logo__, __version__
from histcompact.compaction.compactor import HistoryCompactor
from histcompact.config.loader import load_config
from histcompact.config.schema import Config
from histcompact.protocol.nodes import HistoryEntry, Node
from histcompact.render.template import render_summary

app = typer.Typer(
    name="histcompact",
    help=f"{__logo__} histcompact - Chat history compaction",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_history_adapter = TypeAdapter(list[HistoryEntry])
_nodes_adapter = TypeAdapter(list[Node])

_state: dict = {"config": None}


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _get_config() -> Config:
    return _state["config"] or Config()


def _read_json(path: Path):
    """Read a JSON file or exit with a readable error."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        err_console.print(f"[red]Cannot read {path}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        err_console.print(f"[red]Invalid JSON in {path}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} histcompact v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to config file"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override the configured log level"
    ),
):
    """histcompact - Chat history compaction."""
    config = load_config(config_path)
    _state["config"] = config
    _configure_logging(log_level or config.logging.level)


@app.command()
def render(
    payload_file: Path = typer.Argument(..., help="JSON file with a history summary payload"),
    tool_results: Path | None = typer.Option(
        None, "--tool-results", "-t", help="JSON file with a list of tool result nodes"
    ),
):
    """Render a history summary payload to text."""
    payload = _read_json(payload_file)

    extra: list[Node] = []
    if tool_results is not None:
        try:
            extra = _nodes_adapter.validate_python(_read_json(tool_results))
        except ValidationError as e:
            err_console.print(f"[red]Invalid tool result nodes: {e.error_count()} errors[/red]")
            raise typer.Exit(1)

    text = render_summary(payload, extra)
    if text is None:
        err_console.print("[red]Summary is not renderable (blank message template)[/red]")
        raise typer.Exit(1)

    typer.echo(text)


@app.command()
def compact(
    history_file: Path = typer.Argument(..., help="JSON file with a list of history entries"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write compacted history here instead of stdout"
    ),
):
    """Compact a chat history around its latest summary checkpoint."""
    config = _get_config()
    data = _read_json(history_file)

    try:
        history = _history_adapter.validate_python(data)
    except ValidationError as e:
        err_console.print(f"[red]Invalid history: {e.error_count()} errors[/red]")
        raise typer.Exit(1)

    result = HistoryCompactor(config.compaction).compact(history)

    dumped = _history_adapter.dump_python(history, mode="json", exclude_none=True)
    text = json.dumps(dumped, indent=config.output.indent, ensure_ascii=False)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
    else:
        typer.echo(text)

    if not result.found_checkpoint:
        err_console.print("[yellow]No summary checkpoint found, history unchanged[/yellow]")
    elif result.rendered:
        err_console.print(
            f"[green]✓[/green] Dropped {result.entries_dropped} entries, "
            f"folded {result.tool_results_folded} tool results into the summary"
        )
    else:
        err_console.print(
            f"[yellow]Dropped {result.entries_dropped} entries, "
            f"summary not renderable, checkpoint nodes kept[/yellow]"
        )


if __name__ == "__main__":
    app()
