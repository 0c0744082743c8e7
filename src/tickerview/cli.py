"""Click-based CLI for tickerview.

Thin wrapper: every command drives a QuoteView over a QuotePipeline and
only formats what comes back.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import click
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from tickerview.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _create_fetcher(config):
    """Build the quote fetcher from config."""
    from tickerview.quotes import AlphaVantageFetcher

    return AlphaVantageFetcher(config.provider)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="TICKERVIEW_CONFIG",
    default=None,
    help="Path to tickerview.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="tickerview")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """tickerview: daily price history charts for a single equity."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol", required=False)
@click.option(
    "--window",
    "-w",
    type=int,
    default=None,
    help="Trailing window in days. Default: view.default_window.",
)
@click.option(
    "--kind",
    "-k",
    type=click.Choice(["line", "area", "bar"], case_sensitive=False),
    default=None,
    help="Chart presentation. Default: view.default_chart_kind.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def show(
    ctx: click.Context,
    symbol: str | None,
    window: int | None,
    kind: str | None,
    output_format: str,
) -> None:
    """Fetch and display the daily series for SYMBOL."""
    from tickerview.core import ConfigError, Failed, Ready

    try:
        config = _load_config(ctx)
    except ConfigError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        raise SystemExit(1)

    if window is not None and window not in config.view.window_choices:
        raise click.BadParameter(
            f"must be one of {list(config.view.window_choices)}",
            param_hint="--window",
        )

    async def _run():
        from tickerview.quotes import QuotePipeline
        from tickerview.view import QuoteView

        fetcher = _create_fetcher(config)
        try:
            pipeline = QuotePipeline(fetcher)
            view = QuoteView(pipeline, config.view)
            if kind is not None:
                view.set_chart_kind(kind.lower())
            if window is not None:
                view.set_window(window)

            if ctx.obj["verbose"]:
                pipeline.subscribe(
                    lambda state: console.print(f"[dim]state: {state.status}[/dim]")
                )

            with console.status(f"Fetching {(symbol or view.symbol).upper()}..."):
                if symbol is None and window is None:
                    await view.start()
                else:
                    if symbol is not None:
                        view.set_symbol(symbol)
                    await view.search()
            return view
        finally:
            await fetcher.close()

    view = _run_async(_run())
    state = view.fetch_state

    if isinstance(state, Failed):
        console.print(f"[red]{state.message}[/red]")
        raise SystemExit(1)
    if not isinstance(state, Ready):
        console.print("[red]No data loaded.[/red]")
        raise SystemExit(1)

    if output_format == "json":
        _output_json(view)
    elif output_format == "csv":
        _output_csv(state.records)
    else:
        _output_table(view, state)


def _output_table(view, state) -> None:
    """Render the series and the latest-day summary as Rich tables."""
    table = Table(
        title=f"{state.symbol}: last {state.window_days} days ({view.chart_kind} chart)"
    )
    table.add_column("Date", style="bold")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Volume", justify="right")

    for r in state.records:
        table.add_row(
            str(r.date),
            f"{r.open:.2f}",
            f"{r.high:.2f}",
            f"{r.low:.2f}",
            f"{r.close:.2f}",
            f"{r.volume:,}",
        )

    console.print(table)

    latest = view.latest()
    if latest is None:
        console.print("[yellow]No trading days in the selected window.[/yellow]")
        return

    summary = Table(title=f"Latest Data ({latest.date})", show_header=False)
    summary.add_column("Field", style="bold")
    summary.add_column("Value", justify="right")
    summary.add_row("Open", str(latest.open))
    summary.add_row("High", str(latest.high))
    summary.add_row("Low", str(latest.low))
    summary.add_row("Close", str(latest.close))
    summary.add_row("Volume", latest.volume_display)
    console.print(summary)


def _output_json(view) -> None:
    """Write the chart description and latest-day summary as JSON to stdout."""
    chart = view.chart()
    latest = view.latest()
    output = {
        "symbol": view.symbol,
        "window_days": view.window_days,
        "chart": chart.model_dump(mode="json") if chart else None,
        "latest": latest.model_dump(mode="json") if latest else None,
    }
    click.echo(json.dumps(output, indent=2, default=str))


def _output_csv(records) -> None:
    """Write the series as CSV to stdout."""
    import csv
    import io

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["date", "open", "high", "low", "close", "volume"])
    for r in records:
        writer.writerow([str(r.date), r.open, r.high, r.low, r.close, r.volume])
    click.echo(buf.getvalue(), nl=False)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address. Default: api.host.")
@click.option("--port", "-p", type=int, default=None, help="Port number. Default: api.port.")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]uvicorn not installed. Install with: "
            "pip install tickerview[api][/red]"
        )
        raise SystemExit(1)

    from tickerview.core import ConfigError

    try:
        config = _load_config(ctx)
    except ConfigError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        raise SystemExit(1)

    if ctx.obj.get("config_path"):
        # The app factory reloads config in the server process
        os.environ["TICKERVIEW_CONFIG"] = ctx.obj["config_path"]

    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting tickerview API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "tickerview.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
