"""Main CLI application for the Solana indexer.

Usage:
    python -m src.apps.main run [--tokens USDC,SOL] [--blocks]
    python -m src.apps.main dashboard [--host HOST] [--port PORT]
    python -m src.apps.main tokens
    python -m src.apps.main config-show
"""

import asyncio
import functools
import logging
import os
import sys
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.alerts.sender import AlertSender
from src.core.config import Settings
from src.core.tokens import SUPPORTED_TOKENS, get_enabled_tokens
from src.data.websocket import SolanaWebSocketClient
from src.monitoring.monitor import PerformanceMonitor
from src.processing.handler import EventProcessor
from src.storage.journal import EventJournal, JournalConfig
from src.utils.logging import setup_logging

# Setup logging (rich handler with token-safe format)
setup_logging(level=logging.INFO)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Solana Indexer CLI - stream, monitor and report on tracked tokens")
console = Console()


def _load_settings(tokens: Optional[str], log_level: Optional[str]) -> Settings:
    settings = Settings.from_env()
    if tokens:
        settings.tracked_tokens = [s.strip().upper() for s in tokens.split(",") if s.strip()]
    if log_level:
        settings.log_level = log_level.upper()
    return settings


def _apply_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    setup_logging(level=level, log_file=settings.log_file)


async def _run_indexer(settings: Settings, monitor: PerformanceMonitor, subscribe_blocks: bool = False) -> None:
    """Stream updates into the journal until cancelled or the stream gives up."""
    tokens = get_enabled_tokens(settings.tracked_tokens)
    run_dir = os.path.join(settings.data_dir, datetime.now().strftime("%Y%m%d_%H%M%S"))
    journal = EventJournal(JournalConfig(run_dir=run_dir))
    logger.info(f"Journaling events to {run_dir}")

    channels = settings.alerts.enabled_channels
    logger.info(f"Alert channels: {', '.join(channels) if channels else 'none'}")

    async with AlertSender(settings.alerts, monitor=monitor) as alert_sender:
        processor = EventProcessor(
            monitor,
            journal,
            tokens,
            alert_sender=alert_sender,
            slow_processing_warn_ms=settings.monitoring.slow_processing_warn_ms,
        )
        ws_client = SolanaWebSocketClient(
            settings.rpc_ws_url,
            on_update=processor.handle,
            monitor=monitor,
            commitment=settings.commitment,
        )
        ws_client.subscribe_slots()
        for token in tokens:
            ws_client.subscribe_account(token.mint_address)
            ws_client.subscribe_logs(token.mint_address)
        if subscribe_blocks:
            ws_client.subscribe_blocks()

        monitor.start()
        try:
            await ws_client.connect()
        finally:
            monitor.stop()
            await ws_client.disconnect()
            journal.close()


@app.command(help="Run the indexer. Examples:\n  python -m src.apps.main run\n  python -m src.apps.main run --tokens USDC,SOL --blocks")
def run(
    tokens: Optional[str] = typer.Option(None, "--tokens", "-t", help="Comma-separated token symbols, e.g., USDC,SOL"),
    blocks: bool = typer.Option(False, "--blocks", help="Also subscribe to blocks (RPC must support blockSubscribe)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level: DEBUG|INFO|WARNING|ERROR"),
):
    """Run the stream indexer with performance monitoring."""
    settings = _load_settings(tokens, log_level)
    _apply_logging(settings)

    if not get_enabled_tokens(settings.tracked_tokens):
        console.print(f"[red]Error: No supported tokens in {settings.tracked_tokens}[/red]")
        sys.exit(1)

    console.print(Panel.fit("Starting Solana Indexer", style="bold green"))
    console.print(f"[cyan]Endpoint: {settings.rpc_ws_url}[/cyan]")
    console.print(f"[cyan]Tracking: {', '.join(settings.tracked_tokens)}[/cyan]")

    monitor = PerformanceMonitor.from_settings(settings, console=console)
    try:
        asyncio.run(_run_indexer(settings, monitor, subscribe_blocks=blocks))
    except KeyboardInterrupt:
        console.print("\n[yellow]Indexer stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Indexer error: {e}[/red]")
        logger.exception("Indexer error")
        monitor.print_report()
        sys.exit(1)

    monitor.print_report()


def _stop_server_with_indexer(server, task: asyncio.Task) -> None:
    """Done callback: log how the indexer ended and shut the dashboard down."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Indexer failed, stopping dashboard: {error}", exc_info=error)
    else:
        logger.warning("Indexer stopped, stopping dashboard")
    server.should_exit = True


@app.command(help="Run the indexer and serve the web dashboard alongside it.")
def dashboard(
    host: Optional[str] = typer.Option(None, "--host", help="Dashboard server host"),
    port: Optional[int] = typer.Option(None, "--port", help="Dashboard server port"),
    tokens: Optional[str] = typer.Option(None, "--tokens", "-t", help="Comma-separated token symbols"),
):
    """Start the indexer together with the dashboard server."""
    from src.apps.dashboard import create_dashboard_server, setup_dashboard_log_handler

    settings = _load_settings(tokens, None)
    _apply_logging(settings)
    log_handler = setup_dashboard_log_handler()

    host = host or settings.dashboard_host
    port = port or settings.dashboard_port
    console.print(Panel.fit("Starting Dashboard Server", style="bold blue"))
    console.print(f"[cyan]Dashboard will be available at: http://{host}:{port}[/cyan]")

    monitor = PerformanceMonitor.from_settings(settings, on_report=logger.info)

    async def _serve() -> None:
        server = create_dashboard_server(monitor, host=host, port=port, log_handler=log_handler)
        indexer = asyncio.create_task(_run_indexer(settings, monitor))
        indexer.add_done_callback(functools.partial(_stop_server_with_indexer, server))
        try:
            await server.serve()
        finally:
            indexer.cancel()
            try:
                await indexer
            except asyncio.CancelledError:
                pass

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        console.print("\n[yellow]Dashboard stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Dashboard error: {e}[/red]")
        logger.exception("Dashboard error")
        sys.exit(1)


@app.command(help="List supported tokens and whether they are tracked.")
def tokens():
    """Show the token registry."""
    settings = Settings.from_env()
    tracked = set(settings.tracked_tokens)

    table = Table(title="Supported Tokens", show_header=True)
    table.add_column("Symbol", style="cyan")
    table.add_column("Name")
    table.add_column("Mint", style="dim")
    table.add_column("Decimals", justify="right")
    table.add_column("Alert Threshold", justify="right", style="magenta")
    table.add_column("Tracked")
    for token in SUPPORTED_TOKENS.values():
        table.add_row(
            token.symbol,
            token.name,
            token.mint_address,
            str(token.decimals),
            f"{token.alert_threshold:,}",
            "[green]yes[/green]" if token.symbol in tracked else "no",
        )
    console.print(table)


@app.command(help="Show effective configuration (after environment overrides).")
def config_show():
    try:
        settings = Settings.from_env()
        thresholds = settings.monitoring.thresholds
        table = Table(title="Effective Configuration", show_header=True)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="magenta")
        table.add_row("Environment", settings.environment)
        table.add_row("Endpoint", settings.rpc_ws_url)
        table.add_row("Commitment", settings.commitment)
        table.add_row("Tracked Tokens", ", ".join(settings.tracked_tokens))
        table.add_row("Alert Channels", ", ".join(settings.alerts.enabled_channels) or "none")
        table.add_row("Report Interval (s)", str(settings.monitoring.report_interval_seconds))
        table.add_row("Max Processing Time (ms)", str(thresholds.max_processing_time_ms))
        table.add_row("Max Database Latency (ms)", str(thresholds.max_database_latency_ms))
        table.add_row("Max Memory (MB)", str(thresholds.max_memory_bytes // (1024 * 1024)))
        table.add_row("Max Stream Silence (ms)", str(thresholds.max_stream_silence_ms))
        table.add_row("Max Error Rate", f"{thresholds.max_error_rate:.2%}")
        table.add_row("Data Directory", settings.data_dir)
        console.print(table)
    except Exception as e:
        console.print(f"[red]Error showing config: {e}[/red]")
        logger.exception("Config show error")
        sys.exit(1)


if __name__ == "__main__":
    app()
