"""Script to check environment configuration."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.core.config import Settings
from src.core.tokens import get_enabled_tokens
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

console = Console()


def main():
    """Check and display environment configuration."""
    console.print(Panel.fit("Environment Configuration Check", style="bold blue"))

    try:
        settings = Settings.from_env()

        # Main config table
        table = Table(title="Main Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="magenta")

        table.add_row("Environment", settings.environment)
        table.add_row("Endpoint", settings.rpc_ws_url)
        table.add_row("Commitment", settings.commitment)
        table.add_row("Tracked Tokens", ", ".join(settings.tracked_tokens))
        table.add_row("Data Directory", settings.data_dir)

        console.print(table)

        # Alert channels
        alerts = settings.alerts
        alert_table = Table(title="Alert Channels")
        alert_table.add_column("Channel", style="cyan")
        alert_table.add_column("Enabled", style="magenta")
        alert_table.add_column("Status", style="yellow")

        alert_table.add_row(
            "Discord",
            "Yes" if alerts.discord.enabled else "No",
            "OK" if not alerts.discord.enabled or alerts.discord.webhook_url else "FAIL",
        )
        alert_table.add_row(
            "Telegram",
            "Yes" if alerts.telegram.enabled else "No",
            "OK" if not alerts.telegram.enabled or (alerts.telegram.bot_token and alerts.telegram.chat_id) else "FAIL",
        )
        alert_table.add_row(
            "Custom Webhook",
            "Yes" if alerts.custom.enabled else "No",
            "OK" if not alerts.custom.enabled or alerts.custom.webhook_url else "FAIL",
        )

        console.print(alert_table)

        # Health thresholds
        thresholds = settings.monitoring.thresholds
        threshold_table = Table(title="Health Thresholds")
        threshold_table.add_column("Parameter", style="cyan")
        threshold_table.add_column("Value", style="magenta")

        threshold_table.add_row("Max Processing Time", f"{thresholds.max_processing_time_ms} ms")
        threshold_table.add_row("Max Database Latency", f"{thresholds.max_database_latency_ms} ms")
        threshold_table.add_row("Max Memory", f"{thresholds.max_memory_bytes // (1024 * 1024)} MB")
        threshold_table.add_row("Max Stream Silence", f"{thresholds.max_stream_silence_ms / 1000:g} s")
        threshold_table.add_row("Max Error Rate", f"{thresholds.max_error_rate * 100}%")
        threshold_table.add_row("Report Interval", f"{settings.monitoring.report_interval_seconds:g} s")

        console.print(threshold_table)

        # Warnings
        warnings = []
        known = {t.symbol for t in get_enabled_tokens(settings.tracked_tokens)}
        unknown = [s for s in settings.tracked_tokens if s not in known]
        if unknown:
            warnings.append(f"WARNING: Unsupported tokens will be ignored: {', '.join(unknown)}")
        if not known:
            warnings.append("WARNING: No supported tokens tracked - nothing will be attributed")
        if not alerts.enabled_channels:
            warnings.append("WARNING: No alert channels enabled - alerts will be dropped")
        if settings.rpc_ws_url.startswith("wss://api.mainnet-beta.solana.com"):
            warnings.append("WARNING: Public mainnet endpoint is rate limited - use a dedicated RPC for production")

        if warnings:
            console.print("\n[bold yellow]Warnings:[/bold yellow]")
            for warning in warnings:
                console.print(f"  {warning}")
        else:
            console.print("\n[bold green]Configuration looks good![/bold green]")

    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        import traceback
        console.print(traceback.format_exc())


if __name__ == "__main__":
    main()
