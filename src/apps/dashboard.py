"""Web dashboard for the indexer.

This module serves the performance monitor's views over HTTP: metrics,
health, CSV export, per-token details and recent log lines, plus a
WebSocket that pushes metrics periodically.
"""

import asyncio
import json
import logging
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse

from src.monitoring.dashboard import PerformanceDashboard
from src.monitoring.monitor import PerformanceMonitor
from src.utils.logging import TokenFilter

logger = logging.getLogger(__name__)

MAX_LOG_BUFFER = 100


class DashboardLogHandler(logging.Handler):
    """Keeps the most recent log records for the dashboard."""

    def __init__(self, capacity: int = MAX_LOG_BUFFER):
        super().__init__()
        self.buffer: Deque[Dict] = deque(maxlen=capacity)
        self.addFilter(TokenFilter())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.token != "-":
                message = f"[{record.token}] {message}"
            self.buffer.append({
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "level": record.levelname,
                "logger": record.name.split(".")[-1],
                "message": message,
            })
        except Exception:
            self.handleError(record)


def setup_dashboard_log_handler() -> DashboardLogHandler:
    """Attach a dashboard log handler to the root logger (once). Call after setup_logging."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, DashboardLogHandler):
            return handler

    handler = DashboardLogHandler()
    handler.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)
    return handler


INDEX_HTML = """
<!DOCTYPE html>
<html>
<head><title>Solana Indexer Dashboard</title></head>
<body>
    <h1>Solana Indexer Dashboard</h1>
    <pre id="report">Loading...</pre>
    <script>
        const ws = new WebSocket(`ws://${location.host}/ws`);
        ws.onmessage = (event) => {
            document.getElementById("report").textContent =
                JSON.stringify(JSON.parse(event.data).data, null, 2);
        };
    </script>
</body>
</html>
"""


def create_app(
    monitor: PerformanceMonitor,
    log_handler: Optional[DashboardLogHandler] = None,
    update_interval: float = 1.0,
) -> FastAPI:
    """Create FastAPI application for the dashboard.

    Args:
        monitor: Monitor whose state is served
        log_handler: Source of recent log lines for /api/logs
        update_interval: Seconds between WebSocket pushes

    Returns:
        FastAPI app
    """
    app = FastAPI(title="Solana Indexer Dashboard")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    views = PerformanceDashboard(monitor)
    active_connections: List[WebSocket] = []

    @app.get("/", response_class=HTMLResponse)
    async def get_dashboard():
        """Serve dashboard HTML."""
        return HTMLResponse(content=INDEX_HTML)

    @app.get("/api/metrics")
    async def get_metrics():
        return views.metrics_json()

    @app.get("/api/health")
    async def get_health():
        return views.health_json()

    @app.get("/api/metrics.csv", response_class=PlainTextResponse)
    async def get_metrics_csv():
        return PlainTextResponse(views.export_csv(), media_type="text/csv")

    @app.get("/api/report", response_class=PlainTextResponse)
    async def get_report():
        return PlainTextResponse(views.formatted_metrics())

    @app.get("/api/tokens/{symbol}")
    async def get_token(symbol: str):
        """Per-token metrics and activity rate."""
        details = views.token_details(symbol.upper())
        if details is None:
            raise HTTPException(status_code=404, detail=f"Token {symbol} is not tracked")
        return details

    @app.get("/api/summary")
    async def get_summary():
        return views.performance_summary()

    @app.get("/api/degradation")
    async def get_degradation():
        return views.check_degradation()

    @app.get("/api/logs")
    async def get_logs():
        if log_handler is None:
            return []
        return list(log_handler.buffer)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Push metrics to the client until it disconnects."""
        await websocket.accept()
        active_connections.append(websocket)
        try:
            while True:
                await websocket.send_text(json.dumps({
                    "type": "update",
                    "data": views.metrics_json(),
                }, default=str))
                await asyncio.sleep(update_interval)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            if websocket in active_connections:
                active_connections.remove(websocket)

    return app


def create_dashboard_server(
    monitor: PerformanceMonitor,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_handler: Optional[DashboardLogHandler] = None,
):
    """Build the uvicorn server for the dashboard.

    Args:
        monitor: Monitor whose state is served
        host: Server host
        port: Server port
        log_handler: Source of recent log lines

    Returns:
        uvicorn.Server; set its should_exit to stop serving
    """
    import uvicorn

    app = create_app(monitor, log_handler=log_handler)
    config = uvicorn.Config(app, host=host, port=port, log_level="info")
    return uvicorn.Server(config)

