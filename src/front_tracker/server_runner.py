"""Serve the JSON API with uvicorn."""

from __future__ import annotations

import logging
import threading
import webbrowser
from pathlib import Path
from typing import Optional

import uvicorn

from .clock import Clock
from .config import TrackerSettings
from .paths import get_db_path
from .webapp import create_app

logger = logging.getLogger(__name__)


def run_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    clock: Optional[Clock] = None,
    open_browser: bool = False,
    log_level: str = "info",
) -> None:
    """Build the app for ``db_path`` and block serving it on ``host:port``."""
    resolved_db_path = db_path or get_db_path()
    resolved_settings = settings or TrackerSettings()
    app = create_app(db_path=resolved_db_path, settings=resolved_settings, clock=clock)
    logger.info(
        "Serving front tracker API for %s on %s:%d (page size %d, char limit %d, window %s)",
        resolved_db_path,
        host,
        port,
        resolved_settings.history_page_size,
        resolved_settings.page_char_limit,
        resolved_settings.default_breakdown_window,
    )

    if open_browser:
        # uvicorn.run blocks, so the docs tab is opened once the socket is likely bound.
        timer = threading.Timer(1.0, _open_docs, args=(f"http://{host}:{port}/docs",))
        timer.daemon = True
        timer.start()

    uvicorn.run(app, host=host, port=port, log_level=log_level)


def _open_docs(url: str) -> None:
    if not webbrowser.open(url):
        logger.warning("No browser available to open %s", url)
