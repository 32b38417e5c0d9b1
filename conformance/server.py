# conformance/server.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from .errors import SetupError
from .settings import HarnessConfig

APP_DIR = Path(__file__).resolve().parent
UI_DIR = APP_DIR / "ui"

logger = logging.getLogger(__name__)


def render_index(config: HarnessConfig) -> str:
    if not config.input_selector.startswith("#"):
        raise SetupError(f"Harness page needs an id selector, got {config.input_selector!r}")
    html = (UI_DIR / "index.html").read_text(encoding="utf-8")
    return (
        html.replace("__INPUT_ID__", config.input_selector[1:])
        .replace("__DEMUXER_GLOBAL__", config.demuxer_global)
        .replace("__DEMUXER_ENTRY__", config.demuxer_entry)
    )


def create_app(config: Optional[HarnessConfig] = None) -> FastAPI:
    """Serve the harness page and the demuxer bundle it loads."""
    config = config or HarnessConfig.from_env()
    index_html = render_index(config)
    bundle_present = config.demuxer_dist.is_dir()

    app = FastAPI(title="Demuxer Conformance Harness", docs_url=None, redoc_url=None)
    if bundle_present:
        app.mount("/demuxer", StaticFiles(directory=config.demuxer_dist), name="demuxer")
    else:
        logger.warning("Demuxer bundle directory %s not found; /demuxer/ is not served", config.demuxer_dist)

    @app.get("/", response_class=HTMLResponse)
    def index():
        return index_html

    @app.get("/health")
    def health():
        return {"ok": True, "demuxer": bundle_present}

    return app
