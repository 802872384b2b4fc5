"""
USB Viewer - FastAPI Application.

Serves the table of currently attached USB devices.
"""

from __future__ import annotations
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from .config_manager import get_config_manager, ConfigManager
from .enumerator import USBEnumerator
from .models import EnumerationResult, TABLE_COLUMNS

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Paths - relative to this package
PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"

# Global instances
config_manager: ConfigManager | None = None
enumerator: USBEnumerator | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global config_manager, enumerator

    logger.info("Starting USB Viewer...")

    config_manager = get_config_manager()
    if enumerator is None:
        enumerator = USBEnumerator.from_config(config_manager.config)

    if sys.platform != "win32":
        logger.warning("WMI is only available on Windows; device queries will fail")

    logger.info("USB Viewer started successfully")

    yield

    logger.info("USB Viewer stopped")


# Create FastAPI app
app = FastAPI(
    title="USB Viewer",
    description="Currently attached USB devices",
    version="0.1.0",
    lifespan=lifespan,
)

# Templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


async def take_snapshot() -> EnumerationResult:
    """Enumerate devices without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, enumerator.snapshot)  # type: ignore


@app.get("/")
async def index(request: Request):
    """Serve the device table."""
    result = await take_snapshot()
    return templates.TemplateResponse(
        request,
        "index.html",
        {"columns": TABLE_COLUMNS, "rows": result.rows(), "error": result.error},
    )


@app.get("/api/devices")
async def get_devices():
    """Get the current device table as JSON."""
    result = await take_snapshot()
    return JSONResponse(result.to_table(), status_code=200 if result.ok else 503)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return JSONResponse({
        "status": "healthy",
        "platform": sys.platform,
    })


def run_server(host: str = "127.0.0.1", port: int = 8080, open_browser: bool = True):
    """Run the server."""
    import uvicorn

    if open_browser:
        # Open browser after short delay
        def open_browser_delayed():
            import time
            import webbrowser
            time.sleep(1.5)
            webbrowser.open(f"http://localhost:{port}")

        import threading
        threading.Thread(target=open_browser_delayed, daemon=True).start()

    uvicorn.run(app, host=host, port=port, log_level="info")
