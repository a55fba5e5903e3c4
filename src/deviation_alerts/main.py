# src/deviation_alerts/main.py

# --- Built Ins ---
import sys

# --- Installed ---
from aiohttp import web
from loguru import logger as log
from pydantic import ValidationError

# --- Local Application Imports ---
from .config.models import load_settings
from .core.errors import StartupError
from .server.app import create_app
from .utils.logging import setup_logging


def main() -> None:
    """Starts the alert server. Exits with status 1 if it cannot start serving."""
    setup_logging()
    try:
        settings = load_settings()
    except ValidationError as e:
        log.critical(f"Invalid configuration: {e}")
        sys.exit(1)
    setup_logging(settings.log_level)

    log.info("Starting up server.")
    app = create_app(settings)
    try:
        web.run_app(
            app,
            host=settings.server.host,
            port=settings.server.port,
            print=lambda _: log.success(f"Server successfully running on port {settings.server.port}"),
        )
    except StartupError as e:
        log.critical(f"Could not start server: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
