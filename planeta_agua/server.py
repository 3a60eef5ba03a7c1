# planeta_agua/server.py

import logging
import sys

import uvicorn

from .app import create_app
from .core.config import ConfigurationError, Settings
from .logging import setup_logging

logger = logging.getLogger(__name__)


def run():
    """Load configuration and serve the API; exits non-zero on startup failure."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        setup_logging()
        logger.error(e.message)
        sys.exit(1)

    setup_logging(settings.LOG_CONFIG)
    app = create_app(settings)

    try:
        # uvicorn itself exits with status 1 when the socket cannot be bound.
        uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
    except OSError as e:
        logger.error(f"Could not start server on {settings.HOST}:{settings.PORT}: {e}")
        sys.exit(1)
