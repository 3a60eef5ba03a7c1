import logging
import logging.config
import os

logger = logging.getLogger("planeta_agua")


def setup_logging(config_path: str = "logging.conf") -> None:
    """Configure logging from an INI file, falling back to a console handler."""
    if os.path.exists(config_path):
        logging.config.fileConfig(config_path, disable_existing_loggers=False)
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
        logger.warning(f"Logging config '{config_path}' not found; using basic console logging")
