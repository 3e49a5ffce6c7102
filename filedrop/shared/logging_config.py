# filedrop/shared/logging_config.py

import logging
import sys

# module-level so every feature module can import it
logger = logging.getLogger("filedrop")

def setup_logging(level: str = "INFO"):
    """
    Configures the root logger for the service.
    Called once from the app factory.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    # Silence noisy libraries
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
