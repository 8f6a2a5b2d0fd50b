"""Logging configuration for readiness waits."""

import logging
import sys

from loguru import logger

PACKAGE_NAME = "cluster_readiness"


class InterceptHandler(logging.Handler):
    """Intercept standard logging messages toward loguru."""

    def emit(self, record):
        # Get corresponding loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str | None = None):
    """Configure loguru logging and enable the package's log output.

    The package keeps its logger disabled on import; calling this turns it on.

    Args:
        log_level: Log level to use. Falls back to the ``log_level`` setting.
    """
    if log_level is None:
        from cluster_readiness.settings import get_settings

        log_level = get_settings().log_level
    log_level = log_level.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=log_level,
        colorize=True,
    )
    logger.enable(PACKAGE_NAME)

    logger.info(f"Log level set to: {log_level}")

    # Redirect all standard logging to loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for noisy_logger in ("urllib3", "asyncio", PACKAGE_NAME):
        logging.getLogger(noisy_logger).setLevel(log_level)
