"""Readiness polling for multi-service clusters."""

from loguru import logger

from .settings import Settings, get_settings  # noqa: F401

# Silent until setup_logging() is called
logger.disable(__name__)

__all__ = ["get_settings", "Settings"]
