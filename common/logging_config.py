# common/logging_config.py
import logging

from .settings import get_settings


def configure_logging() -> None:
    """
    Configure root logging once for a service process.

    The level comes from LOG_LEVEL; repeated calls are harmless because
    ``logging.basicConfig`` does nothing when handlers already exist.
    """
    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
