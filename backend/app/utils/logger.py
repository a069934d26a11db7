"""Logging configuration for the application."""
import logging
import sys
from app.config import settings

LOG_LEVEL = logging.DEBUG if settings.environment == "development" else logging.INFO

# Shared application logger; components tag messages with a [PREFIX]
logger = logging.getLogger("app")
logger.setLevel(LOG_LEVEL)

handler = logging.StreamHandler(sys.stdout)
handler.setLevel(LOG_LEVEL)
handler.setFormatter(
    logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
)

if not logger.handlers:
    logger.addHandler(handler)

# Uvicorn installs its own root handlers; avoid printing every line twice
logger.propagate = False


def mask_secret(value: str | None, visible: int = 6) -> str:
    """Shorten a credential for log output."""
    if not value:
        return "None"
    if len(value) <= visible:
        return "***"
    return f"{value[:visible]}..."


__all__ = ["logger", "mask_secret"]
