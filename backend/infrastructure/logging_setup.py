import logging
from typing import Optional

from infrastructure.config.settings import LOG_LEVEL


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single console handler (no-op when the root logger already has one).

    Uses LOG_LEVEL from settings when ``level`` is None; unknown names fall back to INFO.
    """
    level_name = (level or LOG_LEVEL or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    if not isinstance(level_value, int):
        level_value = logging.INFO

    logging.basicConfig(
        level=level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # aiohttp's access/client loggers are chatty at DEBUG.
    logging.getLogger("aiohttp").setLevel(max(level_value, logging.INFO))
