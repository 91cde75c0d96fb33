"""
Console logging for the host loop.

Engine modules only create module loggers; handlers are installed once here,
from `main()`. RABBITCARE_LOG_LEVEL takes a level name such as "debug".
"""
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# requests logs every connection at DEBUG through urllib3
_CHATTY_LOGGERS = ("urllib3",)


def configure_logging(default_level: int = logging.INFO, env=None) -> int:
    """Install the console handler and return the level in effect."""
    env = os.environ if env is None else env
    level = default_level
    name = env.get("RABBITCARE_LOG_LEVEL", "").strip().upper()
    if name:
        resolved = logging.getLevelName(name)
        if isinstance(resolved, int):
            level = resolved
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for chatty in _CHATTY_LOGGERS:
        logging.getLogger(chatty).setLevel(max(level, logging.WARNING))
    if name and level == default_level and name != logging.getLevelName(default_level):
        logging.getLogger(__name__).warning("Unknown RABBITCARE_LOG_LEVEL=%r; using %s",
                                            name, logging.getLevelName(level))
    return level
