# --- src/dcsim_core/log_config.py ---
import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"
LEVEL_ENV_VAR = "DCSIM_LOG_LEVEL"


def _resolve_level(level):
    override = os.environ.get(LEVEL_ENV_VAR)
    if override:
        named = logging.getLevelName(override.strip().upper())
        if isinstance(named, int):
            return named
    return level


def setup_logging(level=logging.INFO, stream=None):
    """
    Installs a single stream handler on the root logger, replacing any handler
    a previous call (or the host application) left behind.

    `DCSIM_LOG_LEVEL` (e.g. "DEBUG") overrides `level` when it names a known level.
    """
    effective_level = _resolve_level(level)
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.setLevel(effective_level)
    root_logger.addHandler(handler)
    logging.getLogger(__name__).debug(
        "DC solver logging configured at %s.", logging.getLevelName(effective_level)
    )
    return handler
