"""
Logger setup for hosts embedding the engine.

Modules log through ``logging.getLogger(__name__)`` and never install
handlers themselves; a host calls ``setup_logging`` once with the same
``EngineConfig`` it passes to ``simulate``/``run``.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from qlab_engine.config import DEFAULT_CONFIG, EngineConfig

ROOT_LOGGER = "qlab_engine"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    config: EngineConfig = DEFAULT_CONFIG,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Attach a stdout handler (and a file handler) to the ``qlab_engine`` logger.

    Level comes from ``config.log_level``; ``log_file`` overrides
    ``config.log_file``.  Calling it again replaces the handlers installed by
    the previous call and leaves any others alone.
    """
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {config.log_level!r}")

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for h in [h for h in logger.handlers if getattr(h, "_qlab_owned", False)]:
        logger.removeHandler(h)
        h.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    path = log_file if log_file is not None else config.log_file
    if path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    formatter = logging.Formatter(_FORMAT)
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        h._qlab_owned = True
        logger.addHandler(h)
    return logger
