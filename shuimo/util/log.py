from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from colorama import Fore, Style, init as colorama_init

PathLike = Union[str, os.PathLike]

_PLAIN_FMT = "[%(asctime)s] [%(levelname)-5s] %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"


class ColorFormatter(logging.Formatter):
    """Console formatter with the level name colorized."""
    COLORS = {
        "DEBUG":    Fore.CYAN,
        "INFO":     Fore.GREEN,
        "WARNING":  Fore.YELLOW,
        "ERROR":    Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        text = (
            f"[{self.formatTime(record, self.datefmt)}] "
            f"[{color}{record.levelname:<5s}{Style.RESET_ALL}] "
            f"{record.name}: {record.getMessage()}"
        )
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def configure_logging(level: int = logging.INFO,
                      log_file: Optional[PathLike] = None,
                      name: str = "shuimo") -> logging.Logger:
    """Install a colorized console handler (and optionally a rotating file) on `name`."""
    colorama_init()
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    ch = logging.StreamHandler()
    ch.setFormatter(ColorFormatter(datefmt=_DATEFMT))
    logger.addHandler(ch)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=3)
        fh.setFormatter(logging.Formatter(_PLAIN_FMT, _DATEFMT))
        logger.addHandler(fh)

    logger.debug("logging initialized (level=%s, file=%s)", logging.getLevelName(level), log_file)
    return logger
