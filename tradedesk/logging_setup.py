from __future__ import annotations
import logging
import logging.config
import os
from typing import Any, Dict, Optional

from tradedesk import config


def setup_logging(log_file: Optional[str] = None) -> logging.Logger:
    """Console logging, plus a file handler when `log_file` is given.

    Level comes from LOG_LEVEL (info by default).
    """
    level = config.log_level()
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level,
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "level": level,
            "filename": log_file,
            "encoding": "utf-8",
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {"handlers": list(handlers), "level": level},
    })

    # weasyprint / fontTools are very chatty at INFO
    logging.getLogger("fontTools").setLevel(logging.ERROR)
    logging.getLogger("weasyprint").setLevel(logging.WARNING)

    return logging.getLogger("tradedesk")
