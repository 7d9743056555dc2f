"""Environment-driven settings and logger setup for the signal engine."""
from __future__ import annotations

import logging
import os
from typing import Optional


# Strip quotes/whitespace so .env "KEY=value " doesn't break things
def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1].strip()
    return v or default


LOG_LEVEL = (_env("SIGNAL_LOG_LEVEL", "INFO") or "INFO").upper()
API_TITLE = _env("SIGNAL_API_TITLE", "Technical Signal API")
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def configure_logger(name: str) -> logging.Logger:
    """Return the named logger with a stream handler and the configured level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        _h = logging.StreamHandler()
        _h.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_h)
    logger.setLevel(LOG_LEVEL)
    return logger
