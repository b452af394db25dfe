"""Logging setup for the price comparer application."""

import logging
import sys
from typing import Optional

from .config import app_config

_configured = False


def setup_logging(level: Optional[str] = None):
    """Configure the root logger once for the process."""
    global _configured
    if _configured:
        return
    
    log_level = getattr(logging, (level or app_config.log_level).upper(), logging.INFO)
    
    root = logging.getLogger()
    root.setLevel(log_level)
    
    # Avoid duplicate handlers
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
        root.addHandler(handler)
    
    _configured = True
