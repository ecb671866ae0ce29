"""
Logging configuration for stacks.

Quiet by default; --verbose or STACKS_VERBOSE=1 turns on debug output.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path


def configure_quiet_mode(quiet: bool = True):
    """
    Keep stderr clean for normal CLI use.

    Args:
        quiet: If True, suppress warnings and keep stacks at WARNING.
               If False, leave logging untouched.
    """
    if quiet:
        warnings.filterwarnings("ignore")
        stacks_logger = logging.getLogger("stacks")
        if stacks_logger.level == logging.NOTSET:
            stacks_logger.setLevel(logging.WARNING)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    logging.getLogger("stacks").setLevel(logging.DEBUG)


def configure_ops_log(store_path):
    """Configure a persistent operations log for a store.

    Writes to {store_path}/stacks-ops.log using a rotating file handler
    (1MB max, 3 backups). Always active regardless of --verbose.
    Returns the handler so it can be removed on close().
    """
    log_path = Path(store_path) / "stacks-ops.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=1_000_000,
        backupCount=3,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    stacks_logger = logging.getLogger("stacks")
    stacks_logger.addHandler(handler)
    # INFO must reach the ops log even in quiet mode
    if stacks_logger.level == logging.NOTSET or stacks_logger.level > logging.INFO:
        stacks_logger.setLevel(logging.INFO)

    return handler
