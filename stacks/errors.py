"""
Crash log for the stacks CLI.

The CLI shows a one-line message; the traceback goes to
stacks-errors.log in the store directory.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import get_default_store_path

ERROR_LOG_FILENAME = "stacks-errors.log"


def error_log_path(store_path: Optional[Path] = None) -> Path:
    if store_path is None:
        store_path = get_default_store_path()
    return Path(store_path).expanduser() / ERROR_LOG_FILENAME


def log_exception(
    exc: Exception,
    context: str = "",
    store_path: Optional[Path] = None,
) -> Path:
    """
    Append the exception's traceback to the store's error log.

    Args:
        exc: The exception that reached the CLI boundary
        context: Short label written next to the timestamp
        store_path: Store directory; the default store when None

    Returns:
        Path to the error log file, written or not
    """
    log_path = error_log_path(store_path)
    stamp = datetime.now(timezone.utc).isoformat()
    header = f"[{stamp}] {context}".rstrip()
    body = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(f"\n{'=' * 60}\n{header}\n{body}")
    except OSError:
        pass  # The user still gets the one-line message
    return log_path
