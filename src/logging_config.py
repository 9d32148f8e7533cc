"""Shared logging configuration for the research impact rankings project.

Call ``configure_logging()`` once at a CLI entry point. Library modules only
create module-level loggers and never attach handlers themselves.

The level can be overridden with the ``RANKINGS_LOG_LEVEL`` environment
variable (e.g. ``DEBUG``). The call is idempotent: if the root logger already
has handlers, it does nothing.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "rankings.log"


def resolve_level(level: int) -> int:
    """Return the env override level if set and valid, else ``level``."""
    override = os.environ.get("RANKINGS_LOG_LEVEL", "").strip().upper()
    if override:
        resolved = logging.getLevelName(override)
        if isinstance(resolved, int):
            return resolved
    return level


def configure_logging(level: int = logging.INFO, log_dir: str = "logs") -> None:
    """Configure root logger with console + optional file handler."""
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    # File logging is best effort; read-only checkouts still get console output
    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(log_dir, LOG_FILE), mode="a")
        fh.setFormatter(formatter)
        root.addHandler(fh)
    except OSError:
        pass

    root.setLevel(resolve_level(level))
