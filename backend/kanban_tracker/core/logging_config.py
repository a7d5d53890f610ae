import logging
import sys

from kanban_tracker.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Один обработчик в stdout для всего приложения. Повторный вызов ничего не делает."""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("kanban_tracker")
    root.addHandler(handler)
    root.setLevel((level or settings.log_level).upper())
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
