"""Logging configuration for the keypad calculator service."""
from __future__ import annotations

import contextvars
import logging
import sys

DEFAULT_LOG_LEVEL = logging.INFO

# Module-level flag to track if logging has been initialized
_logging_initialized = False

# Session currently being driven, shown in console output when set
session_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session_id", default=None
)


class ConsoleFormatter(logging.Formatter):
    """Console formatter that tags records with the active session id."""

    def format(self, record: logging.LogRecord) -> str:
        session_id = session_id_var.get()
        record.session_id = f"[{session_id[:8]}]" if session_id else ""
        return super().format(record)


def setup_logging(
    level: int | str = DEFAULT_LOG_LEVEL, force_reinit: bool = False
) -> logging.Logger:
    """Configure the root logger with a console handler.

    Repeated calls are ignored unless ``force_reinit`` is set, so the app
    factory can be called many times (e.g. once per test) without
    stacking handlers.
    """
    global _logging_initialized

    root_logger = logging.getLogger()
    if _logging_initialized and not force_reinit:
        return root_logger

    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger.handlers.clear()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ConsoleFormatter(
        "%(asctime)s %(session_id)s %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    ))
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)

    _logging_initialized = True
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def set_session_id(session_id: str | None) -> contextvars.Token:
    """Mark ``session_id`` as the session being driven in this context."""
    return session_id_var.set(session_id)


def reset_session_id(token: contextvars.Token) -> None:
    session_id_var.reset(token)
