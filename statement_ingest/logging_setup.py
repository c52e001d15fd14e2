"""Centralized logging configuration for the ``statement_ingest`` package.

Public helpers:

- ``configure_logging(...)``: attach a single ``StreamHandler`` to the package
  root logger (``"statement_ingest"``). Called once by entrypoints (the CLI)
  at process startup. Output goes to ``stderr`` so that machine-readable
  results on ``stdout`` are never interleaved with log lines.
- ``get_logger(name)``: acquire a logger by name, ensuring that the package
  root logger has at least a ``NullHandler`` attached when not configured.
- ``log_timing(logger, message, **context)``: context manager that logs
  ``message`` with the elapsed ``duration_ms`` once the block completes.

Library modules must never attach their own handlers.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import IO, Any

_PKG_LOGGER_NAME = "statement_ingest"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        # WARN is accepted as an alias of WARNING.
        numeric = getattr(logging, "WARNING" if level == "WARN" else level, None)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    env_val = os.getenv("STATEMENT_INGEST_LOG_LEVEL")
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Logging level as ``int`` or level-name string (e.g., ``"DEBUG"``). If
        ``None``, defaults to ``STATEMENT_INGEST_LOG_LEVEL`` when set,
        otherwise ``logging.INFO``.
    fmt:
        Optional logging format string. Defaults to
        ``"%(asctime)s [%(levelname)s] %(name)s %(message)s"``.
    stream:
        Output stream for the handler (defaults to ``sys.stderr`` at call
        time).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s [%(levelname)s] %(name)s %(message)s")
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def reset_logging() -> None:
    """Detach handlers installed by :func:`configure_logging` (test helper)."""

    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, ensuring safe defaults for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


def _format_context(context: dict[str, Any]) -> str:
    if not context:
        return ""
    return " | " + " ".join(f"{k}={v!r}" for k, v in context.items())


@contextmanager
def log_timing(logger: logging.Logger, message: str, **context: Any) -> Iterator[dict[str, Any]]:
    """Log ``message`` at INFO with ``duration_ms`` when the block exits.

    The yielded dict may be updated inside the block to attach result
    details (e.g. transaction counts) to the completion line. Failures are
    not logged here; the exception propagates unchanged.
    """

    t0 = time.perf_counter()
    yield context
    context["duration_ms"] = round((time.perf_counter() - t0) * 1000)
    logger.info("%s%s", message, _format_context(context))


__all__ = ["configure_logging", "get_logger", "log_timing", "reset_logging"]
