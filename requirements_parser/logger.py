"""Logging for requirements-parser: plain-text records with request and document context."""

import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

# One ID per high-level call; copied into extraction worker threads
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# File name of the PDF being extracted in the current context
document_var: ContextVar[Optional[str]] = ContextVar("document", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ContextLogger:
    """Logger wrapper rendering ``extra_data`` as ``[key=value, ...]``.

    The current document's ``file_name`` and the ``request_id`` are added to
    every record logged inside a request, so model-call and workbook logs can
    be traced back to the upload that caused them.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @staticmethod
    def _context_data(extra_data: Optional[dict[str, Any]]) -> dict[str, Any]:
        data = dict(extra_data) if extra_data else {}
        document = document_var.get()
        if document is not None:
            data.setdefault("file_name", document)
        request_id = request_id_var.get()
        if request_id:
            data["request_id"] = request_id
        return data

    def _log(self, level: int, msg: str, extra_data: Optional[dict[str, Any]], **kwargs: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        data = self._context_data(extra_data)
        if data:
            msg = f"{msg} [{', '.join(f'{key}={value}' for key, value in data.items())}]"
        self.logger.log(level, msg, **kwargs)

    def debug(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, extra_data, **kwargs)

    def info(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, extra_data, **kwargs)

    def warning(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, extra_data, **kwargs)

    def error(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, extra_data, **kwargs)


def setup_logging(log_level: str = "INFO") -> None:
    """Install a single plain-text stdout handler on the root logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR). Unknown
            names fall back to INFO.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name))


def set_request_id(request_id: Optional[str] = None) -> str:
    """Start a request in the current context; a UUID is generated if none is given."""
    request_id = request_id or str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_var.get()


@contextmanager
def document_context(file_name: str) -> Iterator[str]:
    """Tag every record logged inside the block with ``file_name``."""
    token = document_var.set(file_name)
    try:
        yield file_name
    finally:
        document_var.reset(token)


class Timer:
    """Measures a stage in milliseconds; read ``get_elapsed_ms()`` during or after the block."""

    def __init__(self, name: str):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[int] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = self._since_start()

    def _since_start(self) -> int:
        if self.start_time is None:
            return 0
        return int((time.perf_counter() - self.start_time) * 1000)

    def get_elapsed_ms(self) -> int:
        if self.elapsed_ms is not None:
            return self.elapsed_ms
        return self._since_start()
