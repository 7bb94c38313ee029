import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Concurrent ingestions interleave on one event loop; every line is tagged
# with the document it belongs to. asyncio.to_thread copies the context, so
# worker threads inherit the tag.
_current_document: ContextVar[str] = ContextVar("docingest_document", default="-")


class _DocumentFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.document = _current_document.get()
        return True


class Log:
    """Centralized logging for the ingestion pipeline."""

    _logger: logging.Logger = logging.getLogger("docingest")
    _logger.addFilter(_DocumentFilter())

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level and attach a stdout handler once."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(threadName)s [%(document)s] %(message)s"
                )
            )
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def document(cls, name: str) -> Iterator[None]:
        """Tag every line logged inside the block with the given document."""
        token = _current_document.set(name)
        try:
            yield
        finally:
            _current_document.reset(token)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an informational message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message together with the active traceback."""
        cls._logger.exception(message, extra=kwargs)
