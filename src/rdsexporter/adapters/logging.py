"""Python logging handler adapter.

Bridges the standard library logging module to LogStoragePort so the
exporter's own log records can be served on the ``/logs`` endpoint.
"""

import logging
import sys
import traceback

from rdsexporter.core.models import LogEntry
from rdsexporter.core.ports import LogStoragePort

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ObservabilityHandler(logging.Handler):
    """Logging handler that writes log records to a LogStoragePort.

    Extra fields passed with ``extra=`` become entry attributes, which is
    how the pollers attach event ids, stream names and regions.
    """

    def __init__(self, storage: LogStoragePort, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._storage = storage

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the storage backend."""
        try:
            attributes: dict[str, str | int | float | bool] = {
                "logger": record.name,
                "funcName": record.funcName or "",
                "lineno": record.lineno,
            }

            # Add any extra attributes passed via logging call
            for key, value in record.__dict__.items():
                if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                    value, (str, int, float, bool)
                ):
                    attributes[key] = value

            if record.exc_info:
                exc_type, exc_value, exc_tb = record.exc_info
                if exc_type is not None:
                    attributes["exc_type"] = exc_type.__name__
                if exc_value is not None:
                    attributes["exc_message"] = str(exc_value)
                if exc_tb is not None:
                    attributes["exc_traceback"] = "".join(
                        traceback.format_exception(exc_type, exc_value, exc_tb)
                    )

            entry = LogEntry(
                timestamp=record.created,
                level=record.levelname,
                message=record.getMessage(),
                attributes=attributes,
            )
            self._storage.write_sync(entry)
        except Exception:
            self.handleError(record)


def configure_logging(level: str, storage: LogStoragePort | None = None) -> None:
    """Set up root logging: stderr output plus, optionally, a storage handler.

    Args:
        level: Level name (e.g., "info", "DEBUG").
        storage: Log storage that receives a copy of every record.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers: list[logging.Handler] = [stream]
    if storage is not None:
        handlers.append(ObservabilityHandler(storage))

    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
