"""Process-wide logging setup: console or JSON output, request correlation ids."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, RequestLoggingMiddleware stores one id per inbound request here (taken from
# X-Correlation-ID or freshly generated). contextvars are per asyncio task, so the "Spotify
# request start" lines of two concurrent playlist fetches carry different ids.
_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "muzikant_correlation_id", default=""
)

# Loggers that are too chatty at INFO. Our Spotify client logs each call itself.
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")

_PACKAGE_MARKER = "muzikant"


def get_correlation_id() -> str:
    """Correlation id of the current request ("" outside a request)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context, generating one if None."""
    value = correlation_id or str(uuid.uuid4())
    _correlation_id.set(value)
    return value


class CorrelationIdFilter(logging.Filter):
    """Stamp every record with the current correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines; tracebacks shrink to a root-cause-first chain.

    Only frames from our own package are printed. For a failed Spotify call:

    ERROR   │ muzikant.infrastructure.integrations.spotify_client:151 │ Spotify request failed
    ╰─► ConnectError: All connection attempts failed
    ╰─► ExternalServiceError: Spotify request failed: All connection attempts failed
        File "spotify_client.py", line 153, in _do_get
    """

    LINE_FORMAT = "%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s"

    def __init__(self) -> None:
        super().__init__(fmt=self.LINE_FORMAT, datefmt="%H:%M:%S")

    @staticmethod
    def _chain(exc: BaseException) -> list[BaseException]:
        chain: list[BaseException] = []
        cursor: BaseException | None = exc
        while cursor is not None and cursor not in chain:
            chain.append(cursor)
            cursor = cursor.__cause__ or cursor.__context__
        return chain[::-1]

    @staticmethod
    def _own_frames(exc: BaseException) -> list[str]:
        rendered: list[str] = []
        for frame in traceback.extract_tb(exc.__traceback__):
            path = frame.filename
            if "site-packages" in path or _PACKAGE_MARKER not in path:
                continue
            rendered.append(
                f'    File "{Path(path).name}", line {frame.lineno}, in {frame.name}'
            )
            if frame.line:
                rendered.append(f"      {frame.line.strip()}")
        return rendered

    def formatException(self, ei: Any) -> str:
        exc = ei[1]
        if exc is None:
            return ""
        out: list[str] = []
        for link in self._chain(exc):
            out.append(f"╰─► {type(link).__name__}: {link}")
            out.extend(self._own_frames(link))
        return "\n".join(out)


class JsonLineFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """One JSON object per record, for log shippers."""

    def __init__(self, app_name: str) -> None:
        super().__init__("%(message)s")
        self.app_name = app_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            {
                "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
                "level": record.levelname,
                "logger": record.name,
                "line": record.lineno,
                "app": self.app_name,
            }
        )
        if getattr(record, "correlation_id", ""):
            log_record["correlation_id"] = record.correlation_id


# Listen future me, the lifespan calls this once per process start. It REPLACES whatever
# handlers the root logger has, so repeated calls never duplicate output.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "muzikant",
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_level: Level name; unknown names fall back to INFO
        json_format: Emit JSON lines instead of console lines (LOG_JSON_FORMAT)
        app_name: Added to every JSON record as "app"
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        JsonLineFormatter(app_name) if json_format else ConsoleFormatter()
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging ready (level=%s, json=%s)", logging.getLevelName(level), json_format
    )
