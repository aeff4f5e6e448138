"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so every log line carries its
context as structured fields: the route being enriched, the record type being
decoded, the RPC batch size. [Logger][ninasdk.core.logger.Logger] attaches
those fields to the ``LogRecord``; the output format is chosen once, by the
[StructuredFormatter][ninasdk.core.logger.StructuredFormatter] that
[configure_logging()][ninasdk.core.logger.configure_logging] installs on the
``ninasdk`` logger. Two formats are supported: human-readable key=value pairs
(default) and one JSON object per line for log aggregators.

Values containing spaces, equals signs, or quotes are escaped and wrapped in
double quotes. Long values (for example a base64 account blob that ended up in
an error message) are truncated to a configurable maximum length.

Examples:
    ```python
    from ninasdk.core.logger import Logger

    logger = Logger("enricher")
    logger.info("enrich_started", route="HubRoute", items=42)
    # Output: info ninasdk.enricher enrich_started route=HubRoute items=42

    hub_logger = logger.bind(hub="4Z8Ti8ZxPU6mnmr7XjEQtb5rKrcY6pCRpJJdV2S8Npsq")
    hub_logger.debug("hub_content_derived", count=3)
    # Output: debug ninasdk.enricher hub_content_derived hub=4Z8T... count=3
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .config import LoggingConfig


ROOT_LOGGER = "ninasdk"
DEFAULT_MAX_VALUE_LENGTH = 1000


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = DEFAULT_MAX_VALUE_LENGTH,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ' address=Hx1 reason="bad discriminator"'.
        Returns empty string if kwargs is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in kwargs.items():
        s = _truncate(str(v), max_value_length)
        if not s or " " in s or "=" in s or '"' in s or "'" in s:
            escaped = s.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts)


def _truncate(value: str, max_length: int | None) -> str:
    if max_length and len(value) > max_length:
        return value[:max_length] + f"...<truncated {len(value) - max_length} chars>"
    return value


class StructuredFormatter(logging.Formatter):
    """Renders records as ``level name message key=value ...`` or as JSON.

    Reads structured fields from the ``structured_kv`` extra attached by
    [Logger][ninasdk.core.logger.Logger]. Records emitted through plain
    ``logging.getLogger()`` calls are rendered the same way, without fields.
    """

    def __init__(
        self,
        *,
        json_output: bool = False,
        max_value_length: int | None = DEFAULT_MAX_VALUE_LENGTH,
    ) -> None:
        super().__init__()
        self.json_output = json_output
        self.max_value_length = max_value_length

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = getattr(record, "structured_kv", {})
        if self.json_output:
            return self._format_json(record, fields)
        line = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        line += format_kv_pairs(fields, self.max_value_length)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    def _format_json(self, record: logging.LogRecord, fields: dict[str, Any]) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(record.created, datetime.UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for k, v in fields.items():
            payload[k] = _truncate(v, self.max_value_length) if isinstance(v, str) else v
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: LoggingConfig) -> None:
    """Install a [StructuredFormatter][ninasdk.core.logger.StructuredFormatter]
    on the ``ninasdk`` logger hierarchy and apply the configured level.

    Idempotent: an existing structured handler is reconfigured rather than
    duplicated, so building several [Nina][ninasdk.client.Nina] facades does
    not repeat output.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(config.level)
    for handler in root.handlers:
        if isinstance(handler.formatter, StructuredFormatter):
            handler.formatter.json_output = config.json_output
            handler.formatter.max_value_length = config.max_value_length
            return
    handler = logging.StreamHandler()
    handler.setFormatter(
        StructuredFormatter(
            json_output=config.json_output,
            max_value_length=config.max_value_length,
        )
    )
    root.addHandler(handler)


class Logger:
    """Structured logger that attaches keyword arguments as record fields.

    Names are namespaced under ``ninasdk.`` so a single
    [configure_logging()][ninasdk.core.logger.configure_logging] call covers
    every component.

    Examples:
        ```python
        logger = Logger("ledger")
        logger.warning("ledger_retry", attempt=2, delay_s=0.5, error="HTTP 429")
        ```
    """

    def __init__(self, name: str, *, context: dict[str, Any] | None = None) -> None:
        """Initialize a structured logger.

        Args:
            name: Component name; the underlying logger is ``ninasdk.<name>``.
            context: Fields added to every record emitted by this logger.
        """
        self._name = name
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context: Any) -> Logger:
        """Return a child logger whose records always include *context*."""
        return Logger(self._name, context={**self._context, **context})

    def _log(self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        fields = {**self._context, **kwargs}
        extra = {"structured_kv": fields} if fields else {}
        self._logger.log(level, msg, extra=extra, exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a DEBUG level message with optional key=value pairs."""
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an INFO level message with optional key=value pairs."""
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a WARNING level message with optional key=value pairs."""
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with optional key=value pairs."""
        self._log(logging.ERROR, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with the active traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
