"""Structured JSON logging for the Nomad MCP Server.

Every record is emitted as one JSON object. ACL secrets are scrubbed by a
filter on the handler, so a token installed at runtime (e.g. by ACL
bootstrap) never reaches the log stream even if it ends up in a message.
"""

import logging
import sys
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from pythonjsonlogger import jsonlogger

REDACTED = "***REDACTED***"

# Attribute names owned by logging.LogRecord; extra keys must not reuse them
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_SENSITIVE_PATTERNS = (
    "secret", "password", "token", "key", "credential",
    "value", "items", "rules", "policy", "job_spec", "body",
)


class NomadJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level, logger and source location."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }


class SecretRedactionFilter(logging.Filter):
    """Replace known secret values in messages and string extras."""

    def __init__(self):
        super().__init__()
        self._secrets: Set[str] = set()
        self._lock = threading.Lock()

    def add_secret(self, secret: Optional[str]) -> None:
        if secret:
            with self._lock:
                self._secrets.add(secret)

    def _scrub(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        with self._lock:
            if not self._secrets:
                return True
            record.msg = self._scrub(record.getMessage())
            record.args = ()
            for attr, value in list(record.__dict__.items()):
                if attr not in _RECORD_ATTRIBUTES and isinstance(value, str):
                    setattr(record, attr, self._scrub(value))
        return True


_redaction_filter = SecretRedactionFilter()


def register_secret(secret: Optional[str]) -> None:
    """Make sure a secret value is never written to the logs."""
    _redaction_filter.add_secret(secret)


def setup_logging(level: str = "INFO", use_stderr: bool = False) -> None:
    """Configure structured JSON logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_stderr: Log to stderr; required under the MCP stdio transport
            where stdout carries JSON-RPC
    """
    handler = logging.StreamHandler(sys.stderr if use_stderr else sys.stdout)
    handler.setFormatter(NomadJsonFormatter(
        fmt="%(timestamp)s %(level)s %(name)s %(message)s"
    ))
    handler.addFilter(_redaction_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = [handler]

    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def is_sensitive(key: str) -> bool:
    """Check if a field name might carry secret material."""
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in _SENSITIVE_PATTERNS)


class ToolInvocationLogger:
    """Logs one operation invocation as start / success / failure events.

    Context values whose names look sensitive are dropped, and the rest are
    namespaced under ``arg_`` when they would clash with LogRecord fields.
    Each event carries the elapsed time since ``start``.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._started: Optional[float] = None
        self._tool_name: Optional[str] = None
        self._context: Dict[str, Any] = {}

    def start(self, tool_name: str, **context) -> "ToolInvocationLogger":
        self._started = time.monotonic()
        self._tool_name = tool_name
        self._context = self._safe(context)
        self._emit(logging.INFO, "Tool invocation started", "tool_start")
        return self

    def success(self, **result_info) -> None:
        self._emit(
            logging.INFO, "Tool invocation succeeded", "tool_success",
            duration_ms=self._elapsed_ms(), **self._safe(result_info),
        )

    def failure(self, error: str, **result_info) -> None:
        """Log a failed invocation.

        Args:
            error: Error message; secrets are scrubbed by the handler filter
            **result_info: Extra non-sensitive fields (error_type, status_code)
        """
        self._emit(
            logging.ERROR, "Tool invocation failed", "tool_failure",
            duration_ms=self._elapsed_ms(), error=error, **self._safe(result_info),
        )

    def _emit(self, level: int, message: str, event: str, **fields) -> None:
        extra = {"tool_name": self._tool_name, "event": event, **self._context, **fields}
        self.logger.log(level, message, extra=extra)

    def _elapsed_ms(self) -> int:
        if self._started is None:
            return 0
        return int((time.monotonic() - self._started) * 1000)

    @staticmethod
    def _safe(values: Dict[str, Any]) -> Dict[str, Any]:
        safe = {}
        for key, value in values.items():
            if is_sensitive(key) or value is None:
                continue
            safe[f"arg_{key}" if key in _RECORD_ATTRIBUTES else key] = value
        return safe
