"""
Logging configuration with secret redaction.

Portal credentials must never reach the log stream, neither as
`password=...` pairs nor as the literal configured values.
"""

import re
import logging
import json
from typing import Iterable, Optional
from datetime import datetime

from portal_qa.utils.config import SECRET_PATTERNS


# LogRecord attributes that are not caller-supplied extras
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'taskName', 'message'
}

REDACTED = "[REDACTED]"


def _extra_fields(record: logging.LogRecord) -> dict:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class RedactingFilter(logging.Filter):
    """Masks secrets in the message, its args and string extras."""

    KEY_PATTERNS = [
        re.compile(
            rf'({pattern})\s*[=:]\s*["\']?([^"\'\s,}}]+)["\']?',
            re.IGNORECASE
        )
        for pattern in SECRET_PATTERNS
    ]

    VALUE_PATTERNS = [
        re.compile(r'Bearer\s+[A-Za-z0-9\-_\.]+', re.IGNORECASE),
        re.compile(r'Basic\s+[A-Za-z0-9\+/=]+', re.IGNORECASE),
        re.compile(r'eyJ[A-Za-z0-9\-_]+\.eyJ[A-Za-z0-9\-_]+'),  # JWTs
    ]

    def __init__(self, secrets: Optional[Iterable[str]] = None):
        super().__init__()
        # Longest first so a secret containing another is masked whole
        self.secrets = sorted({s for s in (secrets or []) if s}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact_string(str(record.msg))

        if record.args:
            record.args = tuple(
                self._redact_string(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        for key, value in _extra_fields(record).items():
            if isinstance(value, str):
                setattr(record, key, self._redact_string(value))

        return True

    def _redact_string(self, text: str) -> str:
        result = text
        for secret in self.secrets:
            result = result.replace(secret, REDACTED)

        for pattern in self.VALUE_PATTERNS:
            result = pattern.sub(REDACTED, result)

        for pattern in self.KEY_PATTERNS:
            result = pattern.sub(rf'\1={REDACTED}', result)

        return result


class JSONFormatter(logging.Formatter):
    """One JSON object per record, including `extra` fields such as stage events."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


def setup_logging():
    """Configure the root logger from LOG_LEVEL / LOG_FORMAT."""
    from portal_qa.utils.config import settings

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

    # Filters run before the formatter, so JSON output is redacted too
    handler.addFilter(RedactingFilter(secrets=[settings.PORTAL_PASSWORD]))
    root_logger.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
