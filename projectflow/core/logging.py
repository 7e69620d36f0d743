"""
Logging configuration

JSON lines in production, a readable single-line format everywhere else.
Secrets passed as dict arguments are redacted before any handler sees them.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from projectflow.config import settings


REDACTED = "[REDACTED]"
SENSITIVE_KEYS = (
    'password', 'token', 'secret', 'authorization', 'cookie',
    'api_key', 'jwt', 'bearer', 'smtp_pass'
)


def redact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``data`` with sensitive keys masked, recursing into dicts and lists of dicts"""
    clean = {}
    for key, value in data.items():
        if any(marker in str(key).lower() for marker in SENSITIVE_KEYS):
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = redact(value)
        elif isinstance(value, list):
            clean[key] = [redact(item) if isinstance(item, dict) else item for item in value]
        else:
            clean[key] = value
    return clean


class SecurityFilter(logging.Filter):
    """Mask credentials in dict messages and dict arguments"""

    def filter(self, record):
        if isinstance(record.msg, dict):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple) and record.args:
            record.args = tuple(redact(a) if isinstance(a, dict) else a for a in record.args)
        for attr in ("authorization", "token", "api_key"):
            if hasattr(record, attr):
                setattr(record, attr, REDACTED)
        return True


class ServiceJSONFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every record with service metadata"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.update({
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'service': settings.app_name,
            'environment': settings.environment,
        })


def _build_formatter() -> logging.Formatter:
    if settings.log_format == "json" and settings.environment == "production":
        return ServiceJSONFormatter(fmt='%(timestamp)s %(level)s %(logger)s %(message)s')
    return logging.Formatter(
        fmt='%(asctime)s %(levelname)-7s %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def setup_logging():
    """Install a single stdout handler on the root logger; safe to call more than once"""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_build_formatter())
    handler.addFilter(SecurityFilter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # The OpenAI client and httpx log every request at INFO
    for name in ("sqlalchemy.engine", "sqlalchemy.pool", "openai", "httpx", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_level": settings.log_level, "log_format": settings.log_format}
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_request_end(logger: logging.Logger, method: str, path: str, status_code: int,
                    duration: float, **context):
    """One line per request; client and server errors at WARNING"""
    logger.log(
        logging.WARNING if status_code >= 400 else logging.INFO,
        f"{method} {path} -> {status_code} in {duration * 1000:.1f}ms",
        extra={"event": "request_end", "method": method, "path": path,
               "status_code": status_code, "duration": duration, **context}
    )
