"""Logging setup for feed source resolution.

Source entries carry account keys, connection strings and SAS tokens. Every
record passes through :func:`redact_secrets` before it reaches a sink, so
those values are masked even when a caller binds a whole source entry.
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from typing import Any

from loguru import logger

REDACTED = "***"

# Compared lowercased with underscores removed
SECRET_FIELDS = frozenset(
    {
        "accesskeyid",
        "secretaccesskey",
        "sessiontoken",
        "awssecretaccesskey",
        "awssessiontoken",
        "connectionstring",
        "sasurl",
        "accountkey",
    }
)

# sig= in SAS query strings, AccountKey= in connection strings
_SECRET_ASSIGNMENT = re.compile(r"(?i)\b(sig|accountkey|sharedaccesssignature|aws_secret_access_key)=([^&;\s\"']+)")


def _is_secret_field(key: str) -> bool:
    return key.replace("_", "").lower() in SECRET_FIELDS


def scrub_text(text: str) -> str:
    """Mask credential assignments embedded in a URL or connection string."""
    return _SECRET_ASSIGNMENT.sub(lambda match: f"{match.group(1)}={REDACTED}", text)


def _scrub_value(value: Any) -> Any:
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, dict):
        return {
            key: REDACTED if isinstance(key, str) and _is_secret_field(key) else _scrub_value(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_scrub_value(item) for item in value)
    return value


def redact_secrets(record: dict[str, Any]) -> None:
    """loguru patcher masking secret extras and tokens inside the message."""
    extra = record["extra"]
    for key, value in list(extra.items()):
        extra[key] = REDACTED if _is_secret_field(key) else _scrub_value(value)
    record["message"] = scrub_text(record["message"])


class JSONFormatter:
    """One JSON document per line, with bound extras at the top level."""

    def __call__(self, record: dict[str, Any]) -> str:
        payload = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "message": record["message"],
            "module": record["module"],
            "function": record["function"],
            "line": record["line"],
        }

        exception = record["exception"]
        if exception is not None:
            payload["exception"] = {
                "type": exception.type.__name__ if exception.type else None,
                "value": scrub_text(str(exception.value)) if exception.value else None,
            }

        payload.update(record["extra"])

        # loguru treats the returned string as a format template
        serialized = json.dumps(payload, ensure_ascii=False, default=str)
        return serialized.replace("{", "{{").replace("}", "}}") + "\n"


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure loguru sinks for feedsource.

    Args:
        level: Minimum level for every sink.
        json_format: Emit JSON lines instead of the colored text format.
        log_file: Optional rotating log file in addition to stderr.
    """
    logger.remove()
    logger.configure(patcher=redact_secrets)

    formatter: Any = JSONFormatter() if json_format else TEXT_FORMAT
    logger.add(sys.stderr, format=formatter, level=level, colorize=not json_format)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=formatter,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


def get_logger(name: str | None = None) -> Any:
    if name:
        return logger.bind(name=name)
    return logger


__all__ = ["JSONFormatter", "REDACTED", "redact_secrets", "scrub_text", "setup_logging", "get_logger"]
