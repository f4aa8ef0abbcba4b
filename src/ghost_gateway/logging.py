"""Logging helpers with redaction of backend credentials."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping


# Matches the service key header, the Ghost admin key parameter and header,
# and OAuth token fields.
_SENSITIVE_KEYS = re.compile(r"(token|secret|api[_-]?key|password)", re.IGNORECASE)

REDACTED = "***REDACTED***"

# Third-party loggers that log full request URLs at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def redact_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _redact_value(key, value) for key, value in payload.items()}


def _redact_value(key: str, value: Any) -> Any:
    if _SENSITIVE_KEYS.search(key):
        return REDACTED if value else value
    if isinstance(value, Mapping):
        return redact_payload(value)
    if isinstance(value, list):
        return [redact_payload(item) if isinstance(item, Mapping) else item for item in value]
    return value
