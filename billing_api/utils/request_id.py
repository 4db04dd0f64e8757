"""Request correlation ids.

The id of the request being served lives in `request_id_var`. `RequestIdFilter`
copies it onto every log record, so `tariff.change ...` lines can be matched to
the X-Request-ID header the client got back.
"""

from __future__ import annotations

import contextvars
import logging
import re
import uuid

REQUEST_ID_HEADER = "X-Request-ID"

# ASCII only, conservative charset: the id ends up verbatim in log lines.
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}", flags=re.ASCII)

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)


def validate_request_id(value: str | None) -> str | None:
    """Return `value` if it is safe to echo and log, otherwise None."""
    if not isinstance(value, str):
        return None
    return value if _SAFE_REQUEST_ID.fullmatch(value) else None


def new_request_id() -> str:
    return uuid.uuid4().hex


def current_request_id() -> str | None:
    return request_id_var.get()


class RequestIdFilter(logging.Filter):
    """Sets `record.request_id` ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = current_request_id() or "-"
        return True
