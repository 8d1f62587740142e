from __future__ import annotations

import re
import uuid
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_LENGTH = 128
_ALLOWED = re.compile(r"^[A-Za-z0-9._\-]+$")

_request_id_ctx: ContextVar[str | None] = ContextVar("booking_request_id", default=None)


def generate_request_id() -> str:
    return uuid.uuid4().hex


def accept_request_id(incoming: str | None) -> str:
    """Reuse a caller-supplied id when it is short and printable, else mint one."""
    if incoming:
        candidate = incoming.strip()
        if 0 < len(candidate) <= _MAX_LENGTH and _ALLOWED.match(candidate):
            return candidate
    return generate_request_id()


def set_request_id(request_id: str | None) -> None:
    _request_id_ctx.set(request_id)


def get_request_id() -> str | None:
    return _request_id_ctx.get()
