"""Status-code conventions per remote function.

The remote side is not consistent about what a successful status looks
like. Sending, downloading and the message server report ``0`` on success;
login checks, revoking, friend/transfer acceptance, moments refresh and room
membership edits report ``1``. The table below fixes the convention once so
callers can ask :func:`is_success` instead of remembering it per call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .functions import Function

SUCCESS_CODES: dict[Function, int] = {
    Function.IS_LOGIN: 1,
    Function.SEND_TXT: 0,
    Function.SEND_IMG: 0,
    Function.SEND_FILE: 0,
    Function.SEND_XML: 0,
    Function.SEND_EMOTION: 0,
    Function.ENABLE_RECV_TXT: 0,
    Function.DISABLE_RECV_TXT: 0,
    Function.ACCEPT_FRIEND: 1,
    Function.RECV_TRANSFER: 1,
    Function.REFRESH_PYQ: 1,
    Function.DOWNLOAD_ATTACH: 0,
    Function.REVOKE_MSG: 1,
    Function.ADD_ROOM_MEMBERS: 1,
    Function.DEL_ROOM_MEMBERS: 1,
}


@dataclass(frozen=True)
class Result:
    """Outcome of a status-reporting call.

    ``code`` is the raw status as received; its meaning beyond success or
    failure is defined by the remote side.
    """

    ok: bool
    code: int
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"ok": self.ok, "status": self.code}
        if self.value is not None:
            d["value"] = self.value
        return d


def reports_status(function: Function) -> bool:
    """Whether ``function`` answers with a status code rather than data."""
    return function in SUCCESS_CODES


def is_success(function: Function, status: int) -> bool:
    """Check ``status`` against the success code of ``function``.

    Raises:
        ValueError: If the function does not report a status.
    """
    try:
        return status == SUCCESS_CODES[Function(function)]
    except KeyError:
        raise ValueError(f"{Function(function).name} does not report a status") from None


def to_result(function: Function, status: int, value: Any = None) -> Result:
    return Result(ok=is_success(function, status), code=status, value=value)
