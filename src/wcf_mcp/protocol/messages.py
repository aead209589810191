"""Request and response envelopes plus the records they carry.

A ``Request`` holds a function identifier and at most one payload: a plain
``str``, an ``int`` (unsigned 64-bit), a ``bool`` or one of the record
dataclasses below. A ``Response`` holds a status and at most one decoded
payload; the ``get_*`` projections return a zero value when the payload is
not of the requested kind, so a decode miss looks exactly like an empty
result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models.contact import Contact
from ..models.fields import RawField


# ─── REQUEST RECORDS ─────────────────────────────────────────────────

@dataclass(frozen=True)
class TextMsg:
    msg: str = ""
    receiver: str = ""
    aters: str = ""


@dataclass(frozen=True)
class PathMsg:
    path: str = ""
    receiver: str = ""


@dataclass(frozen=True)
class XmlMsg:
    receiver: str = ""
    content: str = ""
    path: str = ""
    type: int = 0


@dataclass(frozen=True)
class DbQuery:
    db: str = ""
    sql: str = ""


@dataclass(frozen=True)
class Verification:
    v3: str = ""
    v4: str = ""
    scene: int = 0


@dataclass(frozen=True)
class Transfer:
    wxid: str = ""
    tfid: str = ""
    taid: str = ""


@dataclass(frozen=True)
class MemberMgmt:
    roomid: str = ""
    wxids: str = ""


@dataclass(frozen=True)
class AttachMsg:
    id: int = 0
    thumb: str = ""
    extra: str = ""


@dataclass(frozen=True)
class DecPath:
    src: str = ""
    dst: str = ""


# ─── RESPONSE RECORDS ────────────────────────────────────────────────

@dataclass(frozen=True)
class DbTable:
    """A table name and its CREATE statement."""

    name: str = ""
    sql: str = ""


@dataclass(frozen=True)
class DbRow:
    """One result row; column order is preserved."""

    fields: tuple[RawField, ...] = ()


@dataclass(frozen=True)
class UserInfo:
    """Profile of the logged-in account."""

    wxid: str = ""
    name: str = ""
    mobile: str = ""
    home: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "wxid": self.wxid,
            "name": self.name,
            "mobile": self.mobile,
            "home": self.home,
        }


# ─── ENVELOPES ───────────────────────────────────────────────────────

@dataclass
class Request:
    """A single remote call."""

    function: int
    payload: Any = None

    def __repr__(self) -> str:
        name = getattr(self.function, "name", f"0x{int(self.function):02X}")
        return f"Request(function={name}, payload={self.payload!r})"


@dataclass
class Response:
    """A decoded reply.

    ``payload`` is one of: ``str``, ``list[Contact]``, ``list[str]`` (database
    names), ``list[DbTable]``, ``list[DbRow]``, ``dict[int, str]`` (message
    types), ``UserInfo`` or ``None``.
    """

    function: int = 0
    status: int = 0
    payload: Any = None
    payload_field: str = ""

    def get_str(self) -> str:
        return self.payload if self.payload_field == "str" else ""

    def get_contacts(self) -> list[Contact]:
        return list(self.payload) if self.payload_field == "contacts" else []

    def get_db_names(self) -> list[str]:
        return list(self.payload) if self.payload_field == "dbs" else []

    def get_tables(self) -> list[DbTable]:
        return list(self.payload) if self.payload_field == "tables" else []

    def get_rows(self) -> list[DbRow]:
        return list(self.payload) if self.payload_field == "rows" else []

    def get_types(self) -> dict[int, str]:
        return dict(self.payload) if self.payload_field == "types" else {}

    def get_user_info(self) -> UserInfo | None:
        return self.payload if self.payload_field == "ui" else None


RESPONSE_FIELDS = ("str", "contacts", "dbs", "tables", "rows", "types", "ui")


def make_response(function: int, payload: Any = None, status: int = 0) -> Response:
    """Build a ``Response`` with ``payload_field`` inferred from the payload."""
    return Response(
        function=function,
        status=status,
        payload=payload,
        payload_field=_infer_field(payload),
    )


def _infer_field(payload: Any) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return "str"
    if isinstance(payload, UserInfo):
        return "ui"
    if isinstance(payload, dict):
        return "types"
    if isinstance(payload, (list, tuple)):
        if not payload:
            raise ValueError("Cannot infer the payload field of an empty list")
        first = payload[0]
        if isinstance(first, Contact):
            return "contacts"
        if isinstance(first, str):
            return "dbs"
        if isinstance(first, DbTable):
            return "tables"
        if isinstance(first, DbRow):
            return "rows"
    raise ValueError(f"Unsupported response payload: {payload!r}")
