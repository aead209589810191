"""Conversion between envelope dataclasses and protobuf wire bytes.

Decoding is lenient. An unknown function value is kept as a plain ``int``
and a reply with no ``msg`` member decodes to an empty payload.
"""

from __future__ import annotations

from dataclasses import fields as dataclass_fields

from ..models.contact import Contact
from ..models.fields import RawField
from .functions import Function, PayloadKind, RECORD_KINDS, payload_kind
from .messages import DbRow, DbTable, Request, Response, UserInfo
from .schema import RequestMessage, ResponseMessage

KIND_RECORDS = {kind: cls for cls, kind in RECORD_KINDS.items()}


def _function(value: int) -> int:
    try:
        return Function(value)
    except ValueError:
        return value


def encode_request(request: Request) -> bytes:
    """Serialize a request for the command channel."""
    msg = RequestMessage(func=int(request.function))
    kind = payload_kind(request.payload)
    if kind is PayloadKind.EMPTY:
        pass
    elif kind in (PayloadKind.STR, PayloadKind.UI64, PayloadKind.FLAG):
        setattr(msg, kind.value, request.payload)
    else:
        record = getattr(msg, kind.value)
        for f in dataclass_fields(request.payload):
            setattr(record, f.name, getattr(request.payload, f.name))
        record.SetInParent()
    return msg.SerializeToString()


def decode_request(data: bytes) -> Request:
    """Parse request bytes back into a ``Request``."""
    msg = RequestMessage.FromString(data)
    which = msg.WhichOneof("msg")
    payload = None
    if which in ("str", "ui64", "flag"):
        payload = getattr(msg, which)
    elif which and which != "empty":
        record_cls = KIND_RECORDS[PayloadKind(which)]
        record = getattr(msg, which)
        payload = record_cls(
            **{f.name: getattr(record, f.name) for f in dataclass_fields(record_cls)}
        )
    return Request(function=_function(msg.func), payload=payload)


def encode_response(response: Response) -> bytes:
    """Serialize a response, mainly for stub servers and tests."""
    msg = ResponseMessage(func=int(response.function))
    which = response.payload_field
    payload = response.payload
    if not which:
        msg.status = response.status
    elif which == "str":
        msg.str = payload
    elif which == "contacts":
        for c in payload:
            msg.contacts.contacts.add(
                wxid=c.wxid, code=c.code, remark=c.remark, name=c.name,
                country=c.country, province=c.province, city=c.city,
                gender=c.gender,
            )
        msg.contacts.SetInParent()
    elif which == "dbs":
        msg.dbs.names.extend(payload)
        msg.dbs.SetInParent()
    elif which == "tables":
        for t in payload:
            msg.tables.tables.add(name=t.name, sql=t.sql)
        msg.tables.SetInParent()
    elif which == "rows":
        for row in payload:
            pb_row = msg.rows.rows.add()
            for f in row.fields:
                pb_row.fields.add(type=f.type, column=f.column, content=f.content)
        msg.rows.SetInParent()
    elif which == "types":
        for key, name in payload.items():
            msg.types.types[key] = name
        msg.types.SetInParent()
    elif which == "ui":
        for name, value in payload.to_dict().items():
            setattr(msg.ui, name, value)
        msg.ui.SetInParent()
    else:
        raise ValueError(f"Unknown response payload field {which!r}")
    return msg.SerializeToString()


def decode_response(data: bytes) -> Response:
    """Parse reply bytes into a ``Response``.

    Only the oneof member actually present is projected; every other
    projection on the result yields its zero value.
    """
    msg = ResponseMessage.FromString(data)
    which = msg.WhichOneof("msg")
    response = Response(function=_function(msg.func))

    if which == "status":
        response.status = msg.status
    elif which == "str":
        response.payload = msg.str
    elif which == "contacts":
        response.payload = [
            Contact(
                wxid=c.wxid, name=c.name, code=c.code, remark=c.remark,
                country=c.country, province=c.province, city=c.city,
                gender=c.gender,
            )
            for c in msg.contacts.contacts
        ]
    elif which == "dbs":
        response.payload = list(msg.dbs.names)
    elif which == "tables":
        response.payload = [DbTable(name=t.name, sql=t.sql) for t in msg.tables.tables]
    elif which == "rows":
        response.payload = [
            DbRow(fields=tuple(
                RawField(column=f.column, content=f.content, type=f.type)
                for f in row.fields
            ))
            for row in msg.rows.rows
        ]
    elif which == "types":
        response.payload = dict(msg.types.types)
    elif which == "ui":
        ui = msg.ui
        response.payload = UserInfo(
            wxid=ui.wxid, name=ui.name, mobile=ui.mobile, home=ui.home
        )

    if which and which != "status":
        response.payload_field = which
    return response
