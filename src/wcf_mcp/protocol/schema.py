"""Protobuf schema for the command channel and the room membership blob.

The descriptors are assembled here instead of shipping generated ``_pb2``
modules. Two files are registered in a private descriptor pool:

``wcf.proto``
    ``Request`` (``func`` + ``msg`` oneof) and ``Response`` (``func`` +
    ``msg`` oneof with ``status`` as one of its members), plus every record
    either side carries.

``roomdata.proto``
    ``RoomData`` as stored in ``MicroMsg.db`` ``ChatRoom.RoomData``: a
    repeated ``{wxid, name, state}`` member list followed by room settings.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from .functions import Function

_FD = descriptor_pb2.FieldDescriptorProto

STRING = _FD.TYPE_STRING
BYTES = _FD.TYPE_BYTES
BOOL = _FD.TYPE_BOOL
INT32 = _FD.TYPE_INT32
INT64 = _FD.TYPE_INT64
UINT64 = _FD.TYPE_UINT64
ENUM = _FD.TYPE_ENUM
MESSAGE = _FD.TYPE_MESSAGE

PACKAGE = "wcf"

# (name, number, type, type_name); type_name is relative to the package
REQUEST_ONEOF = [
    ("empty", 2, MESSAGE, "Empty"),
    ("str", 3, STRING, ""),
    ("txt", 4, MESSAGE, "TextMsg"),
    ("file", 5, MESSAGE, "PathMsg"),
    ("query", 6, MESSAGE, "DbQuery"),
    ("v", 7, MESSAGE, "Verification"),
    ("m", 8, MESSAGE, "MemberMgmt"),
    ("xml", 9, MESSAGE, "XmlMsg"),
    ("dec", 10, MESSAGE, "DecPath"),
    ("tf", 11, MESSAGE, "Transfer"),
    ("ui64", 12, UINT64, ""),
    ("flag", 13, BOOL, ""),
    ("att", 14, MESSAGE, "AttachMsg"),
]

RESPONSE_ONEOF = [
    ("status", 2, INT32, ""),
    ("str", 3, STRING, ""),
    ("types", 5, MESSAGE, "MsgTypes"),
    ("contacts", 6, MESSAGE, "RpcContacts"),
    ("dbs", 7, MESSAGE, "DbNames"),
    ("tables", 8, MESSAGE, "DbTables"),
    ("rows", 9, MESSAGE, "DbRows"),
    ("ui", 10, MESSAGE, "UserInfo"),
]

RECORDS: dict[str, list[tuple[str, int, int]]] = {
    "Empty": [],
    "TextMsg": [("msg", 1, STRING), ("receiver", 2, STRING), ("aters", 3, STRING)],
    "PathMsg": [("path", 1, STRING), ("receiver", 2, STRING)],
    "XmlMsg": [
        ("receiver", 1, STRING),
        ("content", 2, STRING),
        ("path", 3, STRING),
        ("type", 4, INT32),
    ],
    "RpcContact": [
        ("wxid", 1, STRING),
        ("code", 2, STRING),
        ("remark", 3, STRING),
        ("name", 4, STRING),
        ("country", 5, STRING),
        ("province", 6, STRING),
        ("city", 7, STRING),
        ("gender", 8, INT32),
    ],
    "DbTable": [("name", 1, STRING), ("sql", 2, STRING)],
    "DbQuery": [("db", 1, STRING), ("sql", 2, STRING)],
    "DbField": [("type", 1, INT32), ("column", 2, STRING), ("content", 3, BYTES)],
    "Verification": [("v3", 1, STRING), ("v4", 2, STRING), ("scene", 3, INT32)],
    "MemberMgmt": [("roomid", 1, STRING), ("wxids", 2, STRING)],
    "UserInfo": [
        ("wxid", 1, STRING),
        ("name", 2, STRING),
        ("mobile", 3, STRING),
        ("home", 4, STRING),
    ],
    "DecPath": [("src", 1, STRING), ("dst", 2, STRING)],
    "Transfer": [("wxid", 1, STRING), ("tfid", 2, STRING), ("taid", 3, STRING)],
    "AttachMsg": [("id", 1, UINT64), ("thumb", 2, STRING), ("extra", 3, STRING)],
}

# Containers: (name, field name, element type name or scalar type)
REPEATED: list[tuple[str, str, object]] = [
    ("RpcContacts", "contacts", "RpcContact"),
    ("DbNames", "names", STRING),
    ("DbTables", "tables", "DbTable"),
    ("DbRow", "fields", "DbField"),
    ("DbRows", "rows", "DbRow"),
]


def _add_field(msg, name: str, number: int, ftype: int, type_name: str = "",
               repeated: bool = False, oneof_index: int | None = None) -> None:
    field = msg.field.add(
        name=name,
        number=number,
        type=ftype,
        label=_FD.LABEL_REPEATED if repeated else _FD.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = f".{PACKAGE}.{type_name}"
    if oneof_index is not None:
        field.oneof_index = oneof_index


def _wcf_file() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(
        name="wcf.proto", package=PACKAGE, syntax="proto3"
    )

    functions = fdp.enum_type.add(name="Functions")
    for func in Function:
        functions.value.add(name=f"FUNC_{func.name}", number=func.value)

    for name, fields in RECORDS.items():
        msg = fdp.message_type.add(name=name)
        for fname, number, ftype in fields:
            _add_field(msg, fname, number, ftype)

    for name, fname, element in REPEATED:
        msg = fdp.message_type.add(name=name)
        if isinstance(element, str):
            _add_field(msg, fname, 1, MESSAGE, element, repeated=True)
        else:
            _add_field(msg, fname, 1, element, repeated=True)

    # map<int32, string> types = 1;
    msg_types = fdp.message_type.add(name="MsgTypes")
    entry = msg_types.nested_type.add(name="TypesEntry")
    entry.options.map_entry = True
    _add_field(entry, "key", 1, INT32)
    _add_field(entry, "value", 2, STRING)
    _add_field(msg_types, "types", 1, MESSAGE, "MsgTypes.TypesEntry", repeated=True)

    for name, oneof in (("Request", REQUEST_ONEOF), ("Response", RESPONSE_ONEOF)):
        msg = fdp.message_type.add(name=name)
        msg.oneof_decl.add(name="msg")
        _add_field(msg, "func", 1, ENUM, "Functions")
        for fname, number, ftype, type_name in oneof:
            _add_field(msg, fname, number, ftype, type_name, oneof_index=0)

    return fdp


def _roomdata_file() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(
        name="roomdata.proto", package=PACKAGE, syntax="proto3"
    )
    room = fdp.message_type.add(name="RoomData")
    member = room.nested_type.add(name="RoomMember")
    _add_field(member, "wxid", 1, STRING)
    _add_field(member, "name", 2, STRING)
    _add_field(member, "state", 3, INT32)

    _add_field(room, "members", 1, MESSAGE, "RoomData.RoomMember", repeated=True)
    _add_field(room, "field_2", 2, INT32)
    _add_field(room, "field_3", 3, INT32)
    _add_field(room, "field_4", 4, INT32)
    _add_field(room, "capacity", 5, INT32)
    _add_field(room, "field_6", 6, INT32)
    _add_field(room, "field_7", 7, INT64)
    _add_field(room, "field_8", 8, INT64)
    return fdp


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_wcf_file().SerializeToString())
_pool.AddSerializedFile(_roomdata_file().SerializeToString())


def message_class(name: str):
    """Return the generated message class for ``wcf.<name>``."""
    return message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


RequestMessage = message_class("Request")
ResponseMessage = message_class("Response")
RoomData = message_class("RoomData")
