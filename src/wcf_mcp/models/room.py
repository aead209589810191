"""Chat room membership, decoded from the ``ChatRoom.RoomData`` blob.

Each room row in ``MicroMsg.db`` carries a serialized ``RoomData`` message
listing member wxids with their in-room display names. The display name is
often empty; the member's global nickname from the ``Contact`` table is
used in that case.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..protocol.schema import RoomData
from .fields import RawField

ROOM_DB = "MicroMsg.db"


@dataclass(frozen=True)
class RoomMember:
    wxid: str
    name: str = ""


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def nickname_query() -> str:
    return "SELECT UserName, NickName FROM Contact;"


def nickname_of_query(wxid: str) -> str:
    return f"SELECT NickName FROM Contact WHERE UserName = {_quote(wxid)};"


def room_data_query(roomid: str) -> str:
    return f"SELECT RoomData FROM ChatRoom WHERE ChatRoomName = {_quote(roomid)};"


def decode_room_data(field: RawField) -> list[RoomMember]:
    """Decode a ``RoomData`` column into its member list.

    Raises:
        FieldDecodeError: If the blob is malformed.
    """
    room = field.as_structured(RoomData)
    return [RoomMember(wxid=m.wxid, name=m.name) for m in room.members]


def resolve_members(
    room_field: RawField | None, nicknames: Mapping[str, str]
) -> list[RoomMember]:
    """Room members with empty display names filled from ``nicknames``."""
    if room_field is None:
        return []
    return [
        RoomMember(wxid=m.wxid, name=m.name or nicknames.get(m.wxid, ""))
        for m in decode_room_data(room_field)
    ]


def resolve_alias(room_field: RawField | None, wxid: str, nickname: str) -> str:
    """In-room display name of ``wxid``, falling back to ``nickname``."""
    if room_field is None:
        return nickname
    for member in decode_room_data(room_field):
        if member.wxid == wxid:
            return member.name or nickname
    return nickname


def first_field(rows: Iterable) -> RawField | None:
    """First column of the first row, or ``None`` for an empty result."""
    for row in rows:
        return row.fields[0] if row.fields else None
    return None


def nickname_map(rows: Iterable) -> dict[str, str]:
    """Map ``UserName`` -> ``NickName`` from a two-column Contact query."""
    result: dict[str, str] = {}
    for row in rows:
        if len(row.fields) < 2:
            continue
        result[row.fields[0].as_text()] = row.fields[1].as_text()
    return result
