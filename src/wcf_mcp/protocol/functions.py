"""Remote function identifiers and request builders.

Each remote operation is identified by a single ``Function`` value carried
in the request envelope. The payload variant that may accompany it is fixed
per function; :func:`build_request` enforces that pairing before anything
reaches the transport.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from .messages import (
    AttachMsg,
    DbQuery,
    DecPath,
    MemberMgmt,
    PathMsg,
    Request,
    TextMsg,
    Transfer,
    Verification,
    XmlMsg,
)

UINT64_MAX = (1 << 64) - 1

# Scene used by the friend-verification flow when none is given (QR scan)
DEFAULT_FRIEND_SCENE = 30


class Function(IntEnum):
    """Remote function identifiers."""

    RESERVED = 0x00
    IS_LOGIN = 0x01
    GET_SELF_WXID = 0x10
    GET_MSG_TYPES = 0x11
    GET_CONTACTS = 0x12
    GET_DB_NAMES = 0x13
    GET_DB_TABLES = 0x14
    GET_USER_INFO = 0x15
    SEND_TXT = 0x20
    SEND_IMG = 0x21
    SEND_FILE = 0x22
    SEND_XML = 0x23
    SEND_EMOTION = 0x24
    ENABLE_RECV_TXT = 0x30
    DISABLE_RECV_TXT = 0x40
    EXEC_DB_QUERY = 0x50
    ACCEPT_FRIEND = 0x51
    RECV_TRANSFER = 0x52
    REFRESH_PYQ = 0x53
    DOWNLOAD_ATTACH = 0x54
    GET_CONTACT_INFO = 0x55
    REVOKE_MSG = 0x56
    DECRYPT_IMAGE = 0x60
    ADD_ROOM_MEMBERS = 0x70
    DEL_ROOM_MEMBERS = 0x71


class PayloadKind(Enum):
    """Request payload variants, named after their wire oneof member."""

    EMPTY = "empty"
    STR = "str"
    UI64 = "ui64"
    FLAG = "flag"
    TXT = "txt"
    FILE = "file"
    XML = "xml"
    QUERY = "query"
    V = "v"
    TF = "tf"
    M = "m"
    ATT = "att"
    DEC = "dec"


RECORD_KINDS: dict[type, PayloadKind] = {
    TextMsg: PayloadKind.TXT,
    PathMsg: PayloadKind.FILE,
    XmlMsg: PayloadKind.XML,
    DbQuery: PayloadKind.QUERY,
    Verification: PayloadKind.V,
    Transfer: PayloadKind.TF,
    MemberMgmt: PayloadKind.M,
    AttachMsg: PayloadKind.ATT,
    DecPath: PayloadKind.DEC,
}

# The only payload variant each function accepts
FUNCTION_PAYLOADS: dict[Function, PayloadKind] = {
    Function.IS_LOGIN: PayloadKind.EMPTY,
    Function.GET_SELF_WXID: PayloadKind.EMPTY,
    Function.GET_MSG_TYPES: PayloadKind.EMPTY,
    Function.GET_CONTACTS: PayloadKind.EMPTY,
    Function.GET_DB_NAMES: PayloadKind.EMPTY,
    Function.GET_DB_TABLES: PayloadKind.STR,
    Function.GET_USER_INFO: PayloadKind.EMPTY,
    Function.SEND_TXT: PayloadKind.TXT,
    Function.SEND_IMG: PayloadKind.FILE,
    Function.SEND_FILE: PayloadKind.FILE,
    Function.SEND_XML: PayloadKind.XML,
    Function.SEND_EMOTION: PayloadKind.FILE,
    Function.ENABLE_RECV_TXT: PayloadKind.FLAG,
    Function.DISABLE_RECV_TXT: PayloadKind.EMPTY,
    Function.EXEC_DB_QUERY: PayloadKind.QUERY,
    Function.ACCEPT_FRIEND: PayloadKind.V,
    Function.RECV_TRANSFER: PayloadKind.TF,
    Function.REFRESH_PYQ: PayloadKind.UI64,
    Function.DOWNLOAD_ATTACH: PayloadKind.ATT,
    Function.GET_CONTACT_INFO: PayloadKind.STR,
    Function.REVOKE_MSG: PayloadKind.UI64,
    Function.DECRYPT_IMAGE: PayloadKind.DEC,
    Function.ADD_ROOM_MEMBERS: PayloadKind.M,
    Function.DEL_ROOM_MEMBERS: PayloadKind.M,
}


def payload_kind(payload: object) -> PayloadKind:
    """Classify a payload value into its wire variant."""
    if payload is None:
        return PayloadKind.EMPTY
    # bool before int: bool is an int subclass
    if isinstance(payload, bool):
        return PayloadKind.FLAG
    if isinstance(payload, int):
        return PayloadKind.UI64
    if isinstance(payload, str):
        return PayloadKind.STR
    kind = RECORD_KINDS.get(type(payload))
    if kind is None:
        raise ValueError(f"Unsupported payload type {type(payload).__name__}")
    return kind


def build_request(function: Function, payload: object = None) -> Request:
    """Build a request envelope, checking the payload variant for ``function``.

    Raises:
        ValueError: If the function is unknown, the payload variant is not the
            one the function takes, or an integer payload is out of range.
    """
    function = Function(function)
    expected = FUNCTION_PAYLOADS.get(function)
    if expected is None:
        raise ValueError(f"Function {function.name} cannot be requested")

    kind = payload_kind(payload)
    if kind is not expected:
        raise ValueError(
            f"{function.name} takes a {expected.value!r} payload, got {kind.value!r}"
        )
    if kind is PayloadKind.UI64 and not 0 <= payload <= UINT64_MAX:
        raise ValueError(f"Unsigned 64-bit payload out of range: {payload}")

    return Request(function=function, payload=payload)


def build_is_login() -> Request:
    return build_request(Function.IS_LOGIN)


def build_get_self_wxid() -> Request:
    return build_request(Function.GET_SELF_WXID)


def build_get_user_info() -> Request:
    return build_request(Function.GET_USER_INFO)


def build_get_msg_types() -> Request:
    return build_request(Function.GET_MSG_TYPES)


def build_get_contacts() -> Request:
    return build_request(Function.GET_CONTACTS)


def build_get_contact_info(wxid: str) -> Request:
    return build_request(Function.GET_CONTACT_INFO, wxid)


def build_get_db_names() -> Request:
    return build_request(Function.GET_DB_NAMES)


def build_get_db_tables(db: str) -> Request:
    return build_request(Function.GET_DB_TABLES, db)


def build_db_query(db: str, sql: str) -> Request:
    """Build an SQL query against one of the remote databases."""
    return build_request(Function.EXEC_DB_QUERY, DbQuery(db=db, sql=sql))


def build_send_text(msg: str, receiver: str, aters: str = "") -> Request:
    """Build a text message request.

    Args:
        msg: Message body. Each wxid in ``aters`` needs a matching ``@`` in it.
        receiver: wxid or room id.
        aters: Comma-separated wxids to mention; ``notify@all`` mentions everyone.
    """
    return build_request(
        Function.SEND_TXT, TextMsg(msg=msg, receiver=receiver, aters=aters)
    )


def build_send_image(path: str, receiver: str) -> Request:
    return build_request(Function.SEND_IMG, PathMsg(path=path, receiver=receiver))


def build_send_file(path: str, receiver: str) -> Request:
    return build_request(Function.SEND_FILE, PathMsg(path=path, receiver=receiver))


def build_send_emotion(path: str, receiver: str) -> Request:
    return build_request(
        Function.SEND_EMOTION, PathMsg(path=path, receiver=receiver)
    )


def build_send_xml(path: str, content: str, receiver: str, xml_type: int) -> Request:
    """Build an XML message request.

    Args:
        path: Cover image path.
        content: XML body.
        receiver: wxid or room id.
        xml_type: XML message type, e.g. 0x21 for a mini program.
    """
    return build_request(
        Function.SEND_XML,
        XmlMsg(receiver=receiver, content=content, path=path, type=xml_type),
    )


def build_revoke_message(msgid: int) -> Request:
    return build_request(Function.REVOKE_MSG, msgid)


def build_accept_friend(
    v3: str, v4: str, scene: int = DEFAULT_FRIEND_SCENE
) -> Request:
    """Build a friend-request acceptance.

    Args:
        v3: Encrypted user name from the request message.
        v4: Ticket from the request message.
        scene: How the request was made.
    """
    return build_request(
        Function.ACCEPT_FRIEND, Verification(v3=v3, v4=v4, scene=scene)
    )


def build_receive_transfer(wxid: str, tfid: str, taid: str) -> Request:
    return build_request(
        Function.RECV_TRANSFER, Transfer(wxid=wxid, tfid=tfid, taid=taid)
    )


def build_refresh_moments(start_id: int = 0) -> Request:
    """Build a moments refresh; ``start_id`` 0 means the newest page."""
    return build_request(Function.REFRESH_PYQ, start_id)


def build_add_room_members(roomid: str, wxids: str) -> Request:
    return build_request(
        Function.ADD_ROOM_MEMBERS, MemberMgmt(roomid=roomid, wxids=wxids)
    )


def build_delete_room_members(roomid: str, wxids: str) -> Request:
    return build_request(
        Function.DEL_ROOM_MEMBERS, MemberMgmt(roomid=roomid, wxids=wxids)
    )


def build_download_attachment(msgid: int, thumb: str, extra: str) -> Request:
    """Build the trigger for a background attachment transfer."""
    if not 0 <= msgid <= UINT64_MAX:
        raise ValueError(f"Message id out of range: {msgid}")
    return build_request(
        Function.DOWNLOAD_ATTACH, AttachMsg(id=msgid, thumb=thumb, extra=extra)
    )


def build_decrypt_image(src: str, dst: str) -> Request:
    return build_request(Function.DECRYPT_IMAGE, DecPath(src=src, dst=dst))


def build_enable_message_server(moments: bool = False) -> Request:
    return build_request(Function.ENABLE_RECV_TXT, bool(moments))


def build_disable_message_server() -> Request:
    return build_request(Function.DISABLE_RECV_TXT)
