"""Command client: one method per remote function.

Every method builds a request, performs a single round trip on the
transport and projects the reply. Remote failures are never raised; they
come back as a status code or as an empty value. Calls on one client are
serialized by an internal lock, so a client may be shared across threads.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol

from .download import DEFAULT_TIMEOUT, POLL_INTERVAL, AttachmentDownload
from .models.contact import Contact, filter_chat_rooms, filter_friends, find_by_wxid
from .models.fields import FieldDecodeError, rows_to_map
from .models.room import (
    ROOM_DB,
    RoomMember,
    first_field,
    nickname_map,
    nickname_of_query,
    nickname_query,
    resolve_alias,
    resolve_members,
    room_data_query,
)
from .protocol import functions as fn
from .protocol.functions import DEFAULT_FRIEND_SCENE, Function
from .protocol.messages import DbRow, DbTable, Request, Response, UserInfo
from .protocol.status import Result, reports_status, to_result

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """What the client needs from a connection."""

    def call(self, request: Request) -> Response: ...

    def close(self) -> None: ...


class CmdClient:
    """Typed access to the remote automation service.

    Usage::

        conn = NNGConnection()
        conn.open()
        with CmdClient(conn) as client:
            if client.is_login():
                client.send_text("hello", "filehelper")
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._lock = threading.Lock()

    def __enter__(self) -> CmdClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the transport. Individual calls never close it."""
        with self._lock:
            self._transport.close()

    def call(self, request: Request) -> Response:
        """Send one request and wait for its reply."""
        with self._lock:
            logger.debug("-> %r", request)
            response = self._transport.call(request)
        logger.debug("<- %s status=%s", request.function, response.status)
        return response

    def execute(self, function: Function, payload: Any = None) -> Result:
        """Run any status-reporting function and normalize its status."""
        function = Function(function)
        if not reports_status(function):
            raise ValueError(f"{function.name} returns data, not a status")
        response = self.call(fn.build_request(function, payload))
        return to_result(function, response.status)

    # ─── ACCOUNT ─────────────────────────────────────────────────────

    def is_login(self) -> bool:
        return self.call(fn.build_is_login()).status == 1

    def get_self_wxid(self) -> str:
        return self.call(fn.build_get_self_wxid()).get_str()

    def get_user_info(self) -> UserInfo | None:
        return self.call(fn.build_get_user_info()).get_user_info()

    def get_msg_types(self) -> dict[int, str]:
        return self.call(fn.build_get_msg_types()).get_types()

    # ─── CONTACTS ────────────────────────────────────────────────────

    def get_contacts(self) -> list[Contact]:
        """Full contact list, including rooms and service accounts."""
        return self.call(fn.build_get_contacts()).get_contacts()

    def get_friends(self) -> list[Contact]:
        """Personal contacts only."""
        return filter_friends(self.get_contacts())

    def get_chat_rooms(self) -> list[Contact]:
        return filter_chat_rooms(self.get_contacts())

    def get_contact_by_wxid(self, wxid: str) -> Contact | None:
        """First contact in the full list whose wxid matches."""
        return find_by_wxid(self.get_contacts(), wxid)

    def get_info_by_wxid(self, wxid: str) -> Contact | None:
        """Ask the remote side for a single contact's profile."""
        contacts = self.call(fn.build_get_contact_info(wxid)).get_contacts()
        return contacts[0] if contacts else None

    # ─── DATABASES ───────────────────────────────────────────────────

    def get_db_names(self) -> list[str]:
        return self.call(fn.build_get_db_names()).get_db_names()

    def get_db_tables(self, db: str) -> list[DbTable]:
        return self.call(fn.build_get_db_tables(db)).get_tables()

    def query_db(self, db: str, sql: str) -> list[DbRow]:
        """Run SQL on a remote database. Page large queries yourself."""
        return self.call(fn.build_db_query(db, sql)).get_rows()

    def query_db_map(self, db: str, sql: str) -> dict[str, bytes]:
        """Run SQL and merge the rows into ``{column: content}``."""
        return rows_to_map(self.query_db(db, sql))

    # ─── MESSAGING ───────────────────────────────────────────────────

    def send_text(self, msg: str, receiver: str, aters: str = "") -> int:
        """Send a text message; 0 is success."""
        return self.call(fn.build_send_text(msg, receiver, aters)).status

    def send_image(self, path: str, receiver: str) -> int:
        return self.call(fn.build_send_image(path, receiver)).status

    def send_file(self, path: str, receiver: str) -> int:
        return self.call(fn.build_send_file(path, receiver)).status

    def send_xml(self, path: str, content: str, receiver: str, xml_type: int) -> int:
        return self.call(fn.build_send_xml(path, content, receiver, xml_type)).status

    def send_emotion(self, path: str, receiver: str) -> int:
        return self.call(fn.build_send_emotion(path, receiver)).status

    def revoke_message(self, msgid: int) -> int:
        """Revoke a sent message; 1 is success."""
        return self.call(fn.build_revoke_message(msgid)).status

    def enable_message_server(self, moments: bool = False) -> int:
        return self.call(fn.build_enable_message_server(moments)).status

    def disable_message_server(self) -> int:
        return self.call(fn.build_disable_message_server()).status

    # ─── FRIENDS, TRANSFERS, MOMENTS ─────────────────────────────────

    def accept_new_friend(
        self, v3: str, v4: str, scene: int = DEFAULT_FRIEND_SCENE
    ) -> int:
        return self.call(fn.build_accept_friend(v3, v4, scene)).status

    def receive_transfer(self, wxid: str, tfid: str, taid: str) -> int:
        return self.call(fn.build_receive_transfer(wxid, tfid, taid)).status

    def refresh_moments(self, start_id: int = 0) -> int:
        return self.call(fn.build_refresh_moments(start_id)).status

    # ─── CHAT ROOMS ──────────────────────────────────────────────────

    def add_room_members(self, roomid: str, wxids: str) -> int:
        """Add comma-separated ``wxids`` to a room; 1 is success."""
        return self.call(fn.build_add_room_members(roomid, wxids)).status

    def delete_room_members(self, roomid: str, wxids: str) -> int:
        return self.call(fn.build_delete_room_members(roomid, wxids)).status

    def get_room_members(self, roomid: str) -> list[RoomMember]:
        """Members of a room, display names falling back to nicknames.

        A malformed membership blob yields an empty list.
        """
        nicknames = nickname_map(self.query_db(ROOM_DB, nickname_query()))
        room_field = first_field(self.query_db(ROOM_DB, room_data_query(roomid)))
        try:
            return resolve_members(room_field, nicknames)
        except FieldDecodeError as e:
            logger.warning("room %s: %s", roomid, e)
            return []

    def get_alias_in_room(self, wxid: str, roomid: str) -> str:
        """Display name of ``wxid`` inside ``roomid``.

        Falls back to the global nickname, including when the membership
        blob is malformed.
        """
        field = first_field(self.query_db(ROOM_DB, nickname_of_query(wxid)))
        nickname = field.as_text() if field is not None else ""
        room_field = first_field(self.query_db(ROOM_DB, room_data_query(roomid)))
        try:
            return resolve_alias(room_field, wxid, nickname)
        except FieldDecodeError as e:
            logger.warning("room %s: %s", roomid, e)
            return nickname

    # ─── ATTACHMENTS ─────────────────────────────────────────────────

    def download_attachment(self, msgid: int, thumb: str, extra: str) -> int:
        """Start a background attachment transfer; 0 means it started."""
        return self.call(fn.build_download_attachment(msgid, thumb, extra)).status

    def decrypt_image(self, src: str, dst: str) -> str:
        """Decrypt a downloaded image into ``dst``; empty if not ready yet.

        Use :meth:`download_image` rather than calling this directly.
        """
        return self.call(fn.build_decrypt_image(src, dst)).get_str()

    def start_image_download(
        self,
        msgid: int,
        extra: str,
        dst_dir: str,
        timeout: float = DEFAULT_TIMEOUT,
        interval: float = POLL_INTERVAL,
    ) -> AttachmentDownload:
        """Prepare a download that can be run here and cancelled elsewhere."""
        return AttachmentDownload(
            self, msgid, extra, dst_dir, timeout=timeout, interval=interval
        )

    def download_image(
        self,
        msgid: int,
        extra: str,
        dst_dir: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> str:
        """Download and decrypt an image attachment.

        Args:
            msgid: Message id.
            extra: The message's ``extra`` field.
            dst_dir: Existing directory on the remote host to save into.
            timeout: Seconds to wait for the transfer.

        Returns:
            The saved path, or an empty string on failure (see the log).
        """
        return self.start_image_download(msgid, extra, dst_dir, timeout).run()
