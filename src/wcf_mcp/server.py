"""MCP server entry point for the messaging automation service.

Exposes tools and resources via the Model Context Protocol using the
official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import CmdClient
from .download import DEFAULT_TIMEOUT, DownloadState
from .models.contact import IdentityKind, filter_by_kind
from .protocol.functions import DEFAULT_FRIEND_SCENE, Function
from .protocol.status import to_result
from .transport.nng_connection import DEFAULT_HOST, DEFAULT_PORT, NNGConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "wcf-mcp",
    instructions="MCP server for a desktop messaging automation service",
)

# Global connection state
_connection: NNGConnection | None = None
_client: CmdClient | None = None


def _get_client() -> CmdClient:
    """Get the active client, raising if not connected."""
    if _client is None or _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to the service. Use the 'connect' tool first."
        )
    return _client


def _status(function: Function, status: int) -> dict[str, Any]:
    return to_result(function, status).to_dict()


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> dict[str, Any]:
    """Connect to the automation service's command port.

    Args:
        host: Service host (default 127.0.0.1).
        port: Command port (default 10086).
    """
    global _connection, _client
    if _client is not None and _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "address": _connection.endpoint.address,
        }

    conn = NNGConnection(host=host, port=port)
    endpoint = conn.open()
    _connection = conn
    _client = CmdClient(conn)

    return {
        "connected": True,
        "address": endpoint.address,
        "logged_in": _client.is_login(),
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the service."""
    global _connection, _client
    if _client is None:
        return {"disconnected": True}
    _client.close()
    _client = None
    _connection = None
    return {"disconnected": True}


# ─── ACCOUNT TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def is_login() -> dict[str, bool]:
    """Check whether the desktop client is logged in."""
    return {"logged_in": _get_client().is_login()}


@mcp.tool()
def get_self_info() -> dict[str, Any]:
    """Return the logged-in account's wxid and profile."""
    client = _get_client()
    info = client.get_user_info()
    result: dict[str, Any] = {"wxid": client.get_self_wxid()}
    if info is not None:
        result.update(info.to_dict())
    return result


@mcp.tool()
def get_msg_types() -> dict[str, Any]:
    """List message type ids and their names."""
    types = _get_client().get_msg_types()
    return {"types": {str(k): v for k, v in sorted(types.items())}}


# ─── CONTACT TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def list_contacts(kind: str | None = None) -> dict[str, Any]:
    """List contacts, optionally restricted to one kind.

    Args:
        kind: friend, chat_room, official_account or system_service.
    """
    contacts = _get_client().get_contacts()
    if kind is not None:
        try:
            wanted = IdentityKind(kind)
        except ValueError:
            return {"error": f"Unknown kind '{kind}'. Valid: {[k.value for k in IdentityKind]}"}
        contacts = filter_by_kind(contacts, wanted)
    return {
        "contacts": [c.to_dict() for c in contacts],
        "count": len(contacts),
    }


@mcp.tool()
def get_contact(wxid: str) -> dict[str, Any]:
    """Look up a single contact by wxid.

    Args:
        wxid: Contact, room or account id.
    """
    contact = _get_client().get_contact_by_wxid(wxid)
    if contact is None:
        return {"error": f"No contact with wxid '{wxid}'"}
    return contact.to_dict()


# ─── DATABASE TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def list_databases() -> dict[str, Any]:
    """List the databases the service can query."""
    return {"databases": _get_client().get_db_names()}


@mcp.tool()
def list_tables(db: str) -> dict[str, Any]:
    """List tables and their CREATE statements.

    Args:
        db: Database name, e.g. MicroMsg.db.
    """
    tables = _get_client().get_db_tables(db)
    return {"tables": [{"name": t.name, "sql": t.sql} for t in tables]}


@mcp.tool()
def query_database(db: str, sql: str) -> dict[str, Any]:
    """Run an SQL query. Page large results with LIMIT/OFFSET.

    Column contents are decoded as UTF-8 text; undecodable bytes are
    replaced.

    Args:
        db: Database name.
        sql: SQL statement.
    """
    rows = _get_client().query_db(db, sql)
    return {
        "rows": [{f.column: f.as_text() for f in row.fields} for row in rows],
        "count": len(rows),
    }


# ─── MESSAGING TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def send_text(msg: str, receiver: str, aters: str = "") -> dict[str, Any]:
    """Send a text message.

    Args:
        msg: Message body. Include one '@' per mentioned member.
        receiver: wxid or room id.
        aters: Comma-separated wxids to mention; 'notify@all' mentions everyone.
    """
    status = _get_client().send_text(msg, receiver, aters)
    return _status(Function.SEND_TXT, status)


@mcp.tool()
def send_image(path: str, receiver: str) -> dict[str, Any]:
    """Send an image file located on the service host.

    Args:
        path: Image path on the service host.
        receiver: wxid or room id.
    """
    return _status(Function.SEND_IMG, _get_client().send_image(path, receiver))


@mcp.tool()
def send_file(path: str, receiver: str) -> dict[str, Any]:
    """Send a file located on the service host."""
    return _status(Function.SEND_FILE, _get_client().send_file(path, receiver))


@mcp.tool()
def send_xml(path: str, content: str, receiver: str, xml_type: int) -> dict[str, Any]:
    """Send an XML message.

    Args:
        path: Cover image path.
        content: XML body.
        receiver: wxid or room id.
        xml_type: XML type, e.g. 33 (0x21) for a mini program.
    """
    status = _get_client().send_xml(path, content, receiver, xml_type)
    return _status(Function.SEND_XML, status)


@mcp.tool()
def send_emotion(path: str, receiver: str) -> dict[str, Any]:
    """Send a sticker/emotion file located on the service host."""
    return _status(Function.SEND_EMOTION, _get_client().send_emotion(path, receiver))


@mcp.tool()
def revoke_message(msgid: int) -> dict[str, Any]:
    """Revoke a previously sent message."""
    return _status(Function.REVOKE_MSG, _get_client().revoke_message(msgid))


@mcp.tool()
def enable_message_server(moments: bool = False) -> dict[str, Any]:
    """Start forwarding incoming messages.

    Args:
        moments: Also forward moments (friend circle) updates.
    """
    status = _get_client().enable_message_server(moments)
    return _status(Function.ENABLE_RECV_TXT, status)


@mcp.tool()
def disable_message_server() -> dict[str, Any]:
    """Stop forwarding incoming messages."""
    status = _get_client().disable_message_server()
    return _status(Function.DISABLE_RECV_TXT, status)


# ─── FRIEND / TRANSFER / MOMENTS TOOLS ───────────────────────────────

@mcp.tool()
def accept_friend(v3: str, v4: str, scene: int = DEFAULT_FRIEND_SCENE) -> dict[str, Any]:
    """Accept a friend request.

    Args:
        v3: The request's encrypted user name (starts with v3).
        v4: The request's ticket (starts with v4).
        scene: Request scene; 30 is QR scan.
    """
    status = _get_client().accept_new_friend(v3, v4, scene)
    return _status(Function.ACCEPT_FRIEND, status)


@mcp.tool()
def receive_transfer(wxid: str, tfid: str, taid: str) -> dict[str, Any]:
    """Accept a money transfer.

    Args:
        wxid: Sender wxid.
        tfid: Transfer id from the message.
        taid: Transaction id from the message.
    """
    status = _get_client().receive_transfer(wxid, tfid, taid)
    return _status(Function.RECV_TRANSFER, status)


@mcp.tool()
def refresh_moments(start_id: int = 0) -> dict[str, Any]:
    """Refresh the moments feed; start_id 0 is the newest page."""
    status = _get_client().refresh_moments(start_id)
    return _status(Function.REFRESH_PYQ, status)


# ─── CHAT ROOM TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def add_room_members(roomid: str, wxids: str) -> dict[str, Any]:
    """Add members to a chat room.

    Args:
        roomid: Room id (ends with @chatroom).
        wxids: Comma-separated wxids.
    """
    status = _get_client().add_room_members(roomid, wxids)
    return _status(Function.ADD_ROOM_MEMBERS, status)


@mcp.tool()
def delete_room_members(roomid: str, wxids: str) -> dict[str, Any]:
    """Remove members from a chat room."""
    status = _get_client().delete_room_members(roomid, wxids)
    return _status(Function.DEL_ROOM_MEMBERS, status)


@mcp.tool()
def get_room_members(roomid: str) -> dict[str, Any]:
    """List a chat room's members with their display names."""
    members = _get_client().get_room_members(roomid)
    return {
        "roomid": roomid,
        "members": [{"wxid": m.wxid, "name": m.name} for m in members],
        "count": len(members),
    }


@mcp.tool()
def get_room_alias(wxid: str, roomid: str) -> dict[str, str]:
    """Get a member's display name inside a chat room."""
    return {"wxid": wxid, "roomid": roomid,
            "alias": _get_client().get_alias_in_room(wxid, roomid)}


# ─── ATTACHMENT TOOLS ────────────────────────────────────────────────

@mcp.tool()
def download_image(
    msgid: int, extra: str, dst_dir: str, timeout: int = DEFAULT_TIMEOUT
) -> dict[str, Any]:
    """Download and decrypt an image attachment.

    Blocks until the file is ready or the timeout expires.

    Args:
        msgid: Message id.
        extra: The message's extra field.
        dst_dir: Existing directory on the service host.
        timeout: Seconds to wait.
    """
    job = _get_client().start_image_download(msgid, extra, dst_dir, timeout)
    path = job.run()
    if job.state is DownloadState.SUCCEEDED:
        return {"path": path, "probes": job.probes}
    return {
        "error": f"Download {job.state.value}",
        "trigger_status": job.trigger_status,
        "probes": job.probes,
    }


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("wcf://connection/status")
def resource_connection_status() -> str:
    """Connection state and endpoint."""
    if _client is None or _connection is None or not _connection.connected:
        return json.dumps({"connected": False})
    return json.dumps({
        "connected": True,
        "address": _connection.endpoint.address,
    })


@mcp.resource("wcf://account/self")
def resource_self() -> str:
    """The logged-in account."""
    return json.dumps(get_self_info())


@mcp.resource("wcf://catalog/msg-types")
def resource_msg_types() -> str:
    """Message type catalog."""
    return json.dumps(get_msg_types())


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
