"""Tests for the protobuf wire codec."""

import pytest

from wcf_mcp.models.contact import Contact
from wcf_mcp.models.fields import RawField
from wcf_mcp.protocol import functions as fn
from wcf_mcp.protocol.codec import (
    decode_request,
    decode_response,
    encode_request,
    encode_response,
)
from wcf_mcp.protocol.functions import Function
from wcf_mcp.protocol.messages import DbRow, DbTable, Response, UserInfo, make_response
from wcf_mcp.protocol.schema import RequestMessage, ResponseMessage

REQUESTS = [
    fn.build_is_login(),
    fn.build_get_self_wxid(),
    fn.build_get_user_info(),
    fn.build_get_msg_types(),
    fn.build_get_contacts(),
    fn.build_get_contact_info("wxid_a"),
    fn.build_get_db_names(),
    fn.build_get_db_tables("MicroMsg.db"),
    fn.build_db_query("MicroMsg.db", "SELECT * FROM Contact;"),
    fn.build_send_text("hello", "wxid_a", "wxid_b,wxid_c"),
    fn.build_send_image("C:/a.jpg", "wxid_a"),
    fn.build_send_file("C:/a.txt", "wxid_a"),
    fn.build_send_xml("C:/cover.jpg", "<msg/>", "wxid_a", 0x21),
    fn.build_send_emotion("C:/a.gif", "wxid_a"),
    fn.build_revoke_message(2**63 + 5),
    fn.build_accept_friend("v3_a", "v4_b", 14),
    fn.build_receive_transfer("wxid_a", "tf1", "ta1"),
    fn.build_refresh_moments(0),
    fn.build_add_room_members("1@chatroom", "wxid_a,wxid_b"),
    fn.build_delete_room_members("1@chatroom", "wxid_a"),
    fn.build_download_attachment(99, "thumb", "extra"),
    fn.build_decrypt_image("extra", "C:/out"),
    fn.build_enable_message_server(False),
    fn.build_disable_message_server(),
]


@pytest.mark.parametrize("request_", REQUESTS, ids=lambda r: r.function.name)
def test_request_survives_the_wire(request_):
    """Every function/payload pair decodes to the request that was encoded."""
    assert decode_request(encode_request(request_)) == request_


def test_request_wire_fields():
    """The payload lands in the oneof member named after its variant."""
    data = encode_request(fn.build_send_text("hi", "wxid_a"))
    msg = RequestMessage.FromString(data)
    assert msg.func == Function.SEND_TXT
    assert msg.WhichOneof("msg") == "txt"
    assert msg.txt.msg == "hi"
    assert msg.txt.receiver == "wxid_a"


def test_empty_request_has_no_payload_member():
    msg = RequestMessage.FromString(encode_request(fn.build_get_contacts()))
    assert msg.WhichOneof("msg") is None


def test_decode_status_response():
    data = ResponseMessage(func=int(Function.SEND_TXT), status=-3).SerializeToString()
    response = decode_response(data)
    assert response.function == Function.SEND_TXT
    assert response.status == -3
    assert response.get_str() == ""
    assert response.get_contacts() == []


def test_decode_contacts():
    msg = ResponseMessage(func=int(Function.GET_CONTACTS))
    msg.contacts.contacts.add(wxid="wxid_a", name="Alice", city="Shenzhen", gender=2)
    response = decode_response(msg.SerializeToString())
    assert response.get_contacts() == [
        Contact(wxid="wxid_a", name="Alice", city="Shenzhen", gender=2)
    ]
    # Lenient: other projections are zero values
    assert response.status == 0
    assert response.get_rows() == []
    assert response.get_user_info() is None


def test_decode_rows_keeps_bytes():
    msg = ResponseMessage(func=int(Function.EXEC_DB_QUERY))
    row = msg.rows.rows.add()
    row.fields.add(column="RoomData", content=b"\x00\x01\xff", type=4)
    response = decode_response(msg.SerializeToString())
    rows = response.get_rows()
    assert rows[0].fields == (RawField(column="RoomData", content=b"\x00\x01\xff", type=4),)


def test_decode_empty_response():
    """A reply without any payload decodes to zero values everywhere."""
    response = decode_response(b"")
    assert response.status == 0
    assert response.get_str() == ""
    assert response.get_types() == {}
    assert response.get_db_names() == []


def test_decode_unknown_function_value():
    msg = ResponseMessage(status=1)
    msg.func = 0x7F  # proto3 enums are open
    response = decode_response(msg.SerializeToString())
    assert response.function == 0x7F


@pytest.mark.parametrize("response", [
    make_response(Function.GET_SELF_WXID, "wxid_self"),
    make_response(Function.GET_MSG_TYPES, {1: "Text", 3: "Image"}),
    make_response(Function.GET_DB_NAMES, ["MicroMsg.db", "MSG0.db"]),
    make_response(Function.GET_DB_TABLES, [DbTable(name="Contact", sql="CREATE TABLE Contact(...)")]),
    make_response(Function.GET_USER_INFO, UserInfo(wxid="wxid_self", name="Me", mobile="1", home="C:/")),
    make_response(Function.EXEC_DB_QUERY, [DbRow(fields=(RawField("a", b"1"),))]),
    make_response(Function.REVOKE_MSG, status=1),
    Response(function=Function.GET_CONTACTS, payload=[], payload_field="contacts"),
], ids=lambda r: r.payload_field or "status")
def test_response_survives_the_wire(response):
    assert decode_response(encode_response(response)) == response
