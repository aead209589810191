"""Tests for the function table and request builders."""

import pytest

from wcf_mcp.protocol.functions import (
    FUNCTION_PAYLOADS,
    Function,
    PayloadKind,
    UINT64_MAX,
    build_accept_friend,
    build_db_query,
    build_decrypt_image,
    build_download_attachment,
    build_enable_message_server,
    build_get_contacts,
    build_refresh_moments,
    build_request,
    build_revoke_message,
    build_send_text,
    build_send_xml,
    payload_kind,
)
from wcf_mcp.protocol.messages import (
    AttachMsg,
    DbQuery,
    DecPath,
    PathMsg,
    TextMsg,
    Verification,
    XmlMsg,
)


def test_function_enum_values():
    """Key function ids match the remote table."""
    assert Function.IS_LOGIN == 0x01
    assert Function.GET_CONTACTS == 0x12
    assert Function.SEND_TXT == 0x20
    assert Function.EXEC_DB_QUERY == 0x50
    assert Function.DOWNLOAD_ATTACH == 0x54
    assert Function.DECRYPT_IMAGE == 0x60
    assert Function.DEL_ROOM_MEMBERS == 0x71


def test_every_requestable_function_has_a_payload_kind():
    """All functions except RESERVED declare their payload variant."""
    assert set(FUNCTION_PAYLOADS) == set(Function) - {Function.RESERVED}


def test_payload_kind_distinguishes_bool_from_int():
    assert payload_kind(True) is PayloadKind.FLAG
    assert payload_kind(7) is PayloadKind.UI64
    assert payload_kind("x") is PayloadKind.STR
    assert payload_kind(None) is PayloadKind.EMPTY
    assert payload_kind(DecPath()) is PayloadKind.DEC


def test_payload_kind_rejects_unknown_types():
    with pytest.raises(ValueError):
        payload_kind(1.5)


def test_build_get_contacts_has_no_payload():
    request = build_get_contacts()
    assert request.function == Function.GET_CONTACTS
    assert request.payload is None


def test_build_send_text():
    """Text message carries receiver and mentions."""
    request = build_send_text("hi @bob", "room@chatroom", "wxid_bob")
    assert request.function == Function.SEND_TXT
    assert request.payload == TextMsg(
        msg="hi @bob", receiver="room@chatroom", aters="wxid_bob"
    )


def test_build_send_xml_keeps_field_mapping():
    request = build_send_xml("cover.jpg", "<xml/>", "wxid_a", 0x21)
    assert request.payload == XmlMsg(
        receiver="wxid_a", content="<xml/>", path="cover.jpg", type=0x21
    )


def test_build_db_query():
    request = build_db_query("MicroMsg.db", "SELECT 1;")
    assert request.function == Function.EXEC_DB_QUERY
    assert request.payload == DbQuery(db="MicroMsg.db", sql="SELECT 1;")


def test_build_accept_friend_default_scene():
    """Scene defaults to QR-scan (30)."""
    request = build_accept_friend("v3_x", "v4_y")
    assert request.payload == Verification(v3="v3_x", v4="v4_y", scene=30)


def test_build_download_attachment():
    request = build_download_attachment(123, "thumb.dat", "extra.dat")
    assert request.function == Function.DOWNLOAD_ATTACH
    assert request.payload == AttachMsg(id=123, thumb="thumb.dat", extra="extra.dat")


def test_build_decrypt_image():
    request = build_decrypt_image("extra.dat", "C:/out")
    assert request.payload == DecPath(src="extra.dat", dst="C:/out")


def test_build_enable_message_server_is_flag():
    request = build_enable_message_server(True)
    assert request.payload is True


def test_build_refresh_moments_defaults_to_newest_page():
    assert build_refresh_moments().payload == 0


def test_wrong_payload_variant_is_rejected():
    """A payload the function does not take should raise."""
    with pytest.raises(ValueError):
        build_request(Function.SEND_TXT, PathMsg(path="a", receiver="b"))
    with pytest.raises(ValueError):
        build_request(Function.GET_CONTACTS, "unexpected")
    with pytest.raises(ValueError):
        build_request(Function.REVOKE_MSG, True)


def test_missing_payload_is_rejected():
    with pytest.raises(ValueError):
        build_request(Function.GET_DB_TABLES)


def test_reserved_function_cannot_be_requested():
    with pytest.raises(ValueError):
        build_request(Function.RESERVED)


def test_uint64_bounds():
    """Unsigned 64-bit payloads must be within range."""
    assert build_revoke_message(UINT64_MAX).payload == UINT64_MAX
    with pytest.raises(ValueError):
        build_revoke_message(-1)
    with pytest.raises(ValueError):
        build_revoke_message(UINT64_MAX + 1)
    with pytest.raises(ValueError):
        build_download_attachment(-5, "", "")
