"""Tests for identity classification and contact filters."""

from wcf_mcp.models.contact import (
    CHAT_ROOM_SUFFIX,
    OFFICIAL_ACCOUNT_PREFIX,
    SYSTEM_SERVICES,
    Contact,
    IdentityKind,
    classify_identity,
    filter_chat_rooms,
    filter_friends,
    find_by_wxid,
)

CONTACTS = [
    Contact(wxid="wxid_alice", name="Alice"),
    Contact(wxid="12345@chatroom", name="Team"),
    Contact(wxid="gh_news", name="News Account"),
    Contact(wxid="filehelper", name="File Transfer"),
    Contact(wxid="wxid_bob", name="Bob"),
    Contact(wxid="newsapp", name="News"),
    Contact(wxid="678@chatroom", name="Family"),
    Contact(wxid="wxid_alice", name="Alice (dup)"),
]


def test_classify_identity():
    assert classify_identity("wxid_abc") is IdentityKind.FRIEND
    assert classify_identity("999@chatroom") is IdentityKind.CHAT_ROOM
    assert classify_identity("gh_0123") is IdentityKind.OFFICIAL_ACCOUNT
    assert classify_identity("fmessage") is IdentityKind.SYSTEM_SERVICE


def test_room_suffix_wins_over_prefix():
    """A room id is a room even if it happens to start like an account."""
    assert classify_identity("gh_x@chatroom") is IdentityKind.CHAT_ROOM


def test_friends_filter_excludes_non_friends():
    friends = filter_friends(CONTACTS)
    for c in friends:
        assert not c.wxid.endswith(CHAT_ROOM_SUFFIX)
        assert not c.wxid.startswith(OFFICIAL_ACCOUNT_PREFIX)
        assert c.wxid not in SYSTEM_SERVICES
    assert [c.name for c in friends] == ["Alice", "Bob", "Alice (dup)"]


def test_chat_room_filter_keeps_rooms_in_order():
    rooms = filter_chat_rooms(CONTACTS)
    assert all(c.wxid.endswith(CHAT_ROOM_SUFFIX) for c in rooms)
    assert [c.name for c in rooms] == ["Team", "Family"]


def test_find_by_wxid_returns_first_match():
    assert find_by_wxid(CONTACTS, "wxid_alice").name == "Alice"
    assert find_by_wxid(CONTACTS, "wxid_nobody") is None


def test_contact_to_dict_includes_kind():
    d = Contact(wxid="gh_x", name="X").to_dict()
    assert d["wxid"] == "gh_x"
    assert d["kind"] == "official_account"
