"""Contact model and identity classification.

The remote side does not type its identities. Chat rooms, official accounts
and built-in service accounts are told apart from personal contacts purely
by the shape of the wxid, so every filter goes through
:func:`classify_identity`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from enum import Enum

CHAT_ROOM_SUFFIX = "@chatroom"
OFFICIAL_ACCOUNT_PREFIX = "gh_"

# Built-in service accounts that show up in the contact list
SYSTEM_SERVICES: dict[str, str] = {
    "mphelper": "公众平台助手",
    "fmessage": "朋友推荐消息",
    "medianote": "语音记事本",
    "floatbottle": "漂流瓶",
    "filehelper": "文件传输助手",
    "newsapp": "新闻",
}


class IdentityKind(Enum):
    """What a wxid refers to."""

    FRIEND = "friend"
    CHAT_ROOM = "chat_room"
    OFFICIAL_ACCOUNT = "official_account"
    SYSTEM_SERVICE = "system_service"


@dataclass(frozen=True)
class Contact:
    """A contact, chat room or service account as reported by the remote side."""

    wxid: str
    name: str = ""
    code: str = ""
    remark: str = ""
    country: str = ""
    province: str = ""
    city: str = ""
    gender: int = 0

    @property
    def kind(self) -> IdentityKind:
        return classify_identity(self.wxid)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        return d


def classify_identity(wxid: str) -> IdentityKind:
    """Classify a wxid by its naming convention."""
    if wxid.endswith(CHAT_ROOM_SUFFIX):
        return IdentityKind.CHAT_ROOM
    if wxid.startswith(OFFICIAL_ACCOUNT_PREFIX):
        return IdentityKind.OFFICIAL_ACCOUNT
    if wxid in SYSTEM_SERVICES:
        return IdentityKind.SYSTEM_SERVICE
    return IdentityKind.FRIEND


def filter_by_kind(contacts: Iterable[Contact], kind: IdentityKind) -> list[Contact]:
    """Keep contacts of one kind, preserving order."""
    return [c for c in contacts if classify_identity(c.wxid) is kind]


def filter_friends(contacts: Iterable[Contact]) -> list[Contact]:
    return filter_by_kind(contacts, IdentityKind.FRIEND)


def filter_chat_rooms(contacts: Iterable[Contact]) -> list[Contact]:
    return filter_by_kind(contacts, IdentityKind.CHAT_ROOM)


def find_by_wxid(contacts: Iterable[Contact], wxid: str) -> Contact | None:
    """Return the first contact with ``wxid``, in the given order."""
    for contact in contacts:
        if contact.wxid == wxid:
            return contact
    return None
