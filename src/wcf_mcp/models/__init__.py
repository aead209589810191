"""Data models for contacts and query results."""

from .contact import (
    Contact,
    IdentityKind,
    classify_identity,
    filter_chat_rooms,
    filter_friends,
    find_by_wxid,
)
from .fields import FieldDecodeError, RawField, rows_to_map
