"""Untyped database fields returned by remote SQL queries.

Field content arrives as raw bytes. Depending on the column it is text or a
nested protobuf blob (``ChatRoom.RoomData`` for instance); the caller picks
the interpretation with :meth:`RawField.as_text` or
:meth:`RawField.as_structured`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from google.protobuf.message import DecodeError, Message

if TYPE_CHECKING:
    from ..protocol.messages import DbRow

M = TypeVar("M", bound=Message)


class FieldDecodeError(ValueError):
    """Raised when a field's bytes do not decode as the requested structure."""

    def __init__(self, column: str, target: str, reason: str) -> None:
        super().__init__(f"Column {column!r} is not a valid {target}: {reason}")
        self.column = column
        self.target = target


@dataclass(frozen=True)
class RawField:
    """A single column value from a query row."""

    column: str
    content: bytes = b""
    type: int = 0

    def as_text(self, encoding: str = "utf-8", errors: str = "replace") -> str:
        return self.content.decode(encoding, errors=errors)

    def as_structured(self, message_cls: type[M]) -> M:
        """Decode the content as a protobuf message of ``message_cls``.

        Raises:
            FieldDecodeError: If the bytes are not a valid encoding.
        """
        try:
            return message_cls.FromString(self.content)
        except DecodeError as e:
            raise FieldDecodeError(
                self.column, message_cls.DESCRIPTOR.full_name, str(e)
            ) from e


def rows_to_map(rows: Iterable[DbRow]) -> dict[str, bytes]:
    """Flatten rows into ``{column: content}``.

    Meant for single-row queries. With several rows, later rows overwrite
    earlier ones column by column.
    """
    result: dict[str, bytes] = {}
    for row in rows:
        for f in row.fields:
            result[f.column] = f.content
    return result
