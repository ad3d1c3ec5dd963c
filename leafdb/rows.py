# record format
# https://www.sqlite.org/fileformat.html#record_format
# A record contains a header and a body, in that order
from __future__ import annotations
from dataclasses import dataclass

from typing import Tuple, Union


@dataclass(frozen=True)
class Null:
    @property
    def value(self) -> None:
        return None

    def __str__(self) -> str:
        return "NULL"


@dataclass(frozen=True)
class Integer:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Float:
    value: float

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Reserved:
    """Serial types 10 and 11, reserved by the file format for internal use."""

    @property
    def value(self) -> None:
        return None

    def __str__(self) -> str:
        return "RESERVED"


@dataclass(frozen=True)
class Blob:
    data: bytes

    @property
    def value(self) -> bytes:
        return self.data

    @property
    def length(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return f"BLOB({self.length})"


@dataclass(frozen=True)
class Text:
    value: str

    def __str__(self) -> str:
        return self.value


TypedValue = Union[Null, Integer, Float, Reserved, Blob, Text]


@dataclass(frozen=True)
class Record:
    """
    One decoded table b-tree leaf cell.

    The row id is kept for identity only, columns are addressed by their
    position in `values`, which follows the order of the table's CREATE TABLE.
    """

    payload_size: int
    row_id: int
    serial_types: Tuple[int, ...]
    values: Tuple[TypedValue, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, column_index: int) -> TypedValue:
        return self.values[column_index]
