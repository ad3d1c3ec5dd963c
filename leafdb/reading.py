import struct
from dataclasses import dataclass

from leafdb.consts import (
    CONTINUATION_BIT_MASK,
    DB_FILE_HEADER_SIZE,
    DB_MAGIC_STRING,
    LAST_SEVEN_BITS_MASK,
    MAX_PAGE_SIZE,
    MAX_VARINT_BYTES,
    PAGE_SIZE_OFFSET,
    TEXT_ENCODING_OFFSET,
    UTF8_TEXT_ENCODING,
)
from leafdb.exceptions import (
    InvalidDatabaseHeaderError,
    MalformedRecordError,
    UnsupportedTextEncodingError,
)
from leafdb.rows import Blob, Float, Integer, Null, Record, Text, TypedValue

from typing import List, Tuple


@dataclass(frozen=True)
class DatabaseHeader:
    page_size: int
    text_encoding: int


def page_start(page_index: int, page_size: int) -> int:
    return page_index * page_size


def read_database_header(header_bytes: bytes) -> DatabaseHeader:
    """
    Parses the fixed 100 byte preamble of the database file.
    See https://www.sqlite.org/fileformat.html#the_database_header
    """
    if len(header_bytes) < DB_FILE_HEADER_SIZE:
        raise InvalidDatabaseHeaderError(
            f"Database header needs {DB_FILE_HEADER_SIZE} bytes, got {len(header_bytes)}"
        )

    if not header_bytes.startswith(DB_MAGIC_STRING):
        raise InvalidDatabaseHeaderError("File does not start with the SQLite magic string")

    page_size = int.from_bytes(
        header_bytes[PAGE_SIZE_OFFSET : PAGE_SIZE_OFFSET + 2], "big"
    )
    # 65536 does not fit in two bytes, so it is stored as 1
    if page_size == 1:
        page_size = MAX_PAGE_SIZE
    if page_size < 2 or page_size & (page_size - 1) != 0:
        raise InvalidDatabaseHeaderError(f"Invalid page size: {page_size}")

    text_encoding = int.from_bytes(
        header_bytes[TEXT_ENCODING_OFFSET : TEXT_ENCODING_OFFSET + 4], "big"
    )
    if text_encoding != UTF8_TEXT_ENCODING:
        raise UnsupportedTextEncodingError(
            f"Unsupported text encoding {text_encoding}, only UTF-8 is supported"
        )

    return DatabaseHeader(page_size=page_size, text_encoding=text_encoding)


def read_varint(buffer: bytes, offset: int = 0) -> Tuple[int, int]:
    # https://www.sqlite.org/fileformat.html#varint
    if offset >= len(buffer):
        raise MalformedRecordError(f"No bytes left to read a varint at offset {offset}")

    value = 0
    byte_count = 0
    while byte_count < MAX_VARINT_BYTES and offset + byte_count < len(buffer):
        byte = buffer[offset + byte_count]
        byte_count += 1
        # Continue extracting the 7 least significant bits until the most significant bit is 0
        value = (value << 7) | (byte & LAST_SEVEN_BITS_MASK)
        if (byte & CONTINUATION_BIT_MASK) == 0:
            break

    return value, byte_count


def encode_varint(value: int) -> bytes:
    if value < 0 or value >= 1 << (7 * MAX_VARINT_BYTES):
        raise ValueError(f"Cannot encode {value} in {MAX_VARINT_BYTES} varint bytes")

    groups = [value & LAST_SEVEN_BITS_MASK]
    value >>= 7
    while value:
        groups.append((value & LAST_SEVEN_BITS_MASK) | CONTINUATION_BIT_MASK)
        value >>= 7

    return bytes(reversed(groups))


# serial type -> number of body bytes, for the fixed width types
_FIXED_WIDTHS = {0: 0, 1: 1, 2: 2, 3: 3, 4: 4, 5: 6, 6: 8, 7: 8, 8: 0, 9: 0}


def serial_type_width(serial_type: int) -> int:
    if serial_type in _FIXED_WIDTHS:
        return _FIXED_WIDTHS[serial_type]
    elif serial_type in (10, 11):
        raise MalformedRecordError(f"Reserved serial type {serial_type} is not supported")
    elif serial_type >= 12 and serial_type % 2 == 0:
        return (serial_type - 12) // 2
    elif serial_type >= 13 and serial_type % 2 == 1:
        return (serial_type - 13) // 2

    raise MalformedRecordError(f"Unknown serial_type {serial_type}")


def read_table_record(buffer: bytes, offset: int) -> Record:
    """
    Decodes the table b-tree leaf cell starting at `offset`.

    Layout: payload size (varint), row id (varint), then the record itself,
    a header of serial types followed by the column bodies.
    Reference: https://saveriomiroddi.github.io/SQLIte-database-file-format-diagrams/
    """
    payload_size, count = read_varint(buffer, offset)
    cursor = offset + count
    row_id, count = read_varint(buffer, cursor)
    cursor += count

    payload_start = cursor
    header_size, num_header_bytes = read_varint(buffer, cursor)
    cursor += num_header_bytes

    # read all the other bytes past the bytes used to declare the header size
    remaining = header_size - num_header_bytes
    serial_types = []
    while remaining > 0:
        serial_type, bytes_used = read_varint(buffer, cursor)
        cursor += bytes_used
        remaining -= bytes_used
        serial_types.append(serial_type)

    if remaining != 0:
        raise MalformedRecordError(
            f"Record header of row {row_id} overran its declared size of {header_size} bytes"
        )

    values: List[TypedValue] = []
    for serial_type in serial_types:
        width = serial_type_width(serial_type)
        if cursor + width > len(buffer):
            raise MalformedRecordError(
                f"Column of row {row_id} runs past the end of the page, overflow pages are not supported"
            )
        values.append(read_column_value(buffer, cursor, serial_type))
        cursor += width

    if cursor - payload_start != payload_size:
        raise MalformedRecordError(
            f"Row {row_id} declares a {payload_size} byte payload but {cursor - payload_start} bytes were decoded"
        )

    return Record(
        payload_size=payload_size,
        row_id=row_id,
        serial_types=tuple(serial_types),
        values=tuple(values),
    )


def read_column_value(buffer: bytes, offset: int, serial_type: int) -> TypedValue:
    if serial_type == 0:
        return Null()
    elif 1 <= serial_type <= 6:
        width = _FIXED_WIDTHS[serial_type]
        return Integer(
            int.from_bytes(buffer[offset : offset + width], "big", signed=True)
        )
    elif serial_type == 7:
        return Float(struct.unpack(">d", buffer[offset : offset + 8])[0])
    elif serial_type == 8:
        return Integer(0)
    elif serial_type == 9:
        return Integer(1)
    elif (serial_type >= 13) and (serial_type % 2 == 1):
        n_bytes = (serial_type - 13) // 2
        try:
            return Text(bytes(buffer[offset : offset + n_bytes]).decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise MalformedRecordError(f"Invalid UTF-8 in text column: {exc}") from exc
    elif (serial_type >= 12) and (serial_type % 2 == 0):
        n_bytes = (serial_type - 12) // 2
        return Blob(bytes(buffer[offset : offset + n_bytes]))

    elif serial_type in (10, 11):
        raise MalformedRecordError(f"Reserved serial type {serial_type} is not supported")

    raise MalformedRecordError(f"Unknown serial_type {serial_type}")
