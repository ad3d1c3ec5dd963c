import sqlite3
import struct

import pytest

from leafdb.reading import encode_varint


def build_db_header(page_size=512, text_encoding=1):
    header = bytearray(100)
    header[:16] = b"SQLite format 3\x00"
    header[16:18] = (1 if page_size == 65536 else page_size).to_bytes(2, "big")
    header[56:60] = text_encoding.to_bytes(4, "big")
    return bytes(header)


def encode_value(value):
    """Returns (serial type, body bytes) for a python value."""
    if value is None:
        return 0, b""
    if isinstance(value, float):
        return 7, struct.pack(">d", value)
    if isinstance(value, int):
        if -128 <= value <= 127:
            return 1, value.to_bytes(1, "big", signed=True)
        return 6, value.to_bytes(8, "big", signed=True)
    if isinstance(value, str):
        data = value.encode("utf-8")
        return 13 + 2 * len(data), data
    if isinstance(value, bytes):
        return 12 + 2 * len(value), value
    raise TypeError(value)


def build_raw_cell(row_id, serial_types, body):
    header = b"".join(encode_varint(serial_type) for serial_type in serial_types)
    # header size counts its own varint, one byte for the small headers used here
    record = encode_varint(len(header) + 1) + header + body
    return encode_varint(len(record)) + encode_varint(row_id) + record


def build_cell(row_id, values):
    encoded = [encode_value(value) for value in values]
    return build_raw_cell(
        row_id,
        [serial_type for serial_type, _ in encoded],
        b"".join(body for _, body in encoded),
    )


def build_leaf_page(cells, page_index=1, page_size=512, page_type=0x0D):
    header_start = 100 if page_index == 0 else 0
    page = bytearray(page_size)
    if page_index == 0:
        page[:100] = build_db_header(page_size)

    content_start = page_size
    cell_pointers = []
    for cell in cells:
        content_start -= len(cell)
        page[content_start : content_start + len(cell)] = cell
        cell_pointers.append(content_start)

    page[header_start] = page_type
    page[header_start + 3 : header_start + 5] = len(cells).to_bytes(2, "big")
    page[header_start + 5 : header_start + 7] = content_start.to_bytes(2, "big")
    for i, cell_pointer in enumerate(cell_pointers):
        offset = header_start + 8 + 2 * i
        page[offset : offset + 2] = cell_pointer.to_bytes(2, "big")

    return bytes(page)


def schema_cell(row_id, name, root_page, sql, object_type="table", table_name=None):
    return build_cell(
        row_id, [object_type, name, table_name or name, root_page, sql]
    )


@pytest.fixture
def write_pages(tmp_path):
    """Writes already built pages to a database file and returns its path."""

    def _write(*pages, name="handmade.db"):
        path = tmp_path / name
        path.write_bytes(b"".join(pages))
        return path

    return _write


@pytest.fixture
def apples_db(tmp_path):
    path = tmp_path / "apples.db"
    connection = sqlite3.connect(path)
    connection.executescript(
        """
        CREATE TABLE apples
        (
            id integer,
            name text,
            color text
        );
        CREATE TABLE oranges (name text, description text);
        CREATE INDEX idx_apples_color ON apples (color);
        CREATE VIEW yellow_apples AS SELECT name FROM apples WHERE color = 'Yellow';

        INSERT INTO apples VALUES (3, 'Granny Smith', 'Light Green');
        INSERT INTO apples VALUES (1, 'Fuji', 'Red');
        INSERT INTO apples VALUES (4, 'Honeycrisp', 'Blush Red');
        INSERT INTO apples VALUES (2, 'Golden Delicious', 'Yellow');

        INSERT INTO oranges VALUES ('Mandarin', 'great for snacking');
        INSERT INTO oranges VALUES ('Tangelo', 'sweet and tart');
        """
    )
    connection.commit()
    connection.close()
    return path


@pytest.fixture
def measurements_db(tmp_path):
    path = tmp_path / "measurements.db"
    connection = sqlite3.connect(path)
    connection.execute(
        "CREATE TABLE measurements (label text, reading real, delta integer, payload blob)"
    )
    connection.executemany(
        "INSERT INTO measurements VALUES (?, ?, ?, ?)",
        [
            ("a", 3.5, -5, b"\x01\x02"),
            ("b", None, 300, b""),
            ("c", -0.25, 70000, None),
            ("d", 1e100, -(2**40), b"\xff"),
            ("e", 0.5, 2**62, b""),
        ],
    )
    connection.commit()
    connection.close()
    return path


@pytest.fixture
def large_table_db(tmp_path):
    path = tmp_path / "large.db"
    connection = sqlite3.connect(path)
    connection.execute("CREATE TABLE notes (body text)")
    connection.executemany(
        "INSERT INTO notes VALUES (?)", [("x" * 200,) for _ in range(100)]
    )
    connection.commit()
    connection.close()
    return path
