from __future__ import annotations
import logging
from enum import Enum

from leafdb.consts import (
    CELL_POINTER_SIZE,
    DB_FILE_HEADER_SIZE,
    LEAF_PAGE_HEADER_SIZE,
    MAX_PAGE_SIZE,
)
from leafdb.exceptions import (
    DatabaseIOError,
    MalformedRecordError,
    UnsupportedPageTypeError,
)
from leafdb.reading import page_start, read_table_record
from leafdb.rows import Record

from typing import BinaryIO, Iterator, List

logger = logging.getLogger(__name__)


class PageType(Enum):
    INTERIOR_INDEX = 0x02
    INTERIOR_TABLE = 0x05
    LEAF_INDEX = 0x0A
    LEAF_TABLE = 0x0D


SUPPORTED_PAGE_TYPES = (PageType.LEAF_INDEX, PageType.LEAF_TABLE)


class Page:
    """
    A single decoded b-tree page, see https://www.sqlite.org/fileformat2.html#b_tree_pages

    The page owns its raw bytes. Cell pointers are offsets into `data`, the
    full page buffer, even on the first page where the page header only starts
    after the 100 byte database header.
    """

    page_index: int
    page_type: PageType
    first_freeblock: int
    cell_count: int
    cell_content_area_start: int
    cell_pointer_array: List[int]
    data: bytes

    @staticmethod
    def from_bytes(page_index: int, data: bytes) -> Page:
        instance = Page()
        instance.page_index = page_index
        instance.data = data

        # For the first page, we must skip the 100 byte database header
        header_start = DB_FILE_HEADER_SIZE if page_index == 0 else 0
        if len(data) < header_start + LEAF_PAGE_HEADER_SIZE:
            raise DatabaseIOError(
                f"Page {page_index} is {len(data)} bytes, too short for a page header"
            )

        page_type_int = data[header_start]
        try:
            instance.page_type = PageType(page_type_int)
        except ValueError:
            raise UnsupportedPageTypeError(
                f"Invalid page type {page_type_int:#04x} on page {page_index}"
            ) from None
        if instance.page_type not in SUPPORTED_PAGE_TYPES:
            raise UnsupportedPageTypeError(
                f"Page {page_index} is an {instance.page_type.name} page, only leaf pages are supported"
            )

        instance.first_freeblock = int.from_bytes(
            data[header_start + 1 : header_start + 3], "big"
        )
        instance.cell_count = int.from_bytes(
            data[header_start + 3 : header_start + 5], "big"
        )
        # A zero content area start means 65536
        instance.cell_content_area_start = (
            int.from_bytes(data[header_start + 5 : header_start + 7], "big")
            or MAX_PAGE_SIZE
        )

        instance.cell_pointer_array = Page.__read_cell_pointers(
            data, header_start + LEAF_PAGE_HEADER_SIZE, instance.cell_count
        )

        return instance

    @staticmethod
    def from_file(database_file: BinaryIO, page_index: int, page_size: int) -> Page:
        """
        Loads the page at `page_index` (0-based) with an absolute seek, so no
        earlier read position is relied upon.
        """
        database_file.seek(page_start(page_index, page_size))
        data = database_file.read(page_size)
        if len(data) != page_size:
            raise DatabaseIOError(
                f"Short read on page {page_index}: expected {page_size} bytes, got {len(data)}"
            )

        logger.debug("Loaded page %d (%d bytes)", page_index, page_size)
        return Page.from_bytes(page_index, data)

    @property
    def is_leaf_table(self) -> bool:
        return self.page_type == PageType.LEAF_TABLE

    def read_records(self) -> Iterator[Record]:
        """Decodes the page's cells one at a time, in cell pointer order."""
        if not self.is_leaf_table:
            raise UnsupportedPageTypeError(
                f"Cannot read table records from {self.page_type.name} page {self.page_index}"
            )

        for cell_pointer in self.cell_pointer_array:
            yield read_table_record(self.data, cell_pointer)

    #  The cell pointer array consists of K 2-byte integer offsets to the cell contents.
    @staticmethod
    def __read_cell_pointers(data: bytes, start: int, cell_count: int) -> List[int]:
        end = start + cell_count * CELL_POINTER_SIZE
        if end > len(data):
            raise MalformedRecordError(
                f"Cell pointer array of {cell_count} cells does not fit in the page"
            )

        cell_pointers = [
            int.from_bytes(data[offset : offset + CELL_POINTER_SIZE], "big")
            for offset in range(start, end, CELL_POINTER_SIZE)
        ]
        for cell_pointer in cell_pointers:
            if not end <= cell_pointer < len(data):
                raise MalformedRecordError(
                    f"Cell pointer {cell_pointer} points outside the cell content area"
                )

        return cell_pointers
