from __future__ import annotations
import logging

from leafdb.catalog import SchemaCatalog
from leafdb.database import Database
from leafdb.exceptions import UnsupportedPageTypeError
from leafdb.filtering import ValueFilter
from leafdb.pages import Page
from leafdb.rows import Null, Record, TypedValue

from typing import Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Row = Tuple[TypedValue, ...]


class TableScanner:
    """
    Projects columns out of single page tables.

    Rows come out in the order of the root page's cell pointers, which is
    the storage order and not necessarily row id order.
    """

    def __init__(self, database: Database, catalog: Optional[SchemaCatalog] = None):
        self.database = database
        self.catalog = catalog if catalog is not None else database.catalog

    def scan(
        self,
        table_name: str,
        column_names: Sequence[str],
        value_filters: Sequence[ValueFilter] = (),
    ) -> Iterator[Row]:
        """
        Returns a lazy iterator of row tuples holding the requested columns in
        request order. "*" expands to every column of the table.

        Unknown tables and columns fail here, before the first row is decoded.
        """
        entry = self.catalog.entry(table_name)
        column_indices = []
        for column_name in column_names:
            if column_name == "*":
                column_indices += range(len(entry.columns))
            else:
                column_indices.append(entry.column_index(column_name))

        page = self._load_root_page(table_name)
        filters = self._resolve_filters(table_name, value_filters)

        return self._project(page, column_indices, filters)

    def count(self, table_name: str, value_filters: Sequence[ValueFilter] = ()) -> int:
        page = self._load_root_page(table_name)
        filters = self._resolve_filters(table_name, value_filters)
        if not filters:
            return page.cell_count

        return sum(1 for record in page.read_records() if _matches(record, filters))

    def _load_root_page(self, table_name: str) -> Page:
        root_page = self.catalog.root_page(table_name)
        logger.debug("Scanning table %s from root page %d", table_name, root_page)
        page = self.database.read_page(root_page - 1)
        if not page.is_leaf_table:
            raise UnsupportedPageTypeError(
                f"Root page {root_page} of table {table_name} is an {page.page_type.name} page, "
                "only single leaf page tables are supported"
            )
        return page

    def _resolve_filters(
        self, table_name: str, value_filters: Sequence[ValueFilter]
    ) -> List[Tuple[int, ValueFilter]]:
        entry = self.catalog.entry(table_name)
        return [
            (entry.column_index(value_filter.column), value_filter)
            for value_filter in value_filters
        ]

    @staticmethod
    def _project(
        page: Page, column_indices: List[int], filters: List[Tuple[int, ValueFilter]]
    ) -> Iterator[Row]:
        for record in page.read_records():
            if not _matches(record, filters):
                continue
            yield tuple(_column_value(record, index) for index in column_indices)


def _column_value(record: Record, column_index: int) -> TypedValue:
    # Rows written before an ALTER TABLE ADD COLUMN have fewer values
    # and read the missing ones as NULL
    if column_index >= len(record):
        return Null()
    return record[column_index]


def _matches(record: Record, filters: List[Tuple[int, ValueFilter]]) -> bool:
    return all(
        value_filter(_column_value(record, index)) for index, value_filter in filters
    )
