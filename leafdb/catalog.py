from __future__ import annotations
import logging
from dataclasses import dataclass

from leafdb.consts import (
    SCHEMA_ROOTPAGE_COLUMN,
    SCHEMA_SQL_COLUMN,
    SCHEMA_TABLE_NAME_COLUMN,
)
from leafdb.exceptions import (
    ColumnNotFoundError,
    DdlParseError,
    SchemaInconsistencyError,
    TableNotFoundError,
)
from leafdb.pages import Page
from leafdb.queries import ColumnDef, parse_create_table
from leafdb.rows import Integer, Record, Text

from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


# https://www.sqlite.org/fileformat.html#storage_of_the_sql_database_schema
@dataclass(frozen=True)
class SchemaEntry:
    table_name: str
    root_page: int  # 1-based page number
    columns: Tuple[ColumnDef, ...]
    sql: str

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def column_index(self, column_name: str) -> int:
        for index, column in enumerate(self.columns):
            if column.name == column_name:
                return index

        raise ColumnNotFoundError(
            f"Cannot find column {column_name} for table: {self.table_name}"
        )


class SchemaCatalog:
    """
    The tables described by the schema rows of the first page.

    Built once per opened database and read-only afterwards. Tables keep the
    order of their cells on the first page.
    """

    def __init__(self, entries: Dict[str, SchemaEntry]):
        self._entries = dict(entries)
        self._root_pages = {name: entry.root_page for name, entry in entries.items()}

    @staticmethod
    def from_page(page: Page) -> SchemaCatalog:
        entries: Dict[str, SchemaEntry] = {}
        for record in page.read_records():
            entry = SchemaCatalog._record_to_entry(record)
            if entry is None:
                continue

            if entry.table_name in entries:
                raise SchemaInconsistencyError(
                    f"Table {entry.table_name} is defined more than once"
                )
            entries[entry.table_name] = entry

        logger.debug("Schema catalog holds %d tables", len(entries))
        return SchemaCatalog(entries)

    @staticmethod
    def _record_to_entry(record: Record) -> Optional[SchemaEntry]:
        if len(record) <= SCHEMA_SQL_COLUMN:
            raise SchemaInconsistencyError(
                f"Schema row {record.row_id} has {len(record)} columns, expected 5"
            )

        table_name = record[SCHEMA_TABLE_NAME_COLUMN]
        rootpage = record[SCHEMA_ROOTPAGE_COLUMN]
        sql = record[SCHEMA_SQL_COLUMN]

        # automatic indexes have no sql text
        if not isinstance(sql, Text):
            logger.debug("Skipping schema row %d without sql text", record.row_id)
            return None

        try:
            create_table = parse_create_table(sql.value)
        except DdlParseError:
            # indexes, views and triggers are not tables
            logger.debug("Skipping schema row %d: %s", record.row_id, sql.value)
            return None

        if not isinstance(table_name, Text) or table_name.value != create_table.table_name:
            raise SchemaInconsistencyError(
                f"Create table name {create_table.table_name} should be consistent "
                f"with the tbl_name field {table_name}"
            )
        if not isinstance(rootpage, Integer) or rootpage.value < 1:
            raise SchemaInconsistencyError(
                f"Table {table_name} has an invalid root page {rootpage}"
            )

        return SchemaEntry(
            table_name=table_name.value,
            root_page=rootpage.value,
            columns=create_table.columns,
            sql=sql.value,
        )

    @property
    def table_names(self) -> List[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._entries

    def entry(self, table_name: str) -> SchemaEntry:
        try:
            return self._entries[table_name]
        except KeyError:
            raise TableNotFoundError(f"Cannot find table: {table_name}") from None

    def root_page(self, table_name: str) -> int:
        try:
            return self._root_pages[table_name]
        except KeyError:
            raise TableNotFoundError(f"Cannot find table: {table_name}") from None
