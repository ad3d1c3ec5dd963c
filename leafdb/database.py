from __future__ import annotations
import logging
from pathlib import Path

from leafdb.catalog import SchemaCatalog
from leafdb.consts import DB_FILE_HEADER_SIZE
from leafdb.exceptions import DatabaseIOError
from leafdb.pages import Page
from leafdb.reading import DatabaseHeader, read_database_header

from typing import BinaryIO, Optional, Union

logger = logging.getLogger(__name__)


class Database:
    """
    A read session over one database file.

    The header is validated when the file is opened, before any page is
    decoded. The schema catalog is decoded from the first page once and
    then reused. Pages are never cached, every read seeks explicitly.
    The open file handle is not meant to be shared between threads.
    """

    path: Path
    header: DatabaseHeader
    _database_file: Optional[BinaryIO]
    _catalog: Optional[SchemaCatalog]

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._database_file = None
        self._catalog = None

        try:
            self._database_file = open(self.path, "rb")
            header_bytes = self._database_file.read(DB_FILE_HEADER_SIZE)
        except OSError as exc:
            self.close()
            raise DatabaseIOError(f"Cannot read database file {self.path}: {exc}") from exc

        try:
            self.header = read_database_header(header_bytes)
        except Exception:
            self.close()
            raise

        logger.debug("Opened %s with page size %d", self.path, self.page_size)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        if self._database_file is not None:
            self._database_file.close()
            self._database_file = None

    @property
    def page_size(self) -> int:
        return self.header.page_size

    def read_page(self, page_index: int) -> Page:
        """Reads and decodes the page at `page_index` (0-based)."""
        if self._database_file is None:
            raise DatabaseIOError(f"Database {self.path} is closed")

        try:
            return Page.from_file(self._database_file, page_index, self.page_size)
        except OSError as exc:
            raise DatabaseIOError(f"Cannot read page {page_index}: {exc}") from exc

    @property
    def schema_page(self) -> Page:
        # The first page in an sqlite db is a special node that contains the schema of the db
        return self.read_page(0)

    @property
    def catalog(self) -> SchemaCatalog:
        if self._catalog is None:
            self._catalog = SchemaCatalog.from_page(self.schema_page)
        return self._catalog
