import logging
import os
import sys

from leafdb.consts import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV_VAR
from leafdb.database import Database
from leafdb.exceptions import LeafDBError
from leafdb.queries import Query
from leafdb.scanning import TableScanner

from typing import List, Optional

logger = logging.getLogger("leafdb")

USAGE = "Usage: leafdb <database path> <.dbinfo | .tables | SELECT ...>"


def run_command(database_file_path: str, command: str) -> None:
    with Database(database_file_path) as database:
        if command == ".dbinfo":
            print(f"database page size: {database.page_size}")
            # every schema object counts, as sqlite's own .dbinfo does
            print(f"number of tables: {database.schema_page.cell_count}")
        elif command == ".tables":
            print(" ".join(database.catalog.table_names))
        elif not command.startswith("."):
            query = Query.parse_query(command)
            logger.debug(
                "Querying %s for %s with filters %s",
                query.table_name,
                query.requested_column_names,
                query.value_filters,
            )
            scanner = TableScanner(database)
            if query.is_count:
                print(scanner.count(query.table_name, query.value_filters))
                return

            rows = scanner.scan(
                query.table_name, query.requested_column_names, query.value_filters
            )
            for row in rows:
                print("|".join(str(value) for value in row))
        else:
            raise LeafDBError(f"Missing or invalid command passed: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    logging.basicConfig(
        stream=sys.stderr,
        level=os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(args) < 2:
        print(USAGE, file=sys.stderr)
        return 1

    database_file_path, command = args[0], args[1]
    try:
        run_command(database_file_path, command)
    except LeafDBError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
