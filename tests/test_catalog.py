import pytest

from conftest import build_cell, build_leaf_page, schema_cell
from leafdb.catalog import SchemaCatalog
from leafdb.database import Database
from leafdb.exceptions import (
    ColumnNotFoundError,
    SchemaInconsistencyError,
    TableNotFoundError,
)
from leafdb.pages import Page
from leafdb.queries import ColumnDef


def catalog_from_cells(*cells):
    return SchemaCatalog.from_page(Page.from_bytes(0, build_leaf_page(list(cells), page_index=0)))


def test_schema_round_trip():
    catalog = catalog_from_cells(schema_cell(1, "t", 2, "CREATE TABLE t (a, b)"))

    entry = catalog.entry("t")
    assert entry.root_page == 2
    assert catalog.root_page("t") == 2
    assert entry.column_names == ["a", "b"]
    assert entry.columns == (ColumnDef("a"), ColumnDef("b"))


def test_table_names_keep_cell_order():
    catalog = catalog_from_cells(
        schema_cell(1, "zebra", 2, "CREATE TABLE zebra (a)"),
        schema_cell(2, "apple", 3, "CREATE TABLE apple (a)"),
    )
    assert catalog.table_names == ["zebra", "apple"]
    assert len(catalog) == 2
    assert "apple" in catalog


def test_non_table_objects_are_skipped():
    catalog = catalog_from_cells(
        schema_cell(1, "t", 2, "CREATE TABLE t (a)"),
        schema_cell(2, "idx_t_a", 3, "CREATE INDEX idx_t_a ON t (a)", "index", "t"),
        schema_cell(3, "sqlite_autoindex_t_1", 4, None, "index", "t"),
    )
    assert catalog.table_names == ["t"]


def test_table_name_mismatch_is_rejected():
    with pytest.raises(SchemaInconsistencyError):
        catalog_from_cells(
            schema_cell(1, "apples", 2, "CREATE TABLE pears (a)", table_name="apples")
        )


def test_duplicate_table_is_rejected():
    with pytest.raises(SchemaInconsistencyError):
        catalog_from_cells(
            schema_cell(1, "t", 2, "CREATE TABLE t (a)"),
            schema_cell(2, "t", 3, "CREATE TABLE t (b)"),
        )


def test_invalid_root_page_is_rejected():
    with pytest.raises(SchemaInconsistencyError):
        catalog_from_cells(schema_cell(1, "t", "two", "CREATE TABLE t (a)"))


def test_short_schema_row_is_rejected():
    with pytest.raises(SchemaInconsistencyError):
        catalog_from_cells(build_cell(1, ["table", "t", "t"]))


def test_unknown_table_and_column():
    catalog = catalog_from_cells(schema_cell(1, "t", 2, "CREATE TABLE t (a, b)"))

    with pytest.raises(TableNotFoundError):
        catalog.entry("missing")
    with pytest.raises(TableNotFoundError):
        catalog.root_page("missing")
    with pytest.raises(ColumnNotFoundError):
        catalog.entry("t").column_index("A")
    assert catalog.entry("t").column_index("b") == 1


def test_catalog_from_sqlite_file(apples_db):
    with Database(apples_db) as database:
        catalog = database.catalog

        assert catalog.table_names == ["apples", "oranges"]
        assert catalog.entry("apples").columns == (
            ColumnDef("id", "integer"),
            ColumnDef("name", "text"),
            ColumnDef("color", "text"),
        )
        assert catalog.root_page("apples") == 2
        assert catalog.root_page("oranges") == 3
        # built once per session
        assert database.catalog is catalog


def test_strict_table_is_cataloged():
    catalog = catalog_from_cells(
        schema_cell(1, "t", 2, "CREATE TABLE t (a integer, b text) STRICT")
    )
    assert catalog.entry("t").column_names == ["a", "b"]
