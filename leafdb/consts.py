# https://www.sqlite.org/fileformat.html#the_database_header
DB_FILE_HEADER_SIZE = 100
DB_MAGIC_STRING = b"SQLite format 3\x00"
PAGE_SIZE_OFFSET = 16
TEXT_ENCODING_OFFSET = 56
UTF8_TEXT_ENCODING = 1
MAX_PAGE_SIZE = 65536

LEAF_PAGE_HEADER_SIZE = 8
CELL_POINTER_SIZE = 2

# https://www.sqlite.org/fileformat.html#varint
MAX_VARINT_BYTES = 9
LAST_SEVEN_BITS_MASK = 0b_0111_1111
CONTINUATION_BIT_MASK = 0b_1000_0000

# https://www.sqlite.org/fileformat.html#storage_of_the_sql_database_schema
# Each schema row is (type, name, tbl_name, rootpage, sql)
SCHEMA_TABLE_NAME_COLUMN = 2
SCHEMA_ROOTPAGE_COLUMN = 3
SCHEMA_SQL_COLUMN = 4

TABLE_CREATION_REGEX = (
    r"(?is)^\s*create\s+(?:temp(?:orary)?\s+)?table\s+(?:if\s+not\s+exists\s+)?"
    r"(?P<table>\"[^\"]+\"|`[^`]+`|\[[^\]]+\]|\w+)\s*"
    r"\((?P<body>.*)\)\s*"
    r"(?:(?:without\s+rowid|strict)(?:\s*,\s*(?:without\s+rowid|strict))*\s*)?;?\s*$"
)
COLUMN_DEFINITION_REGEX = (
    r"(?s)^\s*(?P<name>\"[^\"]+\"|`[^`]+`|\[[^\]]+\]|\w+)(?P<rest>.*)$"
)
COLUMN_TYPE_WORD_REGEX = r"\w+(?:\s*\([^)]*\))?"

# Words that end a column's declared type and start its constraints
COLUMN_CONSTRAINT_KEYWORDS = {
    "CONSTRAINT",
    "PRIMARY",
    "NOT",
    "NULL",
    "UNIQUE",
    "CHECK",
    "DEFAULT",
    "COLLATE",
    "REFERENCES",
    "GENERATED",
    "AS",
    "AUTOINCREMENT",
}
# Lines inside CREATE TABLE (...) that are table constraints, not columns
TABLE_CONSTRAINT_KEYWORDS = {"CONSTRAINT", "PRIMARY", "UNIQUE", "CHECK", "FOREIGN"}

LOG_LEVEL_ENV_VAR = "LEAFDB_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
