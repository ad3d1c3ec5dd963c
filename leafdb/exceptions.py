class LeafDBError(Exception):
    """Base class for every error raised while reading a database file."""

    pass


class DatabaseIOError(LeafDBError):
    """Raised when the database file cannot be opened, sought or fully read."""

    pass


class InvalidDatabaseHeaderError(LeafDBError):
    """Raised when the 100 byte file header is truncated or not an SQLite header."""

    pass


class UnsupportedTextEncodingError(LeafDBError):
    """Raised when the header declares a text encoding other than UTF-8."""

    pass


class UnsupportedPageTypeError(LeafDBError):
    """Raised for interior pages, unknown page types, or a page of the wrong kind."""

    pass


class MalformedRecordError(LeafDBError):
    """Raised when a cell's record header or body cannot be decoded."""

    pass


class SchemaInconsistencyError(LeafDBError):
    """Raised when a schema row disagrees with its own CREATE TABLE text."""

    pass


class TableNotFoundError(LeafDBError):
    pass


class ColumnNotFoundError(LeafDBError):
    pass


class ParseError(LeafDBError):
    """Base class for SQL fragment parsing errors"""

    pass


class DdlParseError(ParseError):
    pass


class QueryParseError(ParseError):
    pass
