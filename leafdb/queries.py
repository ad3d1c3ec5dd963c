from __future__ import annotations
import re
from dataclasses import dataclass

import sqlparse
from sqlparse.sql import (
    Comparison,
    Function,
    Identifier,
    IdentifierList,
    Statement,
    Where,
)
from sqlparse.tokens import Keyword, Number, Punctuation, String, Wildcard

from leafdb.consts import (
    COLUMN_CONSTRAINT_KEYWORDS,
    COLUMN_DEFINITION_REGEX,
    COLUMN_TYPE_WORD_REGEX,
    TABLE_CONSTRAINT_KEYWORDS,
    TABLE_CREATION_REGEX,
)
from leafdb.exceptions import DdlParseError, QueryParseError
from leafdb.filtering import Literal, ValueFilter

from typing import List, Optional, Tuple

COUNT_STAR = "count(*)"


@dataclass(frozen=True)
class ColumnDef:
    name: str
    type: Optional[str] = None


@dataclass(frozen=True)
class CreateTableStatement:
    table_name: str
    columns: Tuple[ColumnDef, ...]


def parse_create_table(sql_creation_query: str) -> CreateTableStatement:
    """
    Creation query will look like

    '''CREATE TABLE apples
    (
        id integer primary key autoincrement,
        name text,
        color text
    )'''

    SQLparse is not well fit for parsing the creation query. As such,
    we opt for regex matching the column descriptions and keeping the
    column names and their declared types, dropping constraints.
    """
    match = re.search(TABLE_CREATION_REGEX, sql_creation_query)
    if not match:
        raise DdlParseError(f"Not a CREATE TABLE statement: {sql_creation_query!r}")

    table_name = _unquote(match.group("table"))

    columns = []
    for definition in _split_definitions(match.group("body")):
        first_word = re.match(r"\w+", definition)
        if first_word and first_word.group(0).upper() in TABLE_CONSTRAINT_KEYWORDS:
            continue

        column_match = re.match(COLUMN_DEFINITION_REGEX, definition)
        if not column_match:
            raise DdlParseError(f"Invalid column definition: {definition!r}")

        columns.append(
            ColumnDef(
                name=_unquote(column_match.group("name")),
                type=_declared_type(column_match.group("rest")),
            )
        )

    if not columns:
        raise DdlParseError(f"Table {table_name} declares no columns")

    return CreateTableStatement(table_name=table_name, columns=tuple(columns))


def _split_definitions(body: str) -> List[str]:
    # split on top level commas only, "decimal(10, 2)" is a single type
    definitions = []
    current = []
    depth = 0
    closing_quote = None
    for char in body:
        if closing_quote:
            if char == closing_quote:
                closing_quote = None
        elif char in "\"'`":
            closing_quote = char
        elif char == "[":
            closing_quote = "]"
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            definitions.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    definitions.append("".join(current).strip())
    return [definition for definition in definitions if definition]


def _declared_type(rest: str) -> Optional[str]:
    words = []
    for word in re.findall(COLUMN_TYPE_WORD_REGEX, rest):
        if re.match(r"\w+", word).group(0).upper() in COLUMN_CONSTRAINT_KEYWORDS:
            break
        words.append(word)

    return " ".join(words) or None


def _unquote(identifier: str) -> str:
    if identifier[:1] in "\"`[" and len(identifier) >= 2:
        return identifier[1:-1]
    return identifier


class Query:
    table_name: str
    value_filters: List[ValueFilter]
    requested_column_names: List[str]

    def __init__(
        self,
        table_name: str,
        value_filters: List[ValueFilter],
        requested_column_names: List[str],
    ):
        self.table_name = table_name
        self.value_filters = value_filters
        self.requested_column_names = requested_column_names

    @property
    def is_count(self) -> bool:
        return self.requested_column_names == [COUNT_STAR]

    @staticmethod
    def parse_query(query_str: str) -> Query:
        statements = sqlparse.parse(query_str)
        if not statements or statements[0].get_type() != "SELECT":
            raise QueryParseError("Only SELECT queries are supported")

        statement = statements[0]
        table_name = Query._extract_table_name_from_query(statement)
        value_filters = Query._extract_value_filters_from_query(statement)
        requested_column_names = Query._extract_columns_names_from_query(statement)

        if not requested_column_names:
            raise QueryParseError(f"No columns requested in query {query_str!r}")
        if COUNT_STAR in requested_column_names and len(requested_column_names) > 1:
            raise QueryParseError("COUNT(*) cannot be mixed with other columns")

        return Query(table_name, value_filters, requested_column_names)

    @staticmethod
    def _extract_table_name_from_query(statement: Statement) -> str:
        table_name = None
        found_from = False
        for token in statement.tokens:
            if token.ttype is Keyword and token.normalized == "FROM":
                found_from = True
            elif found_from and table_name is None and isinstance(token, Identifier):
                table_name = token.get_real_name()
            elif table_name is not None:
                # only a WHERE clause may follow the table
                if token.is_whitespace or (token.ttype is Punctuation and token.value == ";"):
                    continue
                if not isinstance(token, Where):
                    raise QueryParseError(
                        f"Unsupported clause {token.value!r}, only WHERE may follow the table"
                    )

        if table_name is not None:
            return table_name

        raise QueryParseError(f"Failed to extract table name from query {statement}")

    @staticmethod
    def _extract_value_filters_from_query(statement: Statement) -> List[ValueFilter]:
        where_clause = next(
            (token for token in statement.tokens if isinstance(token, Where)), None
        )
        if not where_clause:
            return []

        value_filters = []
        for token in where_clause.tokens:
            if token.is_whitespace or token.ttype is Punctuation:
                continue
            elif isinstance(token, Comparison):
                value_filters.append(Query._comparison_to_value_filter(token))
            elif token.ttype is Keyword and token.normalized in ("WHERE", "AND"):
                continue
            else:
                raise QueryParseError(
                    f"Unsupported WHERE clause element {token.value!r}, only AND-ed comparisons are supported"
                )

        if not value_filters:
            raise QueryParseError(f"No conditions found in {where_clause.value!r}")

        return value_filters

    @staticmethod
    def _comparison_to_value_filter(comparison: Comparison) -> ValueFilter:
        comparison_parts = [t for t in comparison.tokens if not t.is_whitespace]
        if len(comparison_parts) != 3:
            raise QueryParseError(f"Unsupported condition {comparison.value!r}")

        column_token, operator_token, value_token = comparison_parts
        if isinstance(column_token, Identifier):
            column = column_token.get_real_name()
        else:
            column = _unquote(column_token.value.strip())

        return ValueFilter(
            column, operator_token.value.strip(), Query._literal_value(value_token)
        )

    @staticmethod
    def _literal_value(token) -> Literal:
        if token.ttype in Number.Integer:
            return int(token.value)
        elif token.ttype in Number.Float:
            return float(token.value)
        elif token.ttype in String.Single:
            return token.value[1:-1].replace("''", "'")

        # double quoted literals are parsed as identifiers
        return _unquote(token.value.strip())

    @staticmethod
    def _extract_columns_names_from_query(statement: Statement) -> List[str]:
        column_names = []

        for token in statement.tokens:
            if token.ttype is Keyword and token.normalized == "FROM":
                break
            elif isinstance(token, IdentifierList):
                for identifier in token.get_identifiers():
                    column_names.append(Query._column_name(identifier))
            elif isinstance(token, (Identifier, Function)) or token.ttype is Wildcard:
                column_names.append(Query._column_name(token))
            elif token.ttype is Keyword and token.normalized in ("DISTINCT", "ALL"):
                raise QueryParseError(f"SELECT {token.normalized} is not supported")
            elif token.ttype is Keyword:
                column_names.append(Query._column_name(token))

        return column_names

    @staticmethod
    def _column_name(token) -> str:
        if token.ttype is Wildcard:
            return "*"

        function = token if isinstance(token, Function) else None
        if isinstance(token, Identifier):
            function = next((t for t in token.tokens if isinstance(t, Function)), None)
        if function is not None:
            if function.get_name().lower() == "count":
                if re.sub(r"\s+", "", function.value).lower() != COUNT_STAR:
                    raise QueryParseError(f"Only COUNT(*) is supported, got {function.value}")
                return COUNT_STAR
            raise QueryParseError(f"Function {function.get_name()} is not supported")

        if isinstance(token, Identifier):
            return token.get_real_name()
        # column names that sqlparse mistakes for keywords
        return _unquote(token.value.strip())
