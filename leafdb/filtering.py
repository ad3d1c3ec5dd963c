import operator
from typing import Callable, Optional, Union

from leafdb.exceptions import QueryParseError
from leafdb.rows import Blob, Float, Integer, Text, TypedValue

Literal = Union[int, float, str]


class ValueFilter:
    """
    One `column <operator> literal` condition of a WHERE clause.

    Conditions of a query are joined by AND. A NULL column never matches,
    numeric columns are compared numerically and text columns as exact strings.
    """

    column: str
    operator_symbol: str
    operator: Callable[[object, object], bool]  # some operation exported by the operator module
    threshold: Literal

    def __init__(self, column: str, operator: str, threshold: Literal):
        self.column = column
        self.operator_symbol = operator
        self.operator = ValueFilter._string_to_operator(operator)
        self.threshold = threshold

    def __call__(self, value: TypedValue) -> bool:
        if isinstance(value, (Integer, Float)):
            threshold = ValueFilter._as_number(self.threshold)
            if threshold is None:
                return False
            return self.operator(value.value, threshold)
        elif isinstance(value, Text):
            return self.operator(value.value, str(self.threshold))
        elif isinstance(value, Blob):
            return self.operator(value.data, str(self.threshold).encode("utf-8"))

        # NULL (and reserved values) compare false against everything
        return False

    def __repr__(self) -> str:
        return f"ValueFilter({self.column!r} {self.operator_symbol} {self.threshold!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, ValueFilter):
            return NotImplemented
        return (self.column, self.operator_symbol, self.threshold) == (
            other.column,
            other.operator_symbol,
            other.threshold,
        )

    @staticmethod
    def _as_number(threshold: Literal) -> Optional[Union[int, float]]:
        if isinstance(threshold, (int, float)):
            return threshold
        try:
            return int(threshold)
        except ValueError:
            pass
        try:
            return float(threshold)
        except ValueError:
            return None

    @staticmethod
    def _string_to_operator(operator_str: str):
        match operator_str:
            case "=" | "==":
                return operator.eq
            case "!=" | "<>":
                return operator.ne
            case "<":
                return operator.lt
            case "<=":
                return operator.le
            case ">":
                return operator.gt
            case ">=":
                return operator.ge
            case _:
                raise QueryParseError(f"Operator '{operator_str}' is not yet supported")
