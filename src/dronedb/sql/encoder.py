"""
SQL value encoding for statement builders

Turns application values into SQL fragments. Plain values never reach the
SQL text: each one gets a fresh bind token and is carried in the bind-value
map that travels with the statement.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

from ..exceptions import InvalidIdentifierError, PreconditionError

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$#.]*$")


@dataclass(frozen=True)
class SQLFunction:
    """
    Raw SQL expression emitted verbatim

    Usage:
        gateway.insert({"CREATED_AT": SQLFunction("NOW()")})
    """
    statement: str

    def __str__(self) -> str:
        return self.statement


@dataclass
class Statement:
    """SQL text and the bind values it references"""
    sql: str
    bind_values: Dict[str, Any] = field(default_factory=dict)


def validate_identifier(name: str) -> str:
    """
    Check that a table or column name is a plain SQL identifier

    Raises:
        InvalidIdentifierError: If the name contains anything else
    """
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise InvalidIdentifierError(f"Invalid identifier: {name!r}")
    return name


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


class SQLValueEncoder:
    """
    Encodes values for one statement

    One encoder is created per statement so that tokens from the SET and
    WHERE parts of an UPDATE come from the same counter and never collide.
    """

    def __init__(
        self,
        placeholder: Callable[[str], str],
        prefix: str = "p",
        literal: Optional[Callable[[str], str]] = None
    ):
        """
        Initialize encoder

        Args:
            placeholder: Renders a token name in the backend parameter style
            prefix: Token name prefix
            literal: Escapes verbatim SQL text for the backend parameter
                style; text is emitted unchanged when omitted
        """
        self.placeholder = placeholder
        self.literal = literal or (lambda expression: expression)
        self.prefix = prefix
        self.bind_values: Dict[str, Any] = {}
        self._counter = 0

    def bind(self, value: Any) -> str:
        """Bind a value to a fresh token and return its placeholder"""
        self._counter += 1
        token = f"{self.prefix}{self._counter}"
        self.bind_values[token] = value
        return self.placeholder(token)

    def encode(self, value: Any) -> str:
        """
        Encode one value as a SQL fragment

        NULL and SQL functions are emitted literally, sequences become a
        parenthesized list with one placeholder per element, anything else
        is bound.
        """
        if value is None:
            return "NULL"
        if isinstance(value, SQLFunction):
            return self.literal(value.statement)
        if _is_sequence(value):
            return "(" + ", ".join(self.bind(item) for item in value) + ")"
        return self.bind(value)

    def predicate(self, column: str, value: Any) -> str:
        """Build one WHERE predicate"""
        validate_identifier(column)

        if value is None:
            return f"{column} IS NULL"
        if _is_sequence(value):
            if not value:
                return "1 = 0"
            return f"{column} IN {self.encode(value)}"
        return f"{column} = {self.encode(value)}"

    def assignment(self, column: str, value: Any) -> str:
        """Build one SET assignment"""
        validate_identifier(column)
        return f"{column} = {self.scalar(column, value)}"

    def scalar(self, column: str, value: Any) -> str:
        """Encode a value that must be a single SQL value"""
        if _is_sequence(value):
            raise PreconditionError(f"Column '{column}' cannot take a list of values")
        return self.encode(value)

    def where_clause(self, where: Dict[str, Any]) -> str:
        """Join predicates with AND; empty string when there are none"""
        predicates = [self.predicate(column, value) for column, value in where.items()]
        if not predicates:
            return ""
        return " WHERE " + " AND ".join(predicates)

    @staticmethod
    def columns(names: Iterable[str]) -> str:
        return ", ".join(validate_identifier(name) for name in names)
