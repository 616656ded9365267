"""
Core data types and constants for the RDBMS.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .errors import ColumnTypeError, QuerySyntaxError

Value = Union[int, bool, str]
Row = Dict[str, Value]

TRUTHY_STRINGS = frozenset({"true", "1", "yes", "on"})


class DataType(Enum):
    """Supported SQL data types."""
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    TEXT = "TEXT"

    @classmethod
    def from_name(cls, name: str) -> "DataType":
        """Resolve a type name as written in CREATE TABLE, aliases included."""
        dtype = TYPE_ALIASES.get(name.upper())
        if dtype is None:
            raise QuerySyntaxError(f"Unsupported column type '{name}'")
        return dtype


TYPE_ALIASES = {
    "INT": DataType.INTEGER,
    "INTEGER": DataType.INTEGER,
    "BOOL": DataType.BOOLEAN,
    "BOOLEAN": DataType.BOOLEAN,
    "TEXT": DataType.TEXT,
    "VARCHAR": DataType.TEXT,
    "CHAR": DataType.TEXT,
    "STRING": DataType.TEXT,
}


def parse_integer(text: str) -> Optional[int]:
    """Return the integer a numeric literal denotes, or None if it is not one."""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isfinite(number) and number.is_integer():
        return int(number)
    return None


def parse_boolean(text: str) -> bool:
    """Truthy-string rule: true/1/yes/on (any case) are True, anything else False."""
    return text.strip().lower() in TRUTHY_STRINGS


def loose_key(value: Any) -> str:
    """
    Normalise a value to the string form used for equality checks.

    Values of different Python types compare equal when their normalised
    text matches, e.g. 1 and "1". This is also the key used inside index
    documents, which are JSON objects and therefore string-keyed.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def loosely_equal(left: Any, right: Any) -> bool:
    return loose_key(left) == loose_key(right)


def format_value(value: Any) -> str:
    """Render a stored value for result tables."""
    return loose_key(value)


@dataclass
class Column:
    """Represents a table column definition."""
    name: str
    dtype: DataType
    is_primary: bool = False
    is_unique: bool = False

    @property
    def is_constrained(self) -> bool:
        """PRIMARY KEY and UNIQUE columns both get uniqueness checks and an index."""
        return self.is_primary or self.is_unique

    def coerce(self, literal: str) -> Value:
        """
        Convert literal text from a statement into a stored value.

        Raises:
            ColumnTypeError: If an INTEGER column receives a non-integral literal
        """
        if self.dtype == DataType.INTEGER:
            number = parse_integer(literal)
            if number is None:
                raise ColumnTypeError(f"Type Error: Column '{self.name}' must be INTEGER")
            return number
        elif self.dtype == DataType.BOOLEAN:
            return parse_boolean(literal)
        return literal.strip()

    def coerce_for_comparison(self, literal: str) -> Value:
        """Like coerce(), but a literal that does not fit stays text instead of failing."""
        try:
            return self.coerce(literal)
        except ColumnTypeError:
            return literal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.dtype.value,
            'primary_key': self.is_primary,
            'unique': self.is_unique,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            name=data['name'],
            dtype=DataType(data['type']),
            is_primary=bool(data.get('primary_key', False)),
            is_unique=bool(data.get('unique', False)),
        )


def find_column(schema: List[Column], name: str) -> Optional[Column]:
    """Look up a column definition by name."""
    return next((col for col in schema if col.name == name), None)
