"""
Typed representation of parsed statements.

The parser turns a command line into exactly one of the statement classes
below; the executor dispatches on ``Statement.type``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional

from .types import Column


class QueryType(Enum):
    """Types of SQL queries we support."""
    CREATE_TABLE = "CREATE_TABLE"
    INSERT = "INSERT"
    SELECT = "SELECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    BEGIN = "BEGIN"
    COMMIT = "COMMIT"
    ROLLBACK = "ROLLBACK"


class Statement:
    """Base class for all statements."""
    type: ClassVar[QueryType]


@dataclass(frozen=True)
class ColumnRef:
    """Column reference, optionally qualified as ``table.column``."""
    column: str
    table: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.table}.{self.column}" if self.table else self.column


@dataclass(frozen=True)
class Condition:
    """Single equality predicate ``column = literal``; the literal is kept as text."""
    column: ColumnRef
    value: str


@dataclass(frozen=True)
class JoinClause:
    """``JOIN table ON left = right``."""
    table_name: str
    left: ColumnRef
    right: ColumnRef


@dataclass(frozen=True)
class CreateTable(Statement):
    type: ClassVar[QueryType] = QueryType.CREATE_TABLE
    table_name: str
    columns: List[Column]


@dataclass(frozen=True)
class Insert(Statement):
    type: ClassVar[QueryType] = QueryType.INSERT
    table_name: str
    values: List[str]


@dataclass(frozen=True)
class Select(Statement):
    """The projection is recorded but every column is always returned."""
    type: ClassVar[QueryType] = QueryType.SELECT
    table_name: str
    projection: List[str] = field(default_factory=lambda: ["*"])
    join: Optional[JoinClause] = None
    where: Optional[Condition] = None


@dataclass(frozen=True)
class Update(Statement):
    type: ClassVar[QueryType] = QueryType.UPDATE
    table_name: str
    column: str
    value: str
    where: Condition


@dataclass(frozen=True)
class Delete(Statement):
    type: ClassVar[QueryType] = QueryType.DELETE
    table_name: str
    where: Condition


@dataclass(frozen=True)
class Begin(Statement):
    type: ClassVar[QueryType] = QueryType.BEGIN


@dataclass(frozen=True)
class Commit(Statement):
    type: ClassVar[QueryType] = QueryType.COMMIT


@dataclass(frozen=True)
class Rollback(Statement):
    type: ClassVar[QueryType] = QueryType.ROLLBACK
