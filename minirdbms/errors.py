"""
Exception types raised by the database core.

Every error derives from DatabaseError, which is itself a ValueError so
callers that only care about "bad query" can keep catching ValueError.
"""


class DatabaseError(ValueError):
    """Base class for all errors raised while running a command."""


class QuerySyntaxError(DatabaseError):
    """The command text does not match the statement grammar."""


class UnknownCommandError(QuerySyntaxError):
    """The leading keyword is not a supported statement."""

    def __init__(self, message: str = "Unknown command."):
        super().__init__(message)


class TableNotFoundError(DatabaseError):
    """Referenced table has no schema on disk."""

    def __init__(self, table_name: str):
        super().__init__(f"Table '{table_name}' does not exist.")
        self.table_name = table_name


class TableExistsError(DatabaseError):
    """CREATE TABLE on a name that is already taken."""

    def __init__(self, table_name: str):
        super().__init__(f"Table '{table_name}' already exists.")
        self.table_name = table_name


class ColumnNotFoundError(DatabaseError):
    """Referenced column is not part of the table schema."""

    def __init__(self, table_name: str, column_name: str):
        super().__init__(f"Column '{column_name}' does not exist in table '{table_name}'.")
        self.table_name = table_name
        self.column_name = column_name


class ColumnCountMismatchError(DatabaseError):
    """INSERT supplied a different number of values than the schema has columns."""

    def __init__(self, message: str = "Column count mismatch."):
        super().__init__(message)


class ColumnTypeError(DatabaseError):
    """A literal cannot be stored in a column of the declared type."""


class ConstraintViolationError(DatabaseError):
    """A PRIMARY KEY or UNIQUE column would hold a duplicate value."""

    def __init__(self, column_name: str, value: str):
        super().__init__(
            f"Constraint Violation: '{column_name}' must be unique. Value '{value}' exists."
        )
        self.column_name = column_name
        self.value = value


class TransactionStateError(DatabaseError):
    """BEGIN while a transaction is active, or COMMIT/ROLLBACK without one."""


class IndexNameConflictError(DatabaseError):
    """A new table's index file name is already taken by another table's index."""

    def __init__(self, table_name: str, column_name: str):
        super().__init__(
            f"Index '{table_name}_{column_name}' conflicts with an existing index of another table."
        )
        self.table_name = table_name
        self.column_name = column_name
