"""
Query executor that runs parsed statements against storage and indexes.
"""

import logging
from typing import List

from .errors import (
    ColumnCountMismatchError, ColumnNotFoundError, ConstraintViolationError,
    IndexNameConflictError, TableExistsError,
)
from .index import IndexManager
from .statements import (
    Condition, CreateTable, Delete, Insert, JoinClause, QueryType, Select,
    Statement, Update,
)
from .storage import Session, Storage
from .types import Column, Row, find_column, format_value, loosely_equal

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 20


class QueryExecutor:
    """Executes parsed statements against the database."""

    def __init__(self, storage: Storage, indexes: IndexManager):
        self.storage = storage
        self.indexes = indexes

    def execute(self, statement: Statement, session: Session) -> str:
        """Execute a parsed statement and return the result text."""
        query_type = statement.type

        if query_type == QueryType.CREATE_TABLE:
            return self._execute_create_table(statement)
        elif query_type == QueryType.INSERT:
            return self._execute_insert(statement, session)
        elif query_type == QueryType.SELECT:
            return self._execute_select(statement, session)
        elif query_type == QueryType.UPDATE:
            return self._execute_update(statement, session)
        elif query_type == QueryType.DELETE:
            return self._execute_delete(statement, session)
        elif query_type == QueryType.BEGIN:
            return self.storage.begin(session)
        elif query_type == QueryType.COMMIT:
            return self.storage.commit(session, index_writer=self.indexes.write)
        elif query_type == QueryType.ROLLBACK:
            return self.storage.rollback(session)
        else:
            raise ValueError(f"Unsupported query type: {query_type}")

    def _execute_create_table(self, query: CreateTable) -> str:
        """Execute CREATE TABLE query."""
        table_name = query.table_name
        if self.storage.table_exists(table_name):
            raise TableExistsError(table_name)
        for col in query.columns:
            if col.is_constrained and self.indexes.index_path(table_name, col.name).exists():
                raise IndexNameConflictError(table_name, col.name)

        self.storage.save_schema(table_name, query.columns)
        self.storage.save_table_to_disk(table_name, [])

        # Empty index documents for primary key and unique columns
        for col in query.columns:
            if col.is_constrained:
                self.indexes.write(table_name, col.name, {})

        logger.info("Created table '%s' with %d columns", table_name, len(query.columns))
        return f"Table '{table_name}' created."

    def _execute_insert(self, query: Insert, session: Session) -> str:
        """Execute INSERT query."""
        table_name = query.table_name
        schema = self.storage.load_schema(table_name)

        if len(query.values) != len(schema):
            raise ColumnCountMismatchError()

        rows = self.storage.select_all(table_name, session)
        new_row: Row = {}
        for col, literal in zip(schema, query.values):
            value = col.coerce(literal)
            if col.is_constrained:
                for row in rows:
                    if col.name in row and loosely_equal(row[col.name], value):
                        raise ConstraintViolationError(col.name, format_value(value))
            new_row[col.name] = value

        rows.append(new_row)
        self.storage.save_rows(table_name, rows, session)
        self._refresh_indexes(table_name, schema, rows, session)

        return "Inserted 1 row."

    def _execute_select(self, query: Select, session: Session) -> str:
        """Execute SELECT query."""
        table_name = query.table_name
        schema = self.storage.load_schema(table_name)

        # An equality on an indexed column is answered from the index alone;
        # any JOIN in the same statement is not applied on this path.
        if query.where is not None:
            column = query.where.column.column
            if self._is_indexed(table_name, schema, column, session):
                value = self._comparison_value(query.where, [schema])
                logger.debug("Index lookup on %s.%s", table_name, column)
                rows = self.indexes.get(table_name, column, value, session)
                return self._format_result(rows)

        logger.debug("Full scan of %s", table_name)
        rows = self.storage.select_all(table_name, session)
        schemas = [schema]

        if query.join is not None:
            join_schema = self.storage.load_schema(query.join.table_name)
            rows = self._execute_join(rows, query.join, session)
            schemas.insert(0, join_schema)

        if query.where is not None:
            column = query.where.column.column
            value = self._comparison_value(query.where, schemas)
            rows = [row for row in rows
                    if column in row and loosely_equal(row[column], value)]

        return self._format_result(rows)

    def _execute_join(self, left_rows: List[Row], join: JoinClause,
                      session: Session) -> List[Row]:
        """Nested-loop inner join; right-hand values win on column name clashes."""
        right_rows = self.storage.select_all(join.table_name, session)

        left_ref, right_ref = join.left, join.right
        if left_ref.table == join.table_name and right_ref.table != join.table_name:
            left_ref, right_ref = right_ref, left_ref
        left_col, right_col = left_ref.column, right_ref.column

        result = []
        for left_row in left_rows:
            if left_col not in left_row:
                continue
            for right_row in right_rows:
                if right_col in right_row and loosely_equal(left_row[left_col], right_row[right_col]):
                    merged = dict(left_row)
                    merged.update(right_row)
                    result.append(merged)
        return result

    def _execute_update(self, query: Update, session: Session) -> str:
        """Execute UPDATE query."""
        table_name = query.table_name
        schema = self.storage.load_schema(table_name)

        set_col = self._require_column(table_name, schema, query.column)
        where_col = self._require_column(table_name, schema, query.where.column.column)
        new_value = set_col.coerce(query.value)
        where_value = where_col.coerce_for_comparison(query.where.value)

        rows = self.storage.select_all(table_name, session)
        count = 0
        for i, row in enumerate(rows):
            if where_col.name not in row or not loosely_equal(row[where_col.name], where_value):
                continue
            if set_col.is_constrained:
                for j, other in enumerate(rows):
                    if j != i and set_col.name in other and loosely_equal(other[set_col.name], new_value):
                        raise ConstraintViolationError(set_col.name, format_value(new_value))
            row[set_col.name] = new_value
            count += 1

        # Nothing above touched disk, so a violation leaves the table as it was
        if count > 0:
            self.storage.save_rows(table_name, rows, session)
            self._refresh_indexes(table_name, schema, rows, session)

        return f"Updated {count} rows."

    def _execute_delete(self, query: Delete, session: Session) -> str:
        """
        Execute DELETE query.

        Indexes are left as they are, so an indexed SELECT can still return
        deleted rows until the next INSERT or UPDATE on the table.
        """
        table_name = query.table_name
        schema = self.storage.load_schema(table_name)
        where_col = self._require_column(table_name, schema, query.where.column.column)
        where_value = where_col.coerce_for_comparison(query.where.value)

        kept = []
        count = 0
        for row in self.storage.select_all(table_name, session):
            if where_col.name in row and loosely_equal(row[where_col.name], where_value):
                count += 1
            else:
                kept.append(row)

        self.storage.save_rows(table_name, kept, session)
        return f"Deleted {count} rows."

    def _refresh_indexes(self, table_name: str, schema: List[Column], rows: List[Row],
                         session: Session) -> None:
        for col in schema:
            if self._is_indexed(table_name, schema, col.name, session):
                self.indexes.rebuild(table_name, col.name, rows, session)

    def _is_indexed(self, table_name: str, schema: List[Column], column: str,
                    session: Session) -> bool:
        """Only PRIMARY KEY and UNIQUE columns own an index file."""
        col = find_column(schema, column)
        return (col is not None and col.is_constrained
                and self.indexes.has_index(table_name, column, session))

    @staticmethod
    def _require_column(table_name: str, schema: List[Column], name: str) -> Column:
        col = find_column(schema, name)
        if col is None:
            raise ColumnNotFoundError(table_name, name)
        return col

    @staticmethod
    def _comparison_value(condition: Condition, schemas: List[List[Column]]):
        """Coerce a predicate literal through the first schema that has the column."""
        for schema in schemas:
            col = find_column(schema, condition.column.column)
            if col is not None:
                return col.coerce_for_comparison(condition.value)
        return condition.value

    @staticmethod
    def _format_result(rows: List[Row]) -> str:
        if not rows:
            return "Empty set."
        headers = list(rows[0].keys())
        lines = [" | ".join(headers), SEPARATOR]
        for row in rows:
            lines.append(" | ".join(format_value(row.get(h, "")) for h in headers))
        return "\n".join(lines)
