"""
File-based storage for tables and schemas.

Schemas live in ``<data_dir>/schemas/<table>.json`` and row sets in
``<data_dir>/tables/<table>.json``. Row-set writes go through a temporary
file that is renamed over the destination, so readers never see a
half-written document.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .errors import TableNotFoundError, TransactionStateError
from .types import Column, Row

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, data: Any) -> None:
    """Serialize data to path via a temp file and an atomic rename."""
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp_path, path)
    logger.debug("Wrote %s", path)


def read_json(path: Path) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


@dataclass
class Session:
    """
    Transaction state of one client.

    While active, row sets and index documents written through the
    session are held here instead of on disk.
    """
    active: bool = False
    staged_rows: Dict[str, List[Row]] = field(default_factory=dict)
    staged_indexes: Dict[Tuple[str, str], Dict[str, List[Row]]] = field(default_factory=dict)

    def clear(self) -> None:
        self.active = False
        self.staged_rows = {}
        self.staged_indexes = {}


class Storage:
    """Handles disk persistence for tables and schemas."""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.schema_dir = self.data_dir / "schemas"
        self.table_dir = self.data_dir / "tables"
        self.schema_dir.mkdir(parents=True, exist_ok=True)
        self.table_dir.mkdir(parents=True, exist_ok=True)

    # ---- schemas ----

    def save_schema(self, table_name: str, columns: List[Column]) -> None:
        """Save table schema as JSON."""
        write_json_atomic(self.schema_dir / f"{table_name}.json",
                          [col.to_dict() for col in columns])

    def load_schema(self, table_name: str) -> List[Column]:
        """Load table schema, raising TableNotFoundError if there is none."""
        schema_file = self.schema_dir / f"{table_name}.json"
        if not schema_file.exists():
            raise TableNotFoundError(table_name)
        return [Column.from_dict(col) for col in read_json(schema_file)]

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists on disk."""
        return (self.schema_dir / f"{table_name}.json").exists()

    def list_tables(self) -> List[str]:
        """List all tables in the database."""
        return sorted(path.stem for path in self.schema_dir.glob("*.json"))

    # ---- row sets ----

    def save_table_to_disk(self, table_name: str, rows: List[Row]) -> None:
        """Write a row set straight to disk, bypassing any transaction."""
        write_json_atomic(self.table_dir / f"{table_name}.json", rows)

    def load_table_from_disk(self, table_name: str) -> List[Row]:
        data_file = self.table_dir / f"{table_name}.json"
        if not data_file.exists():
            return []
        return read_json(data_file)

    def select_all(self, table_name: str, session: Session) -> List[Row]:
        """Return the rows visible to session: staged if written this transaction, else disk."""
        if session.active and table_name in session.staged_rows:
            return [dict(row) for row in session.staged_rows[table_name]]
        return self.load_table_from_disk(table_name)

    def save_rows(self, table_name: str, rows: List[Row], session: Session) -> None:
        """Persist a full row set, or stage it when a transaction is active."""
        if session.active:
            session.staged_rows[table_name] = [dict(row) for row in rows]
            logger.debug("Staged %d rows for '%s'", len(rows), table_name)
        else:
            self.save_table_to_disk(table_name, rows)

    # ---- transactions ----

    def begin(self, session: Session) -> str:
        if session.active:
            raise TransactionStateError("Transaction already active.")
        session.clear()
        session.active = True
        logger.info("Transaction started")
        return "Transaction Started"

    def commit(self, session: Session, index_writer=None) -> str:
        """
        Flush every staged table to disk.

        Tables are written one after another; a failure part way through
        leaves the earlier tables committed. index_writer, when given, is
        called as index_writer(table, column, document) for staged indexes.
        """
        if not session.active:
            raise TransactionStateError("No active transaction.")
        for table_name, rows in session.staged_rows.items():
            self.save_table_to_disk(table_name, rows)
        if index_writer is not None:
            for (table_name, column), document in session.staged_indexes.items():
                index_writer(table_name, column, document)
        logger.info("Transaction committed (%d tables)", len(session.staged_rows))
        session.clear()
        return "Transaction Committed"

    def rollback(self, session: Session) -> str:
        if not session.active:
            raise TransactionStateError("No active transaction.")
        logger.info("Transaction rolled back (%d tables discarded)", len(session.staged_rows))
        session.clear()
        return "Transaction Rolled Back"
