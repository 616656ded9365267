"""
Covering indexes for PRIMARY KEY and UNIQUE columns.

Each index is a JSON document ``{value: [row, ...]}`` stored as
``<data_dir>/indexes/<table>_<column>.json``. Entries hold complete rows,
so a lookup never has to go back to the table file. There is no
incremental maintenance: every write replaces the whole document.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from .storage import Session, read_json, write_json_atomic
from .types import Row, loose_key

logger = logging.getLogger(__name__)

IndexDocument = Dict[str, List[Row]]


def build_index(column: str, rows: List[Row]) -> IndexDocument:
    """Group rows by the normalised value of column, keeping row order."""
    document: IndexDocument = {}
    for row in rows:
        if column in row:
            document.setdefault(loose_key(row[column]), []).append(dict(row))
    return document


class IndexManager:
    """Reads and rebuilds the per-column index documents of all tables."""

    def __init__(self, data_dir: str = "data"):
        self.index_dir = Path(data_dir) / "indexes"
        self.index_dir.mkdir(parents=True, exist_ok=True)

    def index_path(self, table_name: str, column: str) -> Path:
        return self.index_dir / f"{table_name}_{column}.json"

    def has_index(self, table_name: str, column: str, session: Session = None) -> bool:
        if session is not None and session.active and (table_name, column) in session.staged_indexes:
            return True
        return self.index_path(table_name, column).exists()

    def get(self, table_name: str, column: str, value: Any, session: Session = None) -> List[Row]:
        """Return the rows stored under value, or an empty list."""
        document = self._load(table_name, column, session)
        return [dict(row) for row in document.get(loose_key(value), [])]

    def rebuild(self, table_name: str, column: str, rows: List[Row], session: Session = None) -> None:
        """Recompute the index from rows and replace the stored document."""
        document = build_index(column, rows)
        if session is not None and session.active:
            session.staged_indexes[(table_name, column)] = document
            logger.debug("Staged index %s_%s (%d keys)", table_name, column, len(document))
        else:
            self.write(table_name, column, document)

    def write(self, table_name: str, column: str, document: IndexDocument) -> None:
        write_json_atomic(self.index_path(table_name, column), document)

    def _load(self, table_name: str, column: str, session: Session = None) -> IndexDocument:
        if session is not None and session.active:
            staged = session.staged_indexes.get((table_name, column))
            if staged is not None:
                return staged
        path = self.index_path(table_name, column)
        if not path.exists():
            return {}
        return read_json(path)
