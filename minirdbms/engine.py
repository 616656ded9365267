"""
Main database engine class.
"""

import logging
from typing import Any, Dict, List, Optional

from .config import EngineConfig
from .errors import DatabaseError
from .executor import QueryExecutor
from .index import IndexManager
from .parser import QueryParser
from .storage import Session, Storage

logger = logging.getLogger(__name__)


class DatabaseEngine:
    """Main database engine interface."""

    def __init__(self, data_dir: Optional[str] = None, config: Optional[EngineConfig] = None):
        if config is None:
            config = EngineConfig() if data_dir is None else EngineConfig(data_dir=data_dir)
        elif data_dir is not None:
            config = config.model_copy(update={'data_dir': data_dir})
        self.config = config
        self.storage = Storage(str(config.data_dir))
        self.indexes = IndexManager(str(config.data_dir))
        self.parser = QueryParser()
        self.executor = QueryExecutor(self.storage, self.indexes)
        self.session = Session()

    def new_session(self) -> Session:
        """Create an independent transaction handle for another caller."""
        return Session()

    def query(self, command: str, session: Optional[Session] = None) -> str:
        """
        Execute one command and return its result text.

        Never raises: every failure comes back as ``"Error: <message>"``.

        Args:
            command: SQL-like command string
            session: Transaction handle; defaults to the engine's own session
        """
        if session is None:
            session = self.session
        try:
            statement = self.parser.parse(command)
            return self.executor.execute(statement, session)
        except DatabaseError as e:
            logger.warning("Rejected %r: %s", command, e)
            return f"Error: {e}"
        except Exception as e:
            logger.exception("Unexpected failure running %r", command)
            return f"Error: {e}"

    def list_tables(self) -> List[str]:
        """List all tables in the database."""
        return self.storage.list_tables()

    def get_table_info(self, table_name: str) -> Dict[str, Any]:
        """
        Get information about a table.

        Row count reflects what the default session currently sees.

        Raises:
            TableNotFoundError: If the table has no schema
        """
        schema = self.storage.load_schema(table_name)
        return {
            'schema': [
                {
                    'name': col.name,
                    'type': col.dtype.value,
                    'is_primary': col.is_primary,
                    'is_unique': col.is_unique
                }
                for col in schema
            ],
            'row_count': len(self.storage.select_all(table_name, self.session))
        }
