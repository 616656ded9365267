"""
Interactive REPL for the database.
"""

import argparse
import logging
from typing import Callable, Optional

from pydantic import ValidationError

from .config import EngineConfig
from .engine import DatabaseEngine

try:
    import readline
except ImportError:  # Windows without pyreadline: no line history
    readline = None

logger = logging.getLogger(__name__)

HELP_TEXT = """
Available commands:
  exit, quit           - Exit the REPL
  help                 - Show this help
  tables, .tables      - List all tables

SQL-like queries:
  CREATE TABLE         - Create a new table
  INSERT INTO          - Insert a row into a table
  SELECT               - Query data from tables
  UPDATE               - Update data in a table
  DELETE FROM          - Delete data from a table
  BEGIN / COMMIT / ROLLBACK - Transaction control

Examples:
  CREATE TABLE users (id INT PRIMARY KEY, name TEXT, active BOOLEAN)
  INSERT INTO users VALUES (1, 'Alice', true)
  SELECT * FROM users WHERE id = 1
  SELECT * FROM users JOIN orders ON users.id = orders.user_id
  UPDATE users SET name = 'Bob' WHERE id = 1
  DELETE FROM users WHERE id = 1
"""


class DatabaseREPL:
    """Command-line REPL for interacting with the database."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 input_func: Optional[Callable[[str], str]] = None):
        self.config = config or EngineConfig()
        self.engine = DatabaseEngine(config=self.config)
        self.input_func = input_func or input
        self.running = False

    def run(self):
        """Run the REPL until exit, quit or end of input."""
        self.running = True
        self._load_history()
        print("Mini RDBMS Shell")
        print("Type 'exit' to quit, 'help' for help\n")

        try:
            while self.running:
                try:
                    line = self.input_func("db> ").strip()
                except EOFError:
                    print()
                    break
                except KeyboardInterrupt:
                    print("\nInterrupted")
                    break

                if not line:
                    continue
                if line.lower() in ('exit', 'quit'):
                    break
                if line.lower() == 'help':
                    print(HELP_TEXT)
                    continue
                if line.lower() in ('tables', '.tables'):
                    self._list_tables()
                    continue

                print(self.engine.query(line))
        finally:
            self.running = False
            self._save_history()

    def _list_tables(self):
        """List all tables."""
        tables = self.engine.list_tables()
        if not tables:
            print("No tables in database.")
            return
        print("Tables:")
        for table in tables:
            info = self.engine.get_table_info(table)
            print(f"  {table} ({info['row_count']} rows)")
            for col in info['schema']:
                constraints = []
                if col['is_primary']:
                    constraints.append("PRIMARY KEY")
                if col['is_unique']:
                    constraints.append("UNIQUE")
                constraint_str = f" ({', '.join(constraints)})" if constraints else ""
                print(f"    {col['name']} {col['type']}{constraint_str}")

    def _load_history(self):
        if readline is None or self.config.history_file is None:
            return
        try:
            readline.read_history_file(str(self.config.history_file))
        except FileNotFoundError:
            pass

    def _save_history(self):
        if readline is None or self.config.history_file is None:
            return
        try:
            readline.write_history_file(str(self.config.history_file))
        except OSError as e:
            logger.warning("Could not save history to %s: %s", self.config.history_file, e)


def main(argv=None):
    """Main entry point for the REPL."""
    parser = argparse.ArgumentParser(description="Mini RDBMS REPL")
    parser.add_argument("--data-dir", help="Directory for database files (default: data)")
    parser.add_argument("--log-level", help="Logging level, e.g. DEBUG or INFO")
    parser.add_argument("--history-file", help="File to keep line history in")
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.from_env(
            data_dir=args.data_dir,
            log_level=args.log_level,
            history_file=args.history_file,
        )
    except ValidationError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    DatabaseREPL(config).run()


if __name__ == "__main__":
    main()
