"""Tests for the interactive shell."""

import pytest

from minirdbms import DatabaseREPL, EngineConfig
from minirdbms.repl import main


def scripted(lines):
    """Return an input() replacement that feeds lines, then signals end of input."""
    feed = iter(lines)

    def fake_input(prompt):
        try:
            return next(feed)
        except StopIteration:
            raise EOFError
    return fake_input


class TestDatabaseREPL:
    """Tests for the REPL loop."""

    def test_runs_commands_until_exit(self, tmp_path, capsys):
        repl = DatabaseREPL(
            EngineConfig(data_dir=tmp_path / "db"),
            input_func=scripted([
                "CREATE TABLE t (id INT PRIMARY KEY, name TEXT)",
                "",
                "INSERT INTO t VALUES (1, 'Alice')",
                "SELECT * FROM t",
                "exit",
                "INSERT INTO t VALUES (2, 'Never')",
            ]),
        )
        repl.run()

        out = capsys.readouterr().out
        assert "Table 't' created." in out
        assert "Inserted 1 row." in out
        assert "1 | Alice" in out
        assert "Never" not in out
        assert repl.engine.query("SELECT * FROM t WHERE id=2") == "Empty set."

    def test_errors_are_printed(self, tmp_path, capsys):
        repl = DatabaseREPL(EngineConfig(data_dir=tmp_path / "db"), input_func=scripted(["FROB"]))
        repl.run()
        assert "Error: Unknown command." in capsys.readouterr().out

    def test_tables_listing(self, tmp_path, capsys):
        repl = DatabaseREPL(
            EngineConfig(data_dir=tmp_path / "db"),
            input_func=scripted([
                ".tables",
                "CREATE TABLE t (id INT PRIMARY KEY, code TEXT UNIQUE)",
                "INSERT INTO t VALUES (1, 'x')",
                "tables",
                "quit",
            ]),
        )
        repl.run()

        out = capsys.readouterr().out
        assert "No tables in database." in out
        assert "t (1 rows)" in out
        assert "id INTEGER (PRIMARY KEY)" in out
        assert "code TEXT (UNIQUE)" in out

    def test_help(self, tmp_path, capsys):
        repl = DatabaseREPL(EngineConfig(data_dir=tmp_path / "db"), input_func=scripted(["help"]))
        repl.run()
        assert "BEGIN / COMMIT / ROLLBACK" in capsys.readouterr().out


class TestMain:
    """Tests for the command-line entry point."""

    def test_bad_log_level_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--data-dir", str(tmp_path), "--log-level", "LOUD"])

    def test_main_starts_repl(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", scripted(["CREATE TABLE t (id INT)", "exit"]))
        main(["--data-dir", str(tmp_path / "db")])
        assert "Table 't' created." in capsys.readouterr().out
