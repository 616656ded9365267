"""Tests for on-disk storage and transaction sessions."""

import json

import pytest

from minirdbms.errors import TableNotFoundError, TransactionStateError
from minirdbms.storage import Session, Storage, write_json_atomic
from minirdbms.types import Column, DataType


@pytest.fixture
def storage(tmp_path):
    return Storage(str(tmp_path / "db"))


SCHEMA = [
    Column("id", DataType.INTEGER, is_primary=True),
    Column("name", DataType.TEXT),
]


class TestSchemas:
    """Tests for the schema store."""

    def test_save_and_load(self, storage):
        storage.save_schema("users", SCHEMA)
        assert storage.load_schema("users") == SCHEMA
        assert storage.table_exists("users")
        assert storage.list_tables() == ["users"]

    def test_load_missing(self, storage):
        with pytest.raises(TableNotFoundError, match="Table 'ghost' does not exist."):
            storage.load_schema("ghost")

    def test_layout(self, storage, tmp_path):
        storage.save_schema("users", SCHEMA)
        storage.save_table_to_disk("users", [])
        assert (tmp_path / "db" / "schemas" / "users.json").exists()
        assert json.loads((tmp_path / "db" / "tables" / "users.json").read_text()) == []


class TestAtomicWrite:
    """Tests for temp-file-and-rename writes."""

    def test_no_temp_file_left(self, tmp_path):
        target = tmp_path / "rows.json"
        write_json_atomic(target, [{"id": 1}])
        assert json.loads(target.read_text()) == [{"id": 1}]
        assert not (tmp_path / "rows.json.tmp").exists()

    def test_interrupted_write_keeps_old_content(self, tmp_path, monkeypatch):
        """Test that a failure before the rename leaves the old document intact."""
        target = tmp_path / "rows.json"
        write_json_atomic(target, [{"id": 1}])

        def fail_replace(src, dst):
            raise OSError("disk unplugged")

        monkeypatch.setattr("minirdbms.storage.os.replace", fail_replace)
        with pytest.raises(OSError):
            write_json_atomic(target, [{"id": 1}, {"id": 2}])

        assert json.loads(target.read_text()) == [{"id": 1}]


class TestSessions:
    """Tests for transaction staging."""

    def test_autocommit_writes_disk(self, storage):
        session = Session()
        storage.save_rows("users", [{"id": 1, "name": "Alice"}], session)
        assert storage.load_table_from_disk("users") == [{"id": 1, "name": "Alice"}]

    def test_staged_rows_not_on_disk(self, storage):
        """Test that writes in a transaction are visible only through the session."""
        session = Session()
        storage.save_table_to_disk("users", [{"id": 1, "name": "Alice"}])

        storage.begin(session)
        storage.save_rows("users", [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Carl"}], session)

        assert len(storage.select_all("users", session)) == 2
        assert len(storage.select_all("users", Session())) == 1
        assert storage.load_table_from_disk("users") == [{"id": 1, "name": "Alice"}]

    def test_unstaged_table_falls_through_to_disk(self, storage):
        session = Session()
        storage.save_table_to_disk("orders", [{"id": 9}])
        storage.begin(session)
        assert storage.select_all("orders", session) == [{"id": 9}]

    def test_commit_flushes(self, storage):
        session = Session()
        storage.begin(session)
        storage.save_rows("users", [{"id": 2}], session)
        assert storage.commit(session) == "Transaction Committed"

        assert storage.load_table_from_disk("users") == [{"id": 2}]
        assert not session.active
        assert session.staged_rows == {}

    def test_commit_writes_staged_indexes(self, storage):
        session = Session()
        storage.begin(session)
        session.staged_indexes[("users", "id")] = {"2": [{"id": 2}]}
        written = []
        storage.commit(session, index_writer=lambda t, c, doc: written.append((t, c, doc)))
        assert written == [("users", "id", {"2": [{"id": 2}]})]

    def test_rollback_discards(self, storage):
        session = Session()
        storage.begin(session)
        storage.save_rows("users", [{"id": 2}], session)
        assert storage.rollback(session) == "Transaction Rolled Back"

        assert storage.load_table_from_disk("users") == []
        assert storage.select_all("users", session) == []

    def test_double_begin(self, storage):
        session = Session()
        assert storage.begin(session) == "Transaction Started"
        with pytest.raises(TransactionStateError, match="Transaction already active."):
            storage.begin(session)

    @pytest.mark.parametrize("action", ["commit", "rollback"])
    def test_no_active_transaction(self, storage, action):
        with pytest.raises(TransactionStateError, match="No active transaction."):
            getattr(storage, action)(Session())
