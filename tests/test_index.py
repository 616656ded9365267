"""Tests for covering index documents."""

import json

import pytest

from minirdbms.index import IndexManager, build_index
from minirdbms.storage import Session

ROWS = [
    {"id": 1, "name": "Alice", "team": "red"},
    {"id": 2, "name": "Bob", "team": "blue"},
    {"id": 3, "name": "Cara", "team": "red"},
]


@pytest.fixture
def indexes(tmp_path):
    return IndexManager(str(tmp_path / "db"))


class TestBuildIndex:
    """Tests for index document construction."""

    def test_groups_full_rows(self):
        document = build_index("team", ROWS)
        assert list(document) == ["red", "blue"]
        assert document["red"] == [ROWS[0], ROWS[2]]

    def test_keys_are_normalised(self):
        document = build_index("flag", [{"flag": True}, {"flag": False}])
        assert set(document) == {"true", "false"}


class TestIndexManager:
    """Tests for index persistence and lookup."""

    def test_has_index_is_existence_check(self, indexes, tmp_path):
        assert not indexes.has_index("users", "id")
        indexes.write("users", "id", {})
        assert indexes.has_index("users", "id")
        assert (tmp_path / "db" / "indexes" / "users_id.json").exists()

    def test_get(self, indexes):
        indexes.rebuild("users", "id", ROWS)
        assert indexes.get("users", "id", 2) == [ROWS[1]]
        assert indexes.get("users", "id", "2") == [ROWS[1]]
        assert indexes.get("users", "id", 99) == []

    def test_get_missing_index(self, indexes):
        assert indexes.get("users", "nope", 1) == []

    def test_rebuild_replaces_content(self, indexes):
        indexes.rebuild("users", "id", ROWS)
        indexes.rebuild("users", "id", ROWS[:1])
        assert indexes.get("users", "id", 2) == []
        assert indexes.get("users", "id", 1) == [ROWS[0]]

    def test_rebuild_is_idempotent(self, indexes):
        """Test that rebuilding from the same rows yields byte-identical files."""
        path = indexes.index_path("users", "id")
        indexes.rebuild("users", "id", ROWS)
        first = path.read_bytes()
        indexes.rebuild("users", "id", ROWS)
        assert path.read_bytes() == first
        assert json.loads(first) == build_index("id", ROWS)

    def test_rebuild_staged_in_transaction(self, indexes):
        """Test that a rebuild inside a transaction stays off disk."""
        indexes.write("users", "id", {})
        session = Session(active=True)

        indexes.rebuild("users", "id", ROWS, session)

        assert indexes.get("users", "id", 1, session) == [ROWS[0]]
        assert indexes.get("users", "id", 1) == []
        assert json.loads(indexes.index_path("users", "id").read_text()) == {}
