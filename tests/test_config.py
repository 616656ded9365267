"""Tests for engine configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from minirdbms import DatabaseEngine, EngineConfig


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.data_dir == Path("data")
        assert config.log_level == "WARNING"
        assert config.history_file is None

    def test_from_env(self):
        config = EngineConfig.from_env({
            "MINIRDBMS_DATA_DIR": "/tmp/somewhere",
            "MINIRDBMS_LOG_LEVEL": "debug",
            "MINIRDBMS_HISTORY": "/tmp/history",
        })
        assert config.data_dir == Path("/tmp/somewhere")
        assert config.log_level == "DEBUG"
        assert config.history_file == Path("/tmp/history")

    def test_overrides_win(self):
        config = EngineConfig.from_env({"MINIRDBMS_DATA_DIR": "env_dir"}, data_dir="cli_dir", log_level=None)
        assert config.data_dir == Path("cli_dir")
        assert config.log_level == "WARNING"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            EngineConfig(log_level="LOUD")

    def test_engine_uses_config(self, tmp_path):
        engine = DatabaseEngine(config=EngineConfig(data_dir=tmp_path / "cfg"))
        engine.query("CREATE TABLE t (id INT PRIMARY KEY)")
        assert (tmp_path / "cfg" / "schemas" / "t.json").exists()

    def test_data_dir_argument_overrides_config(self, tmp_path):
        engine = DatabaseEngine(str(tmp_path / "arg"), config=EngineConfig(data_dir=tmp_path / "cfg"))
        engine.query("CREATE TABLE t (id INT)")
        assert (tmp_path / "arg" / "schemas" / "t.json").exists()
        assert not (tmp_path / "cfg").exists()
