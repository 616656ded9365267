"""
Engine configuration.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, field_validator

ENV_PREFIX = "MINIRDBMS_"


class EngineConfig(BaseModel):
    """Settings shared by the engine and the REPL."""

    data_dir: Path = Path("data")
    log_level: str = "WARNING"
    history_file: Optional[Path] = None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "EngineConfig":
        """
        Build a config from MINIRDBMS_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for field, env_name in (
            ("data_dir", "DATA_DIR"),
            ("log_level", "LOG_LEVEL"),
            ("history_file", "HISTORY"),
        ):
            raw = environ.get(ENV_PREFIX + env_name)
            if raw:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
