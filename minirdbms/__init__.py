"""
Mini RDBMS: an embedded, file-backed relational store with a small SQL dialect.
"""

from .config import EngineConfig
from .engine import DatabaseEngine
from .repl import DatabaseREPL
from .storage import Session

__all__ = ['DatabaseEngine', 'DatabaseREPL', 'EngineConfig', 'Session']
