# =======================================================================================
# qrbadge/database.py - Database Management
# =======================================================================================
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional
from sqlalchemy import DateTime, bindparam, create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.sql.elements import TextClause
from .config import config
from .models.tables import metadata


def sql(statement: str, *datetime_params: str) -> TextClause:
    """
    Build a text() clause, typing the named parameters as DateTime so that
    every dialect (SQLite included) stores them the same way.
    """
    clause = text(statement)
    if datetime_params:
        clause = clause.bindparams(*(bindparam(name, type_=DateTime()) for name in datetime_params))
    return clause


class DatabaseManager:
    """Manages database connections and transactions."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or config.DB_URL
        self.engine: Engine = create_engine(self.url, future=True, **self._engine_options())

    def _engine_options(self) -> Dict[str, Any]:
        if self.url.startswith("sqlite"):
            # single shared connection so in-memory databases survive across requests
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {
            "poolclass": QueuePool,
            "pool_size": config.DB_POOL_SIZE,
            "max_overflow": config.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,
            "isolation_level": "READ COMMITTED",
        }

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """Get a connection inside a transaction; commits on success, rolls back on error."""
        with self.engine.begin() as conn:
            yield conn

    def create_all(self) -> None:
        metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
