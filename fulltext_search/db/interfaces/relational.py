import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from fulltext_search.config import DatabaseSettings
from fulltext_search.db.interfaces.base import BaseDatabase

logger = logging.getLogger(__name__)

Base = declarative_base()


class SQLDatabase(BaseDatabase):
    """SQLAlchemy database shared with the host (PostgreSQL or MySQL)."""

    def __init__(self, config: DatabaseSettings):
        self.config = config
        self._engine: Optional[Engine] = None
        self.session_factory = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call startup() first.")
        return self._engine

    def _engine_options(self) -> Dict[str, Any]:
        if self.config.url.startswith("sqlite"):
            # Single shared connection so in-memory databases survive across sessions
            return {
                "connect_args": {"check_same_thread": False},
                "poolclass": StaticPool,
            }
        return {
            "pool_size": self.config.pool_size,
            "max_overflow": self.config.max_overflow,
            "pool_pre_ping": True,
        }

    def startup(self) -> None:
        self._engine = create_engine(
            self.config.url,
            echo=self.config.echo_sql,
            **self._engine_options(),
        )
        self.session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        logger.info(f"Database initialized successfully ({self._engine.dialect.name})")

    def teardown(self) -> None:
        if self._engine:
            self._engine.dispose()

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        if not self.session_factory:
            raise RuntimeError("Database not initialized. Call startup() first.")
        session = self.session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
