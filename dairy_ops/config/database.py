"""
Database connection handle for the subscription delivery backend.

One process-scoped handle owns the SQLAlchemy engine and session factory.
The engine is created lazily on first use and disposed explicitly at
shutdown; services receive ``session_factory`` instead of building their
own clients.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dairy_ops.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Database:
    """Lazily-initialized engine + session factory with explicit lifecycle."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        settings: Optional[Settings] = None,
        echo: Optional[bool] = None,
    ) -> None:
        self._settings = settings or default_settings
        self.url = url or self._settings.get_database_url()
        self._echo = self._settings.DB_ECHO if echo is None else echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> Engine:
        """Create the engine and session factory if not already created."""
        if self._engine is None:
            self._engine = create_engine(self.url, **self._engine_options())
            self._install_query_timer(self._engine)
            self._session_factory = sessionmaker(
                bind=self._engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )
            logger.info("Database engine created", extra={"dialect": self._engine.dialect.name})
        return self._engine

    def dispose(self) -> None:
        """Release pooled connections; the handle can be reopened later."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> Engine:
        return self.open()

    def session_factory(self) -> Session:
        """Return a new Session bound to the shared engine."""
        self.open()
        if self._session_factory is None:
            raise RuntimeError("Database session factory is not initialized")
        return self._session_factory()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self._echo}
        if self.url.startswith("sqlite"):
            # Single shared connection so in-memory databases survive
            # across sessions.
            options["connect_args"] = {"check_same_thread": False}
            options["poolclass"] = StaticPool
            return options

        options.update(
            pool_pre_ping=True,
            pool_size=self._settings.DB_POOL_SIZE,
            max_overflow=self._settings.DB_POOL_OVERFLOW,
            pool_recycle=self._settings.DB_POOL_RECYCLE,
            isolation_level=self._settings.DB_ISOLATION_LEVEL,
        )
        return options

    def _install_query_timer(self, engine: Engine) -> None:
        threshold = self._settings.DB_SLOW_QUERY_SECONDS

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault('query_start_time', []).append(time.perf_counter())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            total_time = time.perf_counter() - conn.info['query_start_time'].pop()
            if total_time > threshold:
                logger.warning(
                    f"Slow query detected ({total_time:.4f}s): {statement[:100]}..."
                )


_database: Optional[Database] = None


def get_database() -> Database:
    """Return the process-wide database handle, creating it on first call."""
    global _database
    if _database is None:
        _database = Database()
    return _database


def set_database(database: Optional[Database]) -> None:
    """Replace the process-wide handle (used at startup and in tests)."""
    global _database
    if _database is not None and _database is not database:
        _database.dispose()
    _database = database


def get_session_factory() -> Callable[[], Session]:
    return get_database().session_factory


def init_db(database: Optional[Database] = None) -> None:
    """
    Create all tables.

    Suitable for development/testing only; production schemas are
    managed through migrations.
    """
    from dairy_ops.models import Base

    database = database or get_database()
    Base.metadata.create_all(bind=database.engine)
    logger.info("Database tables created successfully")


def drop_db(database: Optional[Database] = None) -> None:
    """Drop all tables. Development/testing only."""
    from dairy_ops.models import Base

    database = database or get_database()
    Base.metadata.drop_all(bind=database.engine)
    logger.warning("All database tables dropped")
