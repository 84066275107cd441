"""
Module: property_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities for the embedded SQLite store.
Architecture position: Kernel > DB.  May import from db/base.py and models/
    (create_tables imports models so metadata is complete).  MUST NOT import
    from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - One explicit handle per process.  A ``Database`` owns its engine and
      session factory; repositories and services receive sessions from it
      instead of reaching for module-level state.
    - session_scope() commits on success and rolls back on any exception,
      which gives multi-row operations (back-fill, batch upsert, propagation)
      their all-or-nothing semantics.
    - Foreign-key enforcement follows ``enforce_foreign_keys`` (SQLite leaves
      it off per connection unless asked).

Failure modes:
    - RuntimeError on any use after close().
    - OperationalError if the database file cannot be created or opened.
"""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from property_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def sqlite_url(path: str | Path) -> str:
    """Build a SQLite URL for a file path, creating the parent directory."""
    db_path = Path(path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


class Database:
    """
    Storage handle: engine plus session factory.

    Contract:
        Opened once at process start (by the application facade or a
        script) and closed on shutdown.  Every unit of work goes through
        ``session_scope()``.

    Guarantees:
        - Sessions are created with expire_on_commit=False, so DTOs built
          inside a scope stay readable after it exits.
        - close() disposes all pooled connections and is idempotent.
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        enforce_foreign_keys: bool = False,
    ):
        """
        Open the engine.

        Args:
            url: SQLAlchemy database URL (``sqlite:///...``).
            echo: If True, log all SQL statements.
            enforce_foreign_keys: Turn on SQLite foreign-key checks for
                every connection.
        """
        self.url = url
        self.enforce_foreign_keys = enforce_foreign_keys
        self._engine: Engine | None = create_engine(url, echo=echo)
        self._session_factory: sessionmaker[Session] | None = sessionmaker(
            bind=self._engine, expire_on_commit=False
        )

        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine, "connect", self._on_connect)

        logger.info(
            "engine_initialized",
            extra={
                "dialect": self._engine.dialect.name,
                "echo": echo,
                "enforce_foreign_keys": enforce_foreign_keys,
            },
        )

    @classmethod
    def from_path(cls, path: str | Path, **kwargs) -> "Database":
        """Open a SQLite database file, creating its directory if needed."""
        return cls(sqlite_url(path), **kwargs)

    def _on_connect(self, dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        value = "ON" if self.enforce_foreign_keys else "OFF"
        cursor.execute(f"PRAGMA foreign_keys={value}")
        cursor.close()

    @property
    def engine(self) -> Engine:
        """
        The underlying engine.

        Raises:
            RuntimeError: If the handle has been closed.
        """
        if self._engine is None:
            raise RuntimeError("Database is closed.")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def session(self) -> Session:
        """
        Get a new session instance.

        Raises:
            RuntimeError: If the handle has been closed.
        """
        if self._session_factory is None:
            raise RuntimeError("Database is closed.")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Postconditions: On normal exit, session is committed and closed.
            On exception, session is rolled back and closed.  The exception
            is re-raised to the caller.

        Usage:
            with database.session_scope() as session:
                PaymentRecordService(session).create(draft)
        """
        session = self.session()
        logger.debug("transaction_started")
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed")
        except Exception:
            session.rollback()
            logger.warning("transaction_rolled_back", exc_info=True)
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """
        Create all tables defined in the models (no-op for existing ones).
        """
        from property_kernel.db.base import Base
        import property_kernel.models  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info(
            "tables_created",
            extra={"tables": sorted(Base.metadata.tables)},
        )

    def drop_tables(self) -> None:
        """
        Drop all tables. Use with caution - primarily for testing.
        """
        from property_kernel.db.base import Base
        import property_kernel.models  # noqa: F401

        Base.metadata.drop_all(self.engine)

    def close(self) -> None:
        """Dispose the engine and release all pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("engine_disposed")
        self._engine = None
        self._session_factory = None
