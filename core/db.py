# core/db.py
from contextlib import contextmanager

import structlog
from sqlalchemy import create_engine, exc
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import QueuePool, StaticPool

from core.config import Settings
from core.errors import (
    CanteenError,
    ConflictFailure,
    PersistenceFailure,
    ResourceUnavailable,
)

logger = structlog.get_logger(__name__)

Base = declarative_base()

# SQLSTATE / vendor codes meaning "another transaction got there first"
_CONFLICT_SQLSTATES = {"40001", "40P01"}
_CONFLICT_VENDOR_CODES = {1205, 1213, 8177}
_CONFLICT_MESSAGES = ("database is locked", "could not serialize", "deadlock", "can't serialize access")


def is_conflict(err: exc.DBAPIError) -> bool:
    """True when the driver reports a serialization failure or lock conflict."""
    orig = err.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _CONFLICT_SQLSTATES:
        return True
    args = getattr(orig, "args", ())
    code = getattr(orig, "code", None) or (args[0] if args and isinstance(args[0], int) else None)
    if code in _CONFLICT_VENDOR_CODES:
        return True
    text = str(orig).lower()
    return any(msg in text for msg in _CONFLICT_MESSAGES)


def translate_error(err: BaseException):
    """Map a storage-layer exception onto the failure taxonomy (None = leave as is)."""
    if isinstance(err, CanteenError):
        return None
    if isinstance(err, exc.TimeoutError):
        return ResourceUnavailable("No database connection available, try again later")
    if isinstance(err, exc.DBAPIError):
        if is_conflict(err):
            return ConflictFailure("Transaction aborted by a concurrent update, try again")
        return PersistenceFailure("Database error while processing the request")
    if isinstance(err, exc.SQLAlchemyError):
        return PersistenceFailure("Database error while processing the request")
    return None


class Database:
    """Owns the engine and its connection pool for the lifetime of the process.

    Built once at startup, handed to request handlers, disposed on shutdown.
    """

    def __init__(self, url: str, pool_size: int = 2, max_overflow: int = 8,
                 pool_timeout: float = 10.0, echo: bool = False):
        self.url = url
        if url.startswith("sqlite"):
            # SQLite connections are shared across request threads
            connect_args = {"check_same_thread": False}
        else:
            connect_args = {}

        if url in ("sqlite://", "sqlite:///:memory:"):
            self.engine = create_engine(url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        else:
            self.engine = create_engine(
                url,
                echo=echo,
                connect_args=connect_args,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=True,
            )

        # expire_on_commit=False keeps results readable after the session closes
        self.SessionLocal = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        self.SerializableSession = sessionmaker(
            bind=self.engine.execution_options(isolation_level="SERIALIZABLE"),
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            echo=settings.echo,
        )

    def create_all(self):
        # models must be imported so their tables are registered on Base
        import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        import models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()
        logger.info("Connection pool closed", url=self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self):
        """Plain read session (use: `with database.session() as db:`)."""
        db = self.SessionLocal()
        try:
            db.connection()
            yield db
        except BaseException as err:
            db.rollback()
            translated = translate_error(err)
            if translated is None:
                raise
            raise translated from err
        finally:
            db.close()

    @contextmanager
    def transaction(self):
        """Serializable unit of work.

        Commits when the block finishes, rolls back on any exception
        (including interrupts) before re-raising it.
        """
        db = self.SerializableSession()
        try:
            db.connection()
            yield db
            db.commit()
        except BaseException as err:
            db.rollback()
            translated = translate_error(err)
            if translated is None:
                raise
            logger.warning("Transaction rolled back", error=str(err), kind=translated.kind.value)
            raise translated from err
        finally:
            db.close()
