"""
Database configuration and base model.

Uses SQLAlchemy 2.0 declarative style. SQLite is the default store; any
SQLAlchemy URL works.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import PATHS, STORE
from exceptions import ConstraintViolation, StoreError


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns one engine and its session factory.

    Each application context creates its own Database, there is no
    module-level engine.

    Usage:
        db = Database("sqlite://")
        db.init_db()
        with db.session() as session:
            ...
    """

    def __init__(self, url: Optional[str] = None, echo: bool = STORE.echo):
        self.url = url or STORE.resolve_url(PATHS)

        connect_args = {}
        engine_kwargs = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection so every session sees the same in-memory DB
                engine_kwargs["poolclass"] = StaticPool

        self.engine: Engine = create_engine(
            self.url,
            echo=echo,
            connect_args=connect_args,
            **engine_kwargs,
        )
        if self.url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False,
                                         expire_on_commit=False)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for one transaction.

        Commits on success, rolls back on any error. Connectivity failures
        surface as StoreError, constraint violations as ConstraintViolation.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except (OperationalError, PoolTimeoutError) as exc:
            session.rollback()
            raise StoreError(f"Store unavailable: {exc}") from exc
        except IntegrityError as exc:
            session.rollback()
            raise ConstraintViolation(f"Constraint violated: {exc.orig}") from exc
        except DBAPIError as exc:
            session.rollback()
            if exc.connection_invalidated:
                raise StoreError(f"Store connection lost: {exc}") from exc
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        """Create all tables."""
        # Import models so every table is registered on the metadata
        import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def reset_db(self) -> None:
        """Drop and recreate all tables. USE WITH CAUTION."""
        import models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
