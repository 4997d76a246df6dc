"""
SQLAlchemy session management.

Provides session lifecycle management for executor calls.
"""

from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

T = TypeVar("T")


class SessionManager:
    """
    Manages SQLAlchemy sessions for executor calls.

    Each ``session()`` block is one unit of work: committed on success,
    rolled back on error.
    """

    def __init__(
        self,
        engine: Engine,
        session_factory: sessionmaker | None = None,
    ) -> None:
        """
        Initialize the session manager.

        Args:
            engine: SQLAlchemy engine
            session_factory: Optional pre-configured session factory
        """
        self.engine = engine
        self._session_factory = session_factory or sessionmaker(
            engine,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for sessions.

        Automatically commits on success and rolls back on error.
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def run_in_transaction(
        self,
        fn: Callable[[Session], T],
    ) -> T:
        """
        Execute a function within a transaction.
        """
        with self.session() as session:
            return fn(session)
