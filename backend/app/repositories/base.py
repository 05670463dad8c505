"""Repository base.

- Repositories are the only layer permitted to query the database.
- Lookups go through a SELECT-only helper; writes are explicit methods on the
  concrete repository.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import Executable
from sqlalchemy.sql.selectable import Select


class RepositoryQueryViolation(RuntimeError):
    """Raised when a lookup helper is handed anything other than a SELECT."""


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository owning a session factory; one short session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _assert_select_only(self, stmt: Executable) -> None:
        if not isinstance(stmt, Select):
            raise RepositoryQueryViolation(
                f"Lookup helpers only accept SELECT statements (got {type(stmt)!r})."
            )

    def _first(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Any:
        """Execute a SELECT and return its first row (or None)."""
        self._assert_select_only(stmt)
        with self._session_factory() as session:
            result: Result[Any] = session.execute(stmt, params or {})
            return result.first()
