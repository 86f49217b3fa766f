"""Error taxonomy for the data-access layer.

An empty result is never an error: lookups return ``None`` and listings
return ``[]``. Everything below is raised to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)


@dataclass(frozen=True)
class RepositoryError(Exception):
    code: str
    detail: str
    status_code: int = 500
    retryable: bool = False

    def __str__(self) -> str:
        return f"{self.code}: {self.detail}"


class ConstraintViolationError(RepositoryError):
    """A unique, foreign key or not-null constraint rejected the write."""

    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail, status_code=409, retryable=False)


class DatabaseUnavailableError(RepositoryError):
    """The pool could not hand out a working connection."""

    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail, status_code=503, retryable=True)


class QueryFailedError(RepositoryError):
    def __init__(self, code: str, detail: str):
        super().__init__(code=code, detail=detail, status_code=500, retryable=False)


def _driver_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    message = str(orig if orig is not None else exc).strip()
    return message.splitlines()[0] if message else exc.__class__.__name__


def translate_db_error(exc: SQLAlchemyError, operation: str) -> RepositoryError:
    """Map a SQLAlchemy exception onto the repository taxonomy."""
    message = _driver_message(exc)
    if isinstance(exc, IntegrityError):
        return ConstraintViolationError(f"{operation}_constraint", message)
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)):
        return DatabaseUnavailableError(f"{operation}_unavailable", message)
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return DatabaseUnavailableError(f"{operation}_unavailable", message)
    return QueryFailedError(f"{operation}_failed", message)

