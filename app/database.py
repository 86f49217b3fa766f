import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import settings
from errors import translate_db_error

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
        )
    return _engine


# Binding is deferred so importing this module never opens a connection.
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_db() -> Iterator[Session]:
    """Yield a session for one request and close it afterwards.

    Closing the session hands its connection back to the pool.
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def first(self) -> Optional[dict[str, Any]]:
        return self.rows[0] if self.rows else None


def run_statement(
    db: Session,
    sql: str,
    params: Mapping[str, Any],
    operation: str,
    commit: bool = False,
) -> QueryResult:
    """Execute one statement and return its rows as plain dicts.

    Driver and pool failures are logged and re-raised as
    ``RepositoryError`` subclasses; a statement that matches nothing is
    an empty ``QueryResult``, not a failure.
    """
    try:
        result = db.execute(text(sql), dict(params))
        rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
        if commit:
            db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        error = translate_db_error(exc, operation)
        logger.error("%s failed [%s]: %s", operation, error.code, error.detail)
        raise error from exc
    logger.debug("%s returned %d row(s)", operation, len(rows))
    return QueryResult(rows)
