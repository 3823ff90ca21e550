"""
Database engine and session helpers.

Supports any SQLAlchemy URL; SQLite is the default. Tables are created from
the SQLModel metadata at startup.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from feedlens.config import Settings

logger = logging.getLogger(__name__)

_engines: Dict[str, Engine] = {}


def _build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine appropriate for the database backend."""
    if url.startswith("sqlite"):
        db_path = url.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_conn, _connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

        return engine

    return create_engine(url, echo=echo, pool_pre_ping=True)


def get_engine(config: Settings) -> Engine:
    """Get or create the engine for the configured database URL."""
    url = config.database_url
    if url not in _engines:
        _engines[url] = _build_engine(url, echo=config.debug)
        logger.info("Database engine created: %s", url.split("@")[-1])
    return _engines[url]


def init_db(engine: Engine) -> None:
    """Create all tables registered on the SQLModel metadata."""
    # Register table models before create_all
    from feedlens.feedback import models as feedback_models  # noqa: F401
    from feedlens.workflow import models as workflow_models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables initialized")


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """
    Context manager yielding a session bound to the engine.

    Usage::

        with session_scope(engine) as session:
            session.exec(...)
    """
    with Session(engine) as session:
        yield session


def close_db() -> None:
    """Dispose all engines at shutdown."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    logger.info("Database connections closed")
