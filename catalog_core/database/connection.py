"""Engine and session handling for the catalog engine"""

import os
from contextlib import contextmanager
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from catalog_core.utils.logger import get_logger

load_dotenv()

logger = get_logger("database")

_PG_SCHEMES = ("postgresql://", "postgres://")


def database_url() -> str:
    """
    Resolve the catalog database URL from the environment.

    CATALOG_DATABASE_URL wins over DATABASE_URL; without either the URL is
    assembled from the PG* variables. Plain postgres URLs are pointed at the
    psycopg driver.
    """
    url = os.getenv("CATALOG_DATABASE_URL") or os.getenv("DATABASE_URL")

    if url:
        for scheme in _PG_SCHEMES:
            if url.startswith(scheme):
                return "postgresql+psycopg://" + url[len(scheme) :]
        return url

    host = os.getenv("PGHOST", "localhost")
    port = os.getenv("PGPORT", "5432")
    name = os.getenv("PGDATABASE", "catalog")
    user = os.getenv("PGUSER", "catalog")
    password = os.getenv("PGPASSWORD", "")

    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{name}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(url: str | None = None, echo: bool = False) -> Engine:
    """
    Create an engine for the catalog database.

    Postgres engines run without a pool. SQLite engines keep SQLAlchemy's
    default pool and get foreign keys switched on, since product deletion and
    option sync rely on them.

    Args:
        url: Database URL, resolved from the environment when omitted
        echo: Log emitted SQL

    Returns:
        SQLAlchemy Engine
    """
    url = url or database_url()

    if make_url(url).get_backend_name() == "sqlite":
        engine = create_engine(url, echo=echo)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(url, echo=echo, poolclass=NullPool)


@contextmanager
def get_db_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    """
    Transactional context shared by every step of a pipeline.

    Components flush into the session and never commit. The block commits
    once at the end; any error rolls back the whole unit and is re-raised.

    Example:
        with get_db_session(engine) as session:
            normalizer.normalize_all(session, product)
            availability.refresh(session, product)
    """
    factory = sessionmaker(bind=engine or get_engine(), autoflush=False)
    session = factory()

    try:
        yield session
        session.commit()
    except Exception as e:
        logger.warning(f"Rolling back catalog session: {e}")
        session.rollback()
        raise
    finally:
        session.close()


def check_connection(engine: Engine | None = None) -> bool:
    """True when the catalog database answers a trivial query"""
    try:
        engine = engine or get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False
