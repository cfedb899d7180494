"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the verification store:
- Builds the SQLAlchemy Engine from a URL (defaults to `settings.DATABASE_URL`).
- Builds session factories bound to an engine.
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Sessions are created with ``expire_on_commit=False`` so that entities returned
  by the store remain readable after the unit of work has been committed and closed.
- SQLite connections get ``PRAGMA foreign_keys=ON`` so that ``ON DELETE CASCADE``
  on the groups table is honoured.
- All ORM models must inherit from `declarativeBase` to participate in schema
  creation and enable ORM features.
"""

from typing import Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.schema import MetaData
from acquaintances.database.config.config import settings

# --------------------------------------------------------------------
# Metadata object: stores schema-level information about tables,
# constraints, indexes, etc. Shared across all models.
# --------------------------------------------------------------------
metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables, constraints, indexes, etc. Shared across all models.
"""

# --------------------------------------------------------------------
# Declarative Base: root class for ORM models.
# --------------------------------------------------------------------
declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models.
All model classes should inherit from this to gain ORM features and automatic schema generation.
"""


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_connection_engine(url: Optional[str] = None, **engine_kwargs) -> Engine:
    """
    Create an Engine for the given URL.

    Parameters
    ----------
    url : str | None
        SQLAlchemy database URL. Defaults to ``settings.DATABASE_URL``.
    **engine_kwargs
        Passed through to ``create_engine`` (pool class, connect_args, ...).

    Returns
    -------
    Engine
        Engine object: core interface to the database, responsible for
        managing connections, executing SQL, and pooling.
    """
    engine = create_engine(url or settings.DATABASE_URL, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to `engine`."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """
    Create the verification tables on `engine` if they do not exist.

    Bootstrap/test helper only; schema migration is owned by the host application.
    """
    # Entities register themselves on `metadata` at import time.
    import acquaintances.database.entities  # noqa: F401

    metadata.create_all(engine)
