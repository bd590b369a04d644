"""
=============================================================================
DATABASE SCHEMA AND ENGINE
=============================================================================

One table:

    CREATE TABLE users (
        id    SERIAL PRIMARY KEY,
        name  TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE
    )

It is declared with SQLAlchemy Core instead of a literal DDL string, so the
same declaration produces SERIAL on PostgreSQL and an autoincrementing
INTEGER PRIMARY KEY on SQLite (which the test-suite runs against).

=============================================================================
CONNECTION POOL
=============================================================================

The engine owns a bounded pool. A request checks one connection out, runs
its single statement, and checks it back in:

    request ──► engine.begin() ──► pool.checkout() ──► statement ──► commit
                                                                      │
    response ◄─────────────────────── pool.checkin() ◄────────────────┘

No code path depends on getting the same connection twice, so pooling is
invisible to clients.

=============================================================================
"""

import sqlalchemy
from sqlalchemy import Column, Integer, MetaData, Table, Text
from sqlalchemy.engine import Engine, make_url

from ..config import ServerConfig


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
)


# Bare PostgreSQL schemes (as used by libpq) → psycopg 3
_POSTGRES_SCHEMES = {"postgres", "postgresql"}


def normalize_database_url(database_url: str) -> str:
    """
    Point bare PostgreSQL URLs at the psycopg driver.

        postgres://u:p@db/app            → postgresql+psycopg://u:p@db/app
        postgresql://u:p@db/app          → postgresql+psycopg://u:p@db/app
        postgresql+psycopg2://u:p@db/app → unchanged
        sqlite:///users.db               → unchanged
    """
    url = make_url(database_url)
    if url.drivername in _POSTGRES_SCHEMES:
        url = url.set(drivername="postgresql+psycopg")
    return url.render_as_string(hide_password=False)


def create_engine(config: ServerConfig) -> Engine:
    """
    Create the pooled engine for a configuration.

    Nothing connects here. The first connection happens when the schema is
    ensured at startup.
    """
    url = normalize_database_url(config.database_url)

    if url.startswith("sqlite"):
        # Connections are checked out from whichever thread serves the request
        return sqlalchemy.create_engine(
            url,
            connect_args={"check_same_thread": False},
            pool_size=config.pool_size,
        )

    return sqlalchemy.create_engine(
        url,
        pool_size=config.pool_size,
        max_overflow=0,
        pool_pre_ping=True,
    )
