"""
=============================================================================
PERSISTENCE GATEWAY
=============================================================================

Translates handler intent into SQL and rows back into User models.

    ┌──────────────┬──────────────────────────────────────┬─────────────────┐
    │ operation    │ statement                            │ returns         │
    ├──────────────┼──────────────────────────────────────┼─────────────────┤
    │ create       │ INSERT ... RETURNING id, name, email │ User            │
    │ read_one     │ SELECT ... WHERE id = :id            │ User or None    │
    │ read_all     │ SELECT ... (no ORDER BY)             │ list[User]      │
    │ update       │ UPDATE ... WHERE id = :id            │ affected rows   │
    │ delete       │ DELETE ... WHERE id = :id            │ affected rows   │
    └──────────────┴──────────────────────────────────────┴─────────────────┘

For update and delete the affected-row count IS the existence check:
0 means "no such user", anything else means success, even when the new
values equal the old ones.

Every failure (cannot connect, unique email violated, query error) comes
out as GatewayError. Callers never see a SQLAlchemy exception.

=============================================================================
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from ..models import User, UserPayload
from .schema import metadata, users


logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Any failure talking to the database."""


def _to_user(row: Row) -> User:
    return User(id=row.id, name=row.name, email=row.email)


class UserGateway:
    """
    Runs one statement per call, each on its own pooled connection and in
    its own transaction.

    Usage:
        gateway = UserGateway(create_engine(config))
        gateway.ensure_schema()

        user = gateway.create(UserPayload(name="Ada", email="ada@example.com"))
        gateway.update(user.id, UserPayload(name="Ada L.", email="ada@example.com"))
    """

    def __init__(self, engine: Engine):
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def ensure_schema(self) -> None:
        """
        Create the users table if it does not exist.

        Idempotent. Never alters or drops an existing table.

        Raises:
            GatewayError: If the database is unreachable or the DDL fails.
        """
        try:
            metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise GatewayError(f"Schema setup failed: {e}") from e
        logger.info("Table 'users' ready")

    def create(self, payload: UserPayload) -> User:
        """Insert a user and return the stored row, including its new id."""
        stmt = (
            insert(users)
            .values(name=payload.name, email=payload.email)
            .returning(users.c.id, users.c.name, users.c.email)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).one()
        except SQLAlchemyError as e:
            raise GatewayError(f"create failed: {e}") from e
        return _to_user(row)

    def read_one(self, user_id: int) -> Optional[User]:
        """Fetch one user by id, or None."""
        stmt = select(users.c.id, users.c.name, users.c.email).where(users.c.id == user_id)
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).one_or_none()
        except SQLAlchemyError as e:
            raise GatewayError(f"read_one failed: {e}") from e
        return _to_user(row) if row is not None else None

    def read_all(self) -> List[User]:
        """Fetch every user, in whatever order the store returns them."""
        stmt = select(users.c.id, users.c.name, users.c.email)
        try:
            with self._engine.begin() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            raise GatewayError(f"read_all failed: {e}") from e
        return [_to_user(row) for row in rows]

    def update(self, user_id: int, payload: UserPayload) -> int:
        """Overwrite name and email. Returns the affected-row count."""
        stmt = (
            update(users)
            .where(users.c.id == user_id)
            .values(name=payload.name, email=payload.email)
        )
        try:
            with self._engine.begin() as conn:
                count = conn.execute(stmt).rowcount
        except SQLAlchemyError as e:
            raise GatewayError(f"update failed: {e}") from e
        return count

    def delete(self, user_id: int) -> int:
        """Remove a user. Returns the affected-row count."""
        stmt = delete(users).where(users.c.id == user_id)
        try:
            with self._engine.begin() as conn:
                count = conn.execute(stmt).rowcount
        except SQLAlchemyError as e:
            raise GatewayError(f"delete failed: {e}") from e
        return count
