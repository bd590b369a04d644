"""
=============================================================================
USER DATA MODEL
=============================================================================

The service has exactly one entity: a user.

    ┌──────────────┬──────────────┬──────────────────────────────────────┐
    │ field        │ type         │ notes                                │
    ├──────────────┼──────────────┼──────────────────────────────────────┤
    │ id           │ int or null  │ assigned by the database, immutable  │
    │ name         │ str          │ required                             │
    │ email        │ str          │ required, unique (enforced by store) │
    └──────────────┴──────────────┴──────────────────────────────────────┘

Two shapes exist on the wire:

    UserPayload   what clients send on POST / PUT   {"name", "email"}
    User          what the server returns           {"id", "name", "email"}

Any "id" a client sends is ignored. Ids come from the database only.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, TypeAdapter


class UserPayload(BaseModel):
    """Body of a create or update request."""

    model_config = ConfigDict(extra="ignore")

    # Strict: {"name": 42} is a decode error, not "42"
    name: StrictStr
    email: StrictStr


class User(BaseModel):
    """A persisted user row."""

    id: Optional[int] = None
    name: str
    email: str

    def to_json(self) -> str:
        """Compact JSON, keys in id/name/email order."""
        return self.model_dump_json()


_USER_LIST = TypeAdapter(List[User])


def users_to_json(users: List[User]) -> str:
    """Serialize a list of users as a compact JSON array ("[]" when empty)."""
    return _USER_LIST.dump_json(users).decode("utf-8")
