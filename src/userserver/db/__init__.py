"""
=============================================================================
PERSISTENCE
=============================================================================

    schema.py    users Table, URL normalization, pooled engine factory
    gateway.py   UserGateway: one SQL statement per operation, GatewayError

=============================================================================
"""

from .schema import users, metadata, create_engine, normalize_database_url
from .gateway import UserGateway, GatewayError

__all__ = [
    "users",
    "metadata",
    "create_engine",
    "normalize_database_url",
    "UserGateway",
    "GatewayError",
]
