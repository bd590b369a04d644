"""
=============================================================================
USERSERVER - USER CRUD OVER RAW SOCKETS
=============================================================================

A deliberately small service: one table, five routes, one TCP listener.

    POST   /users        create a user          200 user JSON | 500
    GET    /users        list users             200 JSON array
    GET    /users/{id}   fetch one user         200 | 404 | 500
    PUT    /users/{id}   replace name + email   200 | 404 | 500
    DELETE /users/{id}   delete a user          200 | 404 | 500
    anything else                               404 "404 not found"

=============================================================================
PACKAGE MAP
=============================================================================

    config.py      ServerConfig (environment + CLI), ConfigError
    models.py      User / UserPayload (pydantic)
    core/          SocketServer (listener loop), Connection
    http/          RequestParser, Router, HTTPResponse, HTTPStatus
    db/            users table, pooled engine, UserGateway
    handlers/      UserHandler: the five routes
    server.py      UserServer: startup and the per-connection pipeline
    __main__.py    python -m userserver

=============================================================================
"""

__version__ = "1.0.0"

from .server import UserServer
from .config import ServerConfig, ConfigError

__all__ = ["UserServer", "ServerConfig", "ConfigError", "__version__"]
