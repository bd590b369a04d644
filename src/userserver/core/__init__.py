"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the TCP listening socket, binds 0.0.0.0:8080              │
    │  • Accepts ONE connection at a time                                  │
    │  • Hands it to the HTTP layer and waits until it is done             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Wraps the client socket                                           │
    │  • Reads one request, writes one response, closes                    │
    │  • Tracks NEW → READING → DISPATCHING → WRITING → CLOSED             │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
]
