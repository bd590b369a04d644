"""
=============================================================================
TCP LISTENER LOOP
=============================================================================

Owns the listening socket and hands every accepted client to a callback,
one at a time.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      Listener Loop                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket() ─► bind(0.0.0.0:8080) ─► listen(backlog)                  │
    │                                        │                             │
    │                    ┌───────────────────┘                             │
    │                    ▼                                                 │
    │               accept() ◄──────────────────────────┐                  │
    │                    │                              │                  │
    │                    ▼                              │                  │
    │          connection_handler(conn)   (returns only │                  │
    │                    │                 when conn is │                  │
    │                    └──────────────── closed) ─────┘                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

STRICTLY SEQUENTIAL: the next accept() happens only after the handler
returns. A slow database therefore delays every queued client; the OS
backlog holds them in the meantime.

A bind failure propagates to the caller (fatal). An accept failure is
logged and the loop keeps going.

=============================================================================
"""

import socket
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    # accept() wakes up this often to notice shutdown()
    POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        After start() this is the real address, so port=0 reports the port
        the OS picked.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart without waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.POLL_INTERVAL)
        return sock

    def bind(self) -> None:
        """
        Create the socket, bind and listen.

        Raises:
            OSError: If the address is in use or not permitted. Fatal.
        """
        self._socket = self._create_socket()
        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown(). Binds first if needed.

        Args:
            connection_handler: Called with each accepted connection. The
                               next accept() waits until it returns.
        """
        if self._socket is None:
            self.bind()

        self._running = True
        self._ready.set()
        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Poll tick: re-check self._running
            except OSError as e:
                if not self._running:
                    break
                logger.warning(f"Unable to accept connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
                body_timeout=self.config.body_timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop.

        Takes effect within POLL_INTERVAL. The connection being handled, if
        any, is finished first.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the accept loop has started. Used by tests."""
        return self._ready.wait(timeout)

    def _cleanup(self):
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
        self._ready.clear()
        logger.info("Socket server stopped")
