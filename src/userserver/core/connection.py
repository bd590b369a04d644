"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Lifecycle                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   NEW ──► READING ──► DISPATCHING ──► WRITING ──► CLOSED            │
    │              │                           │                           │
    │              └──── read failure ─────────┴──── write failure ──►    │
    │                                                  CLOSED              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive. Nothing survives from one connection to the next.

=============================================================================
READING
=============================================================================

The request is expected to arrive in a single recv(). One read is always
done. If the headers are complete and announce a Content-Length that the
first read did not cover, we keep reading until the body is there or the
client stops sending. Requests without Content-Length get exactly one read.

Extra reads wait at most body_timeout each. If the client announced more
than it sends, the request is parsed from the bytes that did arrive. For a
truncated JSON body that means 500 "Internal error" after body_timeout,
not a dropped connection after the full connection timeout.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used in logs."""

    NEW = "new"                  # Just accepted
    READING = "reading"          # Reading the request bytes
    DISPATCHING = "dispatching"  # Parsed, router/handler running
    WRITING = "writing"          # Sending the response
    CLOSED = "closed"            # Socket released


class RequestTooLarge(ValueError):
    """The client sent more than max_request_size bytes."""


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = 30.0
    max_request_size: int = 1024 * 1024
    body_timeout: float = 1.0

    def __post_init__(self):
        # The listening socket polls with a timeout; accepted sockets must not
        # inherit it, so set the per-connection value explicitly.
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read the request bytes.

        Returns:
            The request bytes, or None if the client closed without sending.

        Raises:
            OSError: On socket errors, including timeouts.
            RequestTooLarge: If the request exceeds max_request_size.
        """
        self.state = ConnectionState.READING

        data = self.socket.recv(self.buffer_size)
        if not data:
            return None

        expected = self._expected_size(data)
        if expected is not None and len(data) < expected:
            data = self._read_body(data, expected)

        if len(data) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(data)} bytes")

        return data

    def _read_body(self, data: bytes, expected: int) -> bytes:
        """
        Keep reading toward the announced size.

        Each extra recv() waits at most body_timeout. A client that stops
        short (overstated Content-Length) gets its request parsed from
        whatever arrived, instead of holding the listener until the
        connection timeout.
        """
        self.socket.settimeout(self.body_timeout)
        try:
            while len(data) < expected and len(data) <= self.max_request_size:
                try:
                    chunk = self.socket.recv(self.buffer_size)
                except socket.timeout:
                    logger.debug(
                        f"[{self.id}] Body incomplete ({len(data)}/{expected} bytes), "
                        "parsing what arrived"
                    )
                    break
                if not chunk:
                    break  # Client stopped sending; parse what we have
                data += chunk
        finally:
            self.socket.settimeout(self.timeout)
        return data

    def _expected_size(self, data: bytes) -> Optional[int]:
        """
        Total request size announced by the headers, if we can tell.

            header bytes + 4 (blank line) + Content-Length

        Returns None when headers are incomplete or carry no Content-Length.
        """
        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            return None

        header_str = data[:header_end].decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n")[1:]:
            if line.startswith("content-length:"):
                try:
                    return header_end + 4 + int(line.split(":", 1)[1].strip())
                except ValueError:
                    return None
        return None

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> None:
        """
        Send the whole response.

        sendall() loops until every byte is written; plain send() might
        write only part of it.

        Raises:
            OSError: If the client went away.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) first, so the client sees FIN right after the
        response bytes and knows the body is complete.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
