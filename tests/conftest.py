"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userserver import UserServer, ServerConfig
from userserver.db import UserGateway, create_engine


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample create request with JSON body."""
    body = b'{"name": "Ada", "email": "ada@example.com"}'
    return (
        b"POST /users HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n"
        b"\r\n"
    ) % len(body) + body


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample read-one request."""
    return (
        b"GET /users/42 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A fresh SQLite database file per test."""
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def config(database_url: str) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        database_url=database_url,
        host="127.0.0.1",
        port=0,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def gateway(config: ServerConfig) -> Generator[UserGateway, None, None]:
    """Gateway over an empty users table."""
    gw = UserGateway(create_engine(config))
    gw.ensure_schema()
    yield gw
    gw.engine.dispose()


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: UserServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, return everything the server writes back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """A running UserServer on a free port, backed by SQLite."""
    test_srv = TestServer(UserServer(config), free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def legacy_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """Like test_server, but writing the legacy service's response bytes."""
    config.legacy_framing = True
    test_srv = TestServer(UserServer(config), free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
