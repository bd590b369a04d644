"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the user service.

A single ServerConfig is built once at startup (from the environment, then
overridden by CLI flags) and handed to every component that needs it:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHO READS THE CONFIG?                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer   host, port, backlog                                │
    │   Connection     buffer_size, timeout, max_request_size,            │
    │                  body_timeout                                       │
    │   create_engine  database_url, pool_size                            │
    │   UserServer     legacy_framing, log_level, server_name             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no module-level settings object. If a component needs a value, it
gets the config passed in.

=============================================================================
REQUIRED SETTINGS
=============================================================================

DATABASE_URL is the only required setting. Without it the service has
nowhere to store users, so a missing value is a fatal startup error:

    $ python -m userserver
    Error: DATABASE_URL must be set

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


class ConfigError(ValueError):
    """Raised when the configuration is missing or invalid. Always fatal."""


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    Configuration for the user service.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    DATABASE
    - database_url, pool_size

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout, max_request_size, body_timeout

    HTTP SETTINGS
    - legacy_framing, server_name

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # DATABASE
    # ─────────────────────────────────────────────────────────────────────

    database_url: str = ""
    """
    SQLAlchemy-compatible connection string.
    postgres:// and postgresql:// URLs are routed to the psycopg driver.
    """

    pool_size: int = 5
    """
    Maximum number of pooled database connections.
    Each request checks one out and returns it when the statement is done.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """The IP address to bind to. All interfaces by default."""

    port: int = 8080
    """The TCP port to listen on."""

    backlog: int = 128
    """Maximum number of connections queued by the OS while we are busy."""

    buffer_size: int = 4096
    """Size of a single recv() in bytes."""

    timeout: Optional[float] = 30.0
    """
    Per-connection socket timeout in seconds.
    None = blocking (a silent client stalls the whole listener).
    """

    max_request_size: int = 1024 * 1024  # 1 MB
    """Requests larger than this are dropped without a response."""

    body_timeout: float = 1.0
    """
    Seconds to wait for each further chunk of a body the headers announced.
    When it runs out, the request is parsed from what arrived.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    legacy_framing: bool = False
    """
    Write responses byte-for-byte like the legacy service:
    uppercase reason phrases, no Content-Length, Content-Type on 200 only.
    """

    server_name: str = "userserver/1.0"
    """Value of the Server header (normalized framing only)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        DATABASE_URL         Database connection string (required)
        HTTP_HOST            Server host (default: 0.0.0.0)
        HTTP_PORT            Server port (default: 8080)
        HTTP_TIMEOUT         Socket timeout in seconds (default: 30)
        HTTP_BODY_TIMEOUT    Wait for the rest of a body (default: 1)
        HTTP_LOG_LEVEL       Logging level (default: INFO)
        HTTP_LEGACY_FRAMING  1/true/yes for legacy response bytes
        DB_POOL_SIZE         Connection pool size (default: 5)

        =====================================================================

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Raises:
            ConfigError: If DATABASE_URL is missing or a number is malformed.
        """
        env = os.environ if environ is None else environ

        database_url = env.get("DATABASE_URL", "").strip()
        if not database_url:
            raise ConfigError("DATABASE_URL must be set")

        try:
            return cls(
                database_url=database_url,
                host=env.get("HTTP_HOST", "0.0.0.0"),
                port=int(env.get("HTTP_PORT", "8080")),
                timeout=float(env.get("HTTP_TIMEOUT", "30")),
                body_timeout=float(env.get("HTTP_BODY_TIMEOUT", "1")),
                log_level=env.get("HTTP_LOG_LEVEL", "INFO"),
                legacy_framing=env.get("HTTP_LEGACY_FRAMING", "").lower() in _TRUTHY,
                pool_size=int(env.get("DB_POOL_SIZE", "5")),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid environment value: {e}") from e

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails the process before it
        binds a port or touches the database.
        """
        if not self.database_url:
            raise ConfigError("DATABASE_URL must be set")

        # port 0 lets the OS pick (used by the test-suite)
        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ConfigError("buffer_size must be >= 1024")

        if self.max_request_size < self.buffer_size:
            raise ConfigError("max_request_size must be >= buffer_size")

        if self.pool_size < 1:
            raise ConfigError("pool_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be > 0")

        if self.body_timeout <= 0:
            raise ConfigError("body_timeout must be > 0")
