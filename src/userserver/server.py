"""
=============================================================================
USER SERVICE
=============================================================================

Wires the pieces together and runs the request pipeline:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      One Connection                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.read_request()     ── failure: log, drop connection    │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser.parse()         (never fails)                        │
    │        │                                                             │
    │        ▼                                                             │
    │   Router.handle()  ──► UserHandler.<op>() ──► UserGateway            │
    │        │                                                             │
    │        ▼                                                             │
    │   HTTPResponse.to_bytes()                                            │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.send_response()    ── failure: log, drop connection    │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.close()                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STARTUP
=============================================================================

Three things must succeed before the first accept(), or the process exits:

    1. config.validate()          ConfigError
    2. gateway.ensure_schema()    GatewayError (cannot connect / DDL failed)
    3. socket bind + listen       OSError (port in use, permission denied)

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLarge
from .db import UserGateway, create_engine
from .handlers import UserHandler
from .http import HTTPRequest, HTTPResponse, RequestParser, Router, internal_error


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("userserver.access")


class UserServer:
    """
    User CRUD service over a hand-built HTTP/1.1 socket server.

    Usage:
        config = ServerConfig.from_env()
        server = UserServer(config)
        server.run()  # Blocks until Ctrl+C

    Args:
        config: Server configuration.
        gateway: Use this gateway instead of building one from
                 config.database_url.
    """

    def __init__(self, config: ServerConfig, gateway: Optional[UserGateway] = None):
        self.config = config
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._router = Router()
        self._gateway = gateway
        self._owns_engine = gateway is None

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self):
        """Bound (host, port) once running."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def setup(self) -> None:
        """
        Prepare the database and register routes.

        Raises:
            GatewayError: If the database is unreachable or the table cannot
                          be created.
        """
        if self._gateway is None:
            self._gateway = UserGateway(create_engine(self.config))
        self._gateway.ensure_schema()

        if not self._router.routes:
            self._register_routes(UserHandler(self._gateway))

    def _register_routes(self, handler: UserHandler) -> None:
        # Order matters: "GET /users/" before "GET /users"
        self._router.add_route("POST", "/users", handler.create, name="create")
        self._router.add_route("GET", "/users/", handler.read_one, name="read_one")
        self._router.add_route("GET", "/users", handler.read_all, name="read_all")
        self._router.add_route("PUT", "/users/", handler.update, name="update")
        self._router.add_route("DELETE", "/users/", handler.delete, name="delete")

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            GatewayError: Database setup failed.
            OSError: Bind failed.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self.setup()
        self._socket_server.bind()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self) -> None:
        """Stop accepting connections. run() returns shortly after."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("userserver").setLevel(level)

    def _shutdown(self):
        if self._owns_engine and self._gateway is not None:
            self._gateway.engine.dispose()
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Serve one connection: read, dispatch, write, close.

        Read and write failures only cost this connection; the listener
        keeps accepting.
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except (OSError, RequestTooLarge) as e:
                logger.warning(f"[{conn.id}] Unable to read stream: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed before sending a request")
                return

            request = self._parser.parse(raw_request, conn.address)

            conn.state = ConnectionState.DISPATCHING
            response = self.dispatch(request)

            route = self._router.match(request.method, request.path)
            access_logger.debug(
                f'{conn.client_ip} "{request.method} {request.path}" '
                f'{int(response.status)} {route.name if route and route.name else "-"}'
            )

            payload = response.to_bytes(
                self.config.server_name,
                legacy=self.config.legacy_framing,
            )
            try:
                conn.send_response(payload)
            except OSError as e:
                logger.warning(f"[{conn.id}] Unable to write response: {e}")

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a parsed request.

        Handlers already turn expected failures into 404/500. Anything else
        they raise is logged here and answered with the same 500.
        """
        try:
            return self._router.handle(request)
        except Exception as e:
            logger.exception(f"Handler error: {e}")
            return internal_error()
