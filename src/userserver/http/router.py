"""
=============================================================================
PREFIX ROUTER
=============================================================================

Maps "METHOD path" to a handler by PREFIX, first match wins.

    ┌───┬──────────────────┬──────────────┐
    │ # │ prefix           │ handler      │
    ├───┼──────────────────┼──────────────┤
    │ 1 │ POST /users      │ create       │
    │ 2 │ GET /users/      │ read_one     │
    │ 3 │ GET /users       │ read_all     │
    │ 4 │ PUT /users/      │ update       │
    │ 5 │ DELETE /users/   │ delete       │
    │ - │ (anything else)  │ 404          │
    └───┴──────────────────┴──────────────┘

Registration order matters. "GET /users/5" also starts with "GET /users",
so the route with the trailing slash must be registered first.

Prefix matching is intentionally loose: "POST /users/anything" still
creates a user, exactly like the legacy service.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found, ROUTE_NOT_FOUND


# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """A registered (method, path prefix) → handler binding."""

    method: str
    prefix: str
    handler: Handler
    name: Optional[str] = None

    def matches(self, method: str, path: str) -> bool:
        return method == self.method and path.startswith(self.prefix)


class Router:
    """
    Ordered prefix router.

        router = Router()
        router.add_route("GET", "/users/", handlers.read_one)
        router.add_route("GET", "/users", handlers.read_all)

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        """Registered routes, in match order."""
        return list(self._routes)

    def add_route(
        self,
        method: str,
        prefix: str,
        handler: Handler,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route at the end of the match order.

        Args:
            method: HTTP method, compared case-sensitively (the wire is uppercase)
            prefix: Path prefix, e.g. "/users/"
            handler: Handler function that takes request, returns response
            name: Optional name, shown in the access log

        Returns:
            The registered Route.
        """
        route = Route(method=method, prefix=prefix, handler=handler, name=name)
        self._routes.append(route)
        return route

    def match(self, method: str, path: str) -> Optional[Route]:
        """Return the first route whose method and prefix match, or None."""
        for route in self._routes:
            if route.matches(method, path):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to its handler.

        Unmatched requests get 404 with the literal body "404 not found".
        """
        route = self.match(request.method, request.path)
        if route is None:
            return not_found(ROUTE_NOT_FOUND)
        return route.handler(request)
