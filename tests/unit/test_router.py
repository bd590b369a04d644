"""
Unit tests for the prefix router.
"""

import pytest

from userserver.http.router import Router
from userserver.http.request import HTTPRequest, parse_request
from userserver.http.response import HTTPResponse, ok_text


def make_handler(name: str):
    """Handler that answers with its own name."""
    def handler(request: HTTPRequest) -> HTTPResponse:
        return ok_text(name)
    return handler


@pytest.fixture
def router() -> Router:
    """Router with the service's five routes, in service order."""
    r = Router()
    r.add_route("POST", "/users", make_handler("create"))
    r.add_route("GET", "/users/", make_handler("read_one"))
    r.add_route("GET", "/users", make_handler("read_all"))
    r.add_route("PUT", "/users/", make_handler("update"))
    r.add_route("DELETE", "/users/", make_handler("delete"))
    return r


class TestRouter:
    """Tests for Router class."""

    def test_add_route(self):
        router = Router()
        route = router.add_route("GET", "/users", make_handler("x"), name="list")

        assert router.routes == [route]
        assert route.method == "GET"
        assert route.prefix == "/users"
        assert route.name == "list"

    @pytest.mark.parametrize("raw,expected", [
        (b"POST /users HTTP/1.1\r\n\r\n{}", "create"),
        (b"GET /users/5 HTTP/1.1\r\n\r\n", "read_one"),
        (b"GET /users HTTP/1.1\r\n\r\n", "read_all"),
        (b"PUT /users/5 HTTP/1.1\r\n\r\n{}", "update"),
        (b"DELETE /users/5 HTTP/1.1\r\n\r\n", "delete"),
    ])
    def test_dispatch(self, router: Router, raw: bytes, expected: str):
        response = router.handle(parse_request(raw))

        assert response.status == 200
        assert response.text == expected

    def test_trailing_slash_route_wins(self, router: Router):
        """GET /users/ is checked before the bare GET /users prefix."""
        assert router.handle(HTTPRequest(method="GET", path="/users/")).text == "read_one"

    def test_prefix_matching_is_loose(self, router: Router):
        """Anything that starts with a route prefix goes to that route."""
        assert router.handle(HTTPRequest(method="POST", path="/users/7")).text == "create"
        assert router.handle(HTTPRequest(method="GET", path="/usersx")).text == "read_all"
        assert router.handle(HTTPRequest(method="GET", path="/users?a=1")).text == "read_all"

    @pytest.mark.parametrize("method,path", [
        ("GET", "/"),
        ("GET", "/health"),
        ("PUT", "/users"),
        ("DELETE", "/users"),
        ("PATCH", "/users/1"),
        ("get", "/users"),
        ("", ""),
    ])
    def test_unmatched_is_404(self, router: Router, method: str, path: str):
        response = router.handle(HTTPRequest(method=method, path=path))

        assert response.status == 404
        assert response.text == "404 not found"

    def test_first_registered_wins(self):
        router = Router()
        router.add_route("GET", "/users", make_handler("first"))
        router.add_route("GET", "/users/", make_handler("second"))

        assert router.handle(HTTPRequest(method="GET", path="/users/1")).text == "first"
