"""
Unit tests for HTTP response building.
"""

import pytest
import re
from datetime import datetime, timezone

from userserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    internal_error,
    not_found,
    ok_json,
    ok_text,
)
from userserver.http.status_codes import HTTPStatus


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"
        assert (
            HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR).status_line
            == "HTTP/1.1 500 Internal Server Error"
        )

    def test_to_bytes_includes_headers(self):
        """Normalized framing carries length, type and a blank line."""
        result = ok_json('{"id":1}').to_bytes(server_name="test/1.0")

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Type: application/json\r\n" in result
        assert b"Content-Length: 8\r\n" in result
        assert b"Server: test/1.0\r\n" in result
        assert b"Connection: close\r\n" in result
        assert result.endswith(b'\r\n\r\n{"id":1}')

    def test_error_responses_are_well_formed(self):
        """404 and 500 get the same framing as 200."""
        result = not_found().to_bytes()

        assert result.startswith(b"HTTP/1.1 404 Not Found\r\n")
        assert b"Content-Type: text/plain; charset=utf-8\r\n" in result
        assert b"Content-Length: 14\r\n" in result
        assert result.endswith(b"\r\n\r\nUser not found")

    def test_date_header_format(self):
        result = ok_text("x").to_bytes()
        assert re.search(rb"Date: \w{3}, \d{2} \w{3} \d{4} \d{2}:\d{2}:\d{2} GMT\r\n", result)


class TestLegacyFraming:
    """Byte-exact responses of the legacy service."""

    def test_ok(self):
        result = ok_json('{"id":1,"name":"a","email":"b"}').to_bytes(legacy=True)

        assert result == (
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n"
            b'{"id":1,"name":"a","email":"b"}'
        )

    def test_ok_text_still_claims_json(self):
        assert ok_text("User updated").to_bytes(legacy=True) == (
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\nUser updated"
        )

    def test_not_found(self):
        assert not_found().to_bytes(legacy=True) == (
            b"HTTP/1.1 404 NOT FOUND\r\n\r\nUser not found"
        )

    def test_route_not_found(self):
        assert not_found("404 not found").to_bytes(legacy=True) == (
            b"HTTP/1.1 404 NOT FOUND\r\n\r\n404 not found"
        )

    def test_internal_error(self):
        assert internal_error().to_bytes(legacy=True) == (
            b"HTTP/1.1 500 INTERNAL ERROR\r\n\r\nInternal error"
        )


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        assert response.status == HTTPStatus.NOT_FOUND
        assert response.status == 404

    def test_json_body(self):
        response = ResponseBuilder().json("[]").build()

        assert response.headers["Content-Type"] == "application/json"
        assert response.body == b"[]"

    def test_text_body(self):
        response = ResponseBuilder().text("User deleted").build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.text == "User deleted"

    def test_builder_is_reusable(self):
        builder = ResponseBuilder().header("X-One", "1")
        first = builder.build()
        builder.header("X-Two", "2")

        assert "X-Two" not in first.headers


class TestHelpers:

    @pytest.mark.parametrize("response,status,body", [
        (ok_json("[]"), 200, "[]"),
        (ok_text("User updated"), 200, "User updated"),
        (not_found(), 404, "User not found"),
        (not_found("404 not found"), 404, "404 not found"),
        (internal_error(), 500, "Internal error"),
    ])
    def test_status_and_body(self, response: HTTPResponse, status: int, body: str):
        assert response.status == status
        assert response.text == body

    def test_format_http_date(self):
        dt = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"
