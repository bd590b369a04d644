"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Every response the service writes is a status code plus a short body:

    ┌────────┬──────────────────────────────────────────────────────────┐
    │ status │ body                                                     │
    ├────────┼──────────────────────────────────────────────────────────┤
    │ 200    │ user JSON, user-list JSON, "User updated", "User deleted"│
    │ 404    │ "User not found", "404 not found"                        │
    │ 500    │ "Internal error"                                         │
    └────────┴──────────────────────────────────────────────────────────┘

=============================================================================
TWO FRAMINGS
=============================================================================

NORMALIZED (default) - one well-formed shape for every response:

    HTTP/1.1 404 Not Found\r\n
    Content-Type: text/plain; charset=utf-8\r\n
    Content-Length: 14\r\n
    Date: Mon, 19 Oct 2026 07:00:00 GMT\r\n
    Server: userserver/1.0\r\n
    Connection: close\r\n
    \r\n
    User not found

LEGACY - the exact bytes the legacy service produced. Content-Type only
on 200 (always application/json), uppercase reason phrases, no length:

    HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n{"id":1,...}
    HTTP/1.1 404 NOT FOUND\r\n\r\nUser not found
    HTTP/1.1 500 INTERNAL ERROR\r\n\r\nInternal error

Status codes and body text are identical in both.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Dict, Union

from .status_codes import HTTPStatus


JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

# Fixed body texts clients may compare against
USER_NOT_FOUND = "User not found"
ROUTE_NOT_FOUND = "404 not found"
INTERNAL_ERROR = "Internal error"
USER_UPDATED = "User updated"
USER_DELETED = "User deleted"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Status line with the standard reason phrase, e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def to_bytes(self, server_name: str = "userserver/1.0", legacy: bool = False) -> bytes:
        """
        Serialize the response for socket.sendall().

        Args:
            server_name: Value for the Server header.
            legacy: Produce the legacy service's framing instead.
        """
        if legacy:
            return self._to_legacy_bytes()

        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)
        # One request per connection, always
        response_headers.setdefault("Connection", "close")

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body

    def _to_legacy_bytes(self) -> bytes:
        head = f"{self.version} {int(self.status)} {self.status.legacy_phrase}\r\n"
        if self.status.is_success:
            head += f"Content-Type: {JSON_CONTENT_TYPE}\r\n"
        return (head + "\r\n").encode("utf-8") + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .text("User not found")
            .build())

    Every method but build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body. Strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Set a plain text body."""
        self._headers["Content-Type"] = TEXT_CONTENT_TYPE
        return self.body(text)

    def json(self, document: str) -> "ResponseBuilder":
        """
        Set an already-serialized JSON body.

        Serialization is done by the models (pydantic), so this only sets
        the Content-Type and the bytes.
        """
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self.body(document)

    def build(self) -> HTTPResponse:
        """Build the response. The builder can be reused afterwards."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP date (RFC 7231 IMF-fixdate).

        Mon, 19 Oct 2026 07:00:00 GMT
    """
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok_json(document: str) -> HTTPResponse:
    """200 with a JSON body."""
    return ResponseBuilder().json(document).build()


def ok_text(message: str) -> HTTPResponse:
    """200 with a plain text body."""
    return ResponseBuilder().text(message).build()


def not_found(message: str = USER_NOT_FOUND) -> HTTPResponse:
    """404 with a plain text body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).text(message).build()


def internal_error() -> HTTPResponse:
    """500 with the fixed "Internal error" body. No details, ever."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).text(INTERNAL_ERROR).build()
