"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes read from a connection into an HTTPRequest.

This is NOT a full HTTP/1.1 parser. The service needs exactly three things
from a request, so that is what we extract:

    POST /users/7 HTTP/1.1\r\n             ← request line
    Host: localhost:8080\r\n               ← headers (kept, mostly unused)
    Content-Type: application/json\r\n
    \r\n                                   ← first blank line
    {"name": "Ada", "email": "a@b.c"}      ← body: everything after it

        method    "POST"
        path      "/users/7"
        id_token  "7"          (third "/"-segment of the path)
        body      '{"name": "Ada", "email": "a@b.c"}'

=============================================================================
LENIENCY
=============================================================================

The parser itself never fails. A garbage request line just produces empty
method/path values, which no route matches, so the client gets a 404.

Failures are deferred to the two typed accessors, user_id() and
user_payload(), which raise RequestParseError. Handlers turn that into a
500 "Internal error"; the service deliberately does not distinguish bad
input from a broken database.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
import re

from pydantic import ValidationError

from ..models import UserPayload


# Signed 32-bit range of the users.id column
_ID_MIN = -(2 ** 31)
_ID_MAX = 2 ** 31 - 1
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


class RequestParseError(ValueError):
    """
    Raised when the id token or the JSON body cannot be decoded.

    Always answered with 500 "Internal error".
    """


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         First token of the request line ("" if missing)
        path:           Second token of the request line ("" if missing)
        version:        Third token of the request line ("" if missing)
        headers:        Header map with lowercase names
        body:           Text after the first blank line
        id_token:       Third "/"-segment of the path, "" if absent
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    id_token: str = ""
    client_address: tuple[str, int] = ("", 0)

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def user_id(self) -> int:
        """
        Decode the id token as a 32-bit signed integer.

            /users/42        → 42
            /users/+42       → 42
            /users/abc       → RequestParseError
            /users/          → RequestParseError
            /users/99999999999 → RequestParseError (out of range)

        Raises:
            RequestParseError: If the token is not a valid id.
        """
        token = self.id_token
        if not _ID_PATTERN.fullmatch(token):
            raise RequestParseError(f"Invalid user id: {token!r}")

        value = int(token)
        if not _ID_MIN <= value <= _ID_MAX:
            raise RequestParseError(f"User id out of range: {token}")
        return value

    def user_payload(self) -> UserPayload:
        """
        Decode the body as a user payload.

        Both "name" and "email" must be JSON strings. Extra keys (including
        "id") are ignored.

        Raises:
            RequestParseError: If the body is not valid JSON of that shape.
        """
        try:
            return UserPayload.model_validate_json(self.body)
        except ValidationError as e:
            raise RequestParseError(f"Invalid user body: {e.error_count()} error(s)") from e


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        Raw Request Bytes
              │
              ▼
        1. Decode as UTF-8 (invalid bytes become U+FFFD, never an error)
              │
              ▼
        2. Split at the first \r\n\r\n → head, body
              │
              ▼
        3. Tokenize the first head line → method, path, version
              │
              ▼
        4. Parse remaining head lines → headers
              │
              ▼
        5. Extract id token from the path
              │
              ▼
        HTTPRequest

    ==========================================================================
    """

    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def parse(self, data: bytes, client_address: tuple[str, int] = ("", 0)) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: Raw request bytes from the socket.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest. Never raises for malformed input.
        """
        text = data.decode("utf-8", errors="replace")

        head, _, body = text.partition("\r\n\r\n")
        lines = head.split("\r\n")

        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            id_token=extract_id_token(path),
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP PATH SP VERSION" into its tokens.

        Missing tokens come back as empty strings.
        """
        tokens = line.split()
        tokens += [""] * (3 - len(tokens))
        return tokens[0], tokens[1], tokens[2]

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dict with lowercase names.

        Malformed lines are skipped. Repeated headers are comma-joined.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def extract_id_token(path: str) -> str:
    """
    Return the third "/"-segment of a path, cut at the first whitespace.

        "/users/42"        → "42"
        "/users/42/extra"  → "42"
        "/users"           → ""
    """
    segments = path.split("/")
    if len(segments) < 3:
        return ""

    parts = segments[2].split()
    return parts[0] if parts else ""


def parse_request(data: bytes, client_address: tuple[str, int] = ("", 0)) -> HTTPRequest:
    """Convenience function: parse with a fresh RequestParser."""
    return RequestParser().parse(data, client_address)
