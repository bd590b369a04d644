"""
=============================================================================
HTTP PROTOCOL SUBSET
=============================================================================

Just enough HTTP/1.1 for a five-route JSON service:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   raw bytes → HTTPRequest(method, path, headers, body, id_token)    │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   ordered (method, path prefix) → handler, else 404                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE BUILDER (response.py)                                      │
    │   HTTPResponse → bytes, normalized or legacy framing                │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   200 / 404 / 500 with standard and legacy reason phrases           │
    └─────────────────────────────────────────────────────────────────────┘

No chunked transfer, no keep-alive, no content negotiation.

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import HTTPRequest, RequestParser, RequestParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok_json,
    ok_text,
    not_found,
    internal_error,
)
from .router import Router, Route, Handler

__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "RequestParser",
    "RequestParseError",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "ok_json",
    "ok_text",
    "not_found",
    "internal_error",
    "Router",
    "Route",
    "Handler",
]
