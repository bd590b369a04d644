"""
=============================================================================
USER HANDLERS
=============================================================================

    ┌──────────┬────────────────────────┬──────────────────┬──────────────────┐
    │ handler  │ success                │ not found        │ any failure      │
    ├──────────┼────────────────────────┼──────────────────┼──────────────────┤
    │ create   │ 200 user JSON          │ -                │ 500 Internal err │
    │ read_one │ 200 user JSON          │ 404 User not fnd │ 500 Internal err │
    │ read_all │ 200 JSON array / []    │ -                │ 500 Internal err │
    │ update   │ 200 "User updated"     │ 404 User not fnd │ 500 Internal err │
    │ delete   │ 200 "User deleted"     │ 404 User not fnd │ 500 Internal err │
    └──────────┴────────────────────────┴──────────────────┴──────────────────┘

"Any failure" is one bucket on purpose: malformed JSON, a non-numeric id,
a duplicate email and an unreachable database all produce the same 500
with the same body. Clients that need to tell them apart cannot, and that
is part of the API.

=============================================================================
"""

import logging

from ..db import GatewayError, UserGateway
from ..http.request import HTTPRequest, RequestParseError
from ..http.response import (
    HTTPResponse,
    USER_DELETED,
    USER_UPDATED,
    internal_error,
    not_found,
    ok_json,
    ok_text,
)
from ..models import users_to_json


logger = logging.getLogger(__name__)

# Everything that collapses into 500 "Internal error"
_INTERNAL_ERRORS = (RequestParseError, GatewayError)


class UserHandler:
    """
    The five user routes, bound to one gateway.

    Usage:
        handler = UserHandler(gateway)
        router.add_route("POST", "/users", handler.create)
    """

    def __init__(self, gateway: UserGateway):
        self.gateway = gateway

    def create(self, request: HTTPRequest) -> HTTPResponse:
        """POST /users"""
        try:
            user = self.gateway.create(request.user_payload())
        except _INTERNAL_ERRORS as e:
            return self._internal_error("create", e)
        return ok_json(user.to_json())

    def read_one(self, request: HTTPRequest) -> HTTPResponse:
        """GET /users/{id}"""
        try:
            user = self.gateway.read_one(request.user_id())
        except _INTERNAL_ERRORS as e:
            return self._internal_error("read_one", e)

        if user is None:
            return not_found()
        return ok_json(user.to_json())

    def read_all(self, request: HTTPRequest) -> HTTPResponse:
        """GET /users"""
        try:
            users = self.gateway.read_all()
        except GatewayError as e:
            return self._internal_error("read_all", e)
        return ok_json(users_to_json(users))

    def update(self, request: HTTPRequest) -> HTTPResponse:
        """PUT /users/{id}"""
        try:
            affected = self.gateway.update(request.user_id(), request.user_payload())
        except _INTERNAL_ERRORS as e:
            return self._internal_error("update", e)

        if affected == 0:
            return not_found()
        return ok_text(USER_UPDATED)

    def delete(self, request: HTTPRequest) -> HTTPResponse:
        """DELETE /users/{id}"""
        try:
            affected = self.gateway.delete(request.user_id())
        except _INTERNAL_ERRORS as e:
            return self._internal_error("delete", e)

        if affected == 0:
            return not_found()
        return ok_text(USER_DELETED)

    def _internal_error(self, operation: str, error: Exception) -> HTTPResponse:
        # Detail stays in the log, the client only sees "Internal error"
        logger.debug(f"{operation}: {error}")
        return internal_error()
