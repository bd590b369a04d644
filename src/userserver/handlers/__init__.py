"""
=============================================================================
REQUEST HANDLERS
=============================================================================

A handler maps one route to one persistence call and one response:

    HTTPRequest ──► handler ──► UserGateway ──► HTTPResponse

Handlers never touch the socket and never raise for expected failures:
not-found becomes 404, everything else becomes 500 "Internal error".

=============================================================================
"""

from .users import UserHandler

__all__ = ["UserHandler"]
