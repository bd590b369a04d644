"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The user service only ever answers with three status codes:

    200  the operation succeeded
    404  the user (or the route) does not exist
    500  anything else went wrong

Each code carries two reason phrases. The standard one is used by the
normalized response framing; the legacy one reproduces the exact status
lines the legacy service wrote ("404 NOT FOUND", "500 INTERNAL ERROR").

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the service.

    IntEnum, so codes compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Operation succeeded
    NOT_FOUND = 404                 # No such user, or no such route
    INTERNAL_SERVER_ERROR = 500     # Bad input, bad id, store failure

    @property
    def phrase(self) -> str:
        """Standard reason phrase (RFC 9110)."""
        return _STATUS_PHRASES[self]

    @property
    def legacy_phrase(self) -> str:
        """Reason phrase as written by the legacy service."""
        return _LEGACY_PHRASES[self]

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx (success) status code."""
        return 200 <= self < 300


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}

_LEGACY_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
    HTTPStatus.INTERNAL_SERVER_ERROR: "INTERNAL ERROR",
}
