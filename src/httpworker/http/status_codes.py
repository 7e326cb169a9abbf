"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with.

    HTTP/1.1 200 OK
             ─── ──
              │   │
              │   └── Reason phrase
              └────── Status code

A worker only ever decides between two outcomes: the resource exists
(200) or it does not (404). Unsupported methods and malformed request
lines are NOT answered with 405/501/400; they resolve to no path at all,
which the existence check reports as 404.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used in responses.

    IntEnum so a member compares equal to its integer code:

        >>> HTTPStatus.OK == 200
        True
    """

    OK = 200            # Resource found, body follows
    NOT_FOUND = 404     # Missing path, directory, or unresolved request

    @property
    def phrase(self) -> str:
        """Get the reason phrase for this status code."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
