"""
=============================================================================
HTTP RESPONSE HEADER
=============================================================================

Writes the status line and header block of a response. The body is
written separately by the renderer, after this block has gone out.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HEADER BLOCK (always 6 lines)                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                     ← or 404 Not Found       │
    │    Date: Sun, 18 Oct 2026 07:06:00 GMT\r\n                          │
    │    Server: httpworker/1.0\r\n                                        │
    │    Connection: close\r\n                                             │
    │    Content-Type: text/html\r\n                                       │
    │    \r\n                                    ← headers done            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NO CONTENT-LENGTH
=============================================================================

The header block does not announce a body size. Every connection
carries exactly one response and is then closed, so the client reads
the body until EOF:

    Client                                Server
       │   GET /index.html ─────────────────► │
       │ ◄──────────────────────── header     │
       │ ◄──────────────────────── body...    │
       │ ◄──────────────────────── FIN        │  ← body ends here

The 404 case keeps the Content-Type of the REQUESTED path. A missing
"/x.png" is announced as image/png, even though nothing follows.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from .mime_types import ContentType
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 18 Oct 2026 07:06:00 GMT

    Aware datetimes are converted to UTC first; naive ones are assumed
    to already be UTC.

    Args:
        dt: Datetime to format.

    Returns:
        Formatted date string.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


@dataclass
class ResponseHeader:
    """
    The status line and fixed header set of one response.

    =========================================================================
    SERIALIZATION FORMAT
    =========================================================================

        HTTP/1.1 404 Not Found\r\n
        Date: Sun, 18 Oct 2026 07:06:00 GMT\r\n
        Server: httpworker/1.0\r\n
        Connection: close\r\n
        Content-Type: image/png\r\n
        \r\n

    =========================================================================
    """

    status: HTTPStatus
    content_type: ContentType
    server_name: str
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{HTTP_VERSION} {self.status.value} {self.status.phrase}"

    @property
    def headers(self) -> dict:
        """The four header fields, in the order they are sent."""
        return {
            "Date": format_http_date(self.date),
            "Server": self.server_name,
            "Connection": "close",
            "Content-Type": self.content_type.mime_type,
        }

    def to_bytes(self) -> bytes:
        """
        Serialize the header block, blank line included.

        Returns:
            Bytes ready for the socket, ending in b"\\r\\n\\r\\n".
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        return ("\r\n".join(lines) + "\r\n").encode("iso-8859-1")


def build_header(
    content_type: ContentType,
    exists: bool,
    server_name: str,
    now: Optional[datetime] = None,
) -> ResponseHeader:
    """
    Choose the status for a resource and assemble its header.

    Args:
        content_type: Resolved type of the requested path.
        exists: Whether a regular file was found at the path.
        server_name: Value for the Server header.
        now: Timestamp for the Date header (defaults to the current time).

    Returns:
        A 200 header when the resource exists, otherwise a 404 header.
    """
    status = HTTPStatus.OK if exists else HTTPStatus.NOT_FOUND
    header = ResponseHeader(status=status, content_type=content_type, server_name=server_name)
    if now is not None:
        header.date = now
    return header


def write_header(
    out: BinaryIO,
    content_type: ContentType,
    exists: bool,
    server_name: str,
    now: Optional[datetime] = None,
) -> HTTPStatus:
    """
    Write the full header block to the output stream.

    This MUST be called before any body byte is written.

    Returns:
        The status that was sent.
    """
    header = build_header(content_type, exists, server_name, now)
    out.write(header.to_bytes())
    return header.status
