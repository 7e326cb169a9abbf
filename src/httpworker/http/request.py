"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Reads the request header block from a connection and extracts the one
thing a worker needs from it: the path of the resource being asked for.

=============================================================================
HTTP REQUEST FORMAT
=============================================================================

    GET /index.html HTTP/1.1\r\n          ← Request line
    Host: localhost:8080\r\n              ← Header lines (read, ignored)
    User-Agent: curl/8.0\r\n
    Accept: */*\r\n
    \r\n                                  ← Blank line: headers done

Only the request line matters here:

    GET /index.html HTTP/1.1
    ─── ─────────── ────────
     │       │          │
     │       │          └── Version (ignored)
     │       └───────────── Request-target
     └───────────────────── Method (must be GET)

=============================================================================
EXTRACTING THE PATH
=============================================================================

    "GET /img/a.png HTTP/1.1"
          │
          ├── drop "GET "          → "/img/a.png HTTP/1.1"
          ├── cut at next space    → "/img/a.png"
          └── drop ONE leading "/" → "img/a.png"

    "GET / HTTP/1.1"          → ""            (the root)
    "GET //etc HTTP/1.1"      → "/etc"        (only one slash removed)
    "GET /a%20b HTTP/1.1"     → "a%20b"       (no percent-decoding)
    "POST /x HTTP/1.1"        → None          (not a GET)

The target is passed through untouched. There is no percent-decoding
and no ".." canonicalization, so the resource path can point anywhere
the process can read.

=============================================================================
WHEN DOES READING STOP?
=============================================================================

At the first empty line, or when the line source runs out (client closed
the connection, or the socket read timed out). The header lines after the
request line are consumed so the socket is drained up to the blank line,
then thrown away.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)


GET_TOKEN = "GET"


@dataclass(frozen=True)
class Request:
    """
    The parsed request.

    Attributes:
        path: Resource path with its leading "/" removed, "" for the root,
              or None if no GET request line was received.
        request_line: The first line as received ("" if none).
        header_lines: The remaining header lines, kept for logging only.
    """

    path: Optional[str] = None
    request_line: str = ""
    header_lines: Tuple[str, ...] = ()

    @property
    def is_resolved(self) -> bool:
        """True when a GET request line produced a path."""
        return self.path is not None


def parse_request_line(line: str) -> Optional[str]:
    """
    Extract the resource path from a request line.

    Args:
        line: The request line without its terminator.

    Returns:
        The request-target with exactly one leading "/" stripped, or
        None if the line does not begin with GET.
    """
    if not line.startswith(GET_TOKEN):
        return None

    # "GET " is 4 characters; the target runs to the next space
    target = line[len(GET_TOKEN) + 1:]
    space = target.find(" ")
    if space != -1:
        target = target[:space]

    if target.startswith("/"):
        target = target[1:]

    return target


def read_request(lines: Iterable[str]) -> Request:
    """
    Read a request header block and extract the resource path.

    Args:
        lines: Lines with their terminators stripped, in arrival order.
               Usually Connection.iter_lines().

    Returns:
        The parsed Request. Never raises for malformed input; a missing or
        non-GET request line simply leaves the path unresolved.
    """
    request_line = ""
    header_lines: List[str] = []
    path = None
    seen_first = False

    for line in lines:
        logger.debug(f"Request line: ({line})")

        if line == "":
            break  # Blank line terminates the header block

        if not seen_first:
            seen_first = True
            request_line = line
            path = parse_request_line(line)
            logger.debug(f"Requested path: {path!r}")
        else:
            header_lines.append(line)

    return Request(path=path, request_line=request_line, header_lines=tuple(header_lines))


def parse_request(raw: bytes) -> Request:
    """
    Parse a complete request held in memory.

    Convenience wrapper around read_request() for callers that already
    have the bytes (tests, tools). Accepts CRLF or bare LF line endings.

    Example:
        >>> parse_request(b"GET /index.html HTTP/1.1\\r\\n\\r\\n").path
        'index.html'
    """
    text = raw.decode("iso-8859-1")
    return read_request(line.rstrip("\r") for line in text.split("\n"))
