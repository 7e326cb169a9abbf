"""
=============================================================================
RESPONSE BODY RENDERING
=============================================================================

Writes the body of a response. Runs after the header block has been
written, and branches on the content type:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        render() branches                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTML + file exists    → line by line, template tags substituted   │
    │   HTML + no file        → fixed "Error: 404 Not Found" page         │
    │   image + file exists   → raw bytes, unmodified                      │
    │   image + no file       → ResourceNotFoundError (header already     │
    │                           sent, the worker aborts the connection)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TEMPLATE TAGS
=============================================================================

Served text may contain two markers. Each line is checked against the
rules IN ORDER; the first rule whose marker appears in the line (any
case) rewrites it, and the rest are skipped.

    <cs371date>     Every occurrence becomes the current time plus "<br>".
                    The rest of the line is kept.

                    "Hello <cs371date> World"
                      → "Hello Sun Oct 18 07:06:00 UTC 2026<br> World"

    <cs371server>   The WHOLE line is replaced by the server's
                    identification string. Other text on the line is lost.

                    "<p>Powered by <CS371SERVER></p>"
                      → "Server's identification string : httpworker/1.0"

A line containing both markers only gets the date substitution, since
the date rule comes first.

=============================================================================
LINE TERMINATORS
=============================================================================

Each line is written back followed by the terminator it was read with
("\n", "\r\n", or none on a final unterminated line). A file without
template tags is therefore served byte-for-byte.

=============================================================================
"""

import re
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Callable, Iterable, Optional

from .mime_types import ContentType
from ..handlers.static import Resource


logger = logging.getLogger(__name__)


DATE_MARKER = "<cs371date>"
SERVER_MARKER = "<cs371server>"

NOT_FOUND_BODY = (
    b"<html><head></head><body>\n"
    b"<h3>Error: 404 Not Found</h3>"
    b"</body></html>\n"
)

TEXT_ENCODING = "utf-8"


def format_template_date(dt: datetime) -> str:
    """
    Format a timestamp for the <cs371date> tag.

    Local time, in the classic ctime-with-zone layout:
    "Sun Oct 18 07:06:00 UTC 2026"
    """
    local = dt.astimezone()
    return local.strftime("%a %b %d %H:%M:%S %Z %Y")


def server_identification(server_name: str) -> str:
    """The text a <cs371server> line is replaced with."""
    return f"Server's identification string : {server_name}"


@dataclass(frozen=True)
class TemplateContext:
    """Values available to template rules while rendering one response."""

    timestamp: str
    identification: str

    @classmethod
    def create(cls, server_name: str, now: Optional[datetime] = None) -> "TemplateContext":
        return cls(
            timestamp=format_template_date(now or datetime.now()),
            identification=server_identification(server_name),
        )


@dataclass(frozen=True)
class TemplateRule:
    """
    One marker and what to do with a line that contains it.

    Attributes:
        marker: Lowercase marker text, matched case-insensitively anywhere
                in the line.
        substitute: Called with (line, context); returns the rendered line.
    """

    marker: str
    substitute: Callable[[str, TemplateContext], str]

    def matches(self, line: str) -> bool:
        return self.marker in line.lower()


def _replace_date(line: str, context: TemplateContext) -> str:
    pattern = re.compile(re.escape(DATE_MARKER), re.IGNORECASE)
    # Function replacement keeps backslashes in the timestamp literal
    return pattern.sub(lambda match: context.timestamp + "<br>", line)


def _replace_server(line: str, context: TemplateContext) -> str:
    return context.identification


TEMPLATE_RULES = (
    TemplateRule(DATE_MARKER, _replace_date),
    TemplateRule(SERVER_MARKER, _replace_server),
)


def render_line(line: str, context: TemplateContext) -> str:
    """
    Apply the first matching template rule to one line.

    Args:
        line: Line content WITHOUT its terminator.
        context: Timestamp and identification for this response.

    Returns:
        The rendered line, or the line unchanged if no rule matches.
    """
    for rule in TEMPLATE_RULES:
        if rule.matches(line):
            return rule.substitute(line, context)
    return line


def _split_terminator(line: str) -> tuple:
    content = line.rstrip("\r\n")
    return content, line[len(content):]


def render_text(out: BinaryIO, lines: Iterable[str], context: TemplateContext) -> int:
    """
    Render text lines through the template rules.

    Args:
        out: Binary output stream.
        lines: Lines WITH their terminators (as produced by iterating a
               file opened with newline="").
        context: Template values.

    Returns:
        Number of bytes written.
    """
    written = 0
    for line in lines:
        content, terminator = _split_terminator(line)
        rendered = render_line(content, context) + terminator
        data = rendered.encode(TEXT_ENCODING, errors="surrogateescape")
        out.write(data)
        written += len(data)
    return written


def render_not_found(out: BinaryIO) -> int:
    """Write the fixed HTML error page. Returns bytes written."""
    out.write(NOT_FOUND_BODY)
    return len(NOT_FOUND_BODY)


def stream_bytes(out: BinaryIO, resource: Resource, chunk_size: int = 8192) -> int:
    """
    Copy a resource's raw bytes to the output.

    Raises:
        ResourceNotFoundError: The resource does not exist.
    """
    written = 0
    for chunk in resource.iter_chunks(chunk_size):
        out.write(chunk)
        written += len(chunk)
    return written


def render(
    out: BinaryIO,
    content_type: ContentType,
    resource: Resource,
    server_name: str,
    now: Optional[datetime] = None,
    chunk_size: int = 8192,
) -> int:
    """
    Write the response body for a resource.

    Must only be called after the header block has been written.

    Args:
        out: Binary output stream (a Connection, or any object with write()).
        content_type: Type chosen for the request path.
        resource: The opened resource.
        server_name: Used for the <cs371server> identification string.
        now: Timestamp for <cs371date> (defaults to the current time).
        chunk_size: Read size when streaming images.

    Returns:
        Number of body bytes written.

    Raises:
        ResourceNotFoundError: An image was requested but does not exist.
    """
    if content_type.is_image:
        return stream_bytes(out, resource, chunk_size)

    if not resource.exists:
        return render_not_found(out)

    context = TemplateContext.create(server_name, now)
    return render_text(out, resource.text_lines(TEXT_ENCODING), context)
