"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    request.py       Request line parsing → resource path
    mime_types.py    Resource path → ContentType
    status_codes.py  HTTPStatus enum
    response.py      Status line + header block
    renderer.py      Response body (templates, images, 404 page)

=============================================================================
"""

from .request import Request, read_request, parse_request, parse_request_line
from .mime_types import ContentType, CONTENT_TYPE_RULES, get_content_type
from .status_codes import HTTPStatus
from .response import ResponseHeader, build_header, write_header, format_http_date
from .renderer import (
    TemplateContext, TemplateRule, TEMPLATE_RULES,
    render, render_line, render_text, render_not_found, stream_bytes,
)

__all__ = [
    "Request",
    "read_request",
    "parse_request",
    "parse_request_line",
    "ContentType",
    "CONTENT_TYPE_RULES",
    "get_content_type",
    "HTTPStatus",
    "ResponseHeader",
    "build_header",
    "write_header",
    "format_http_date",
    "TemplateContext",
    "TemplateRule",
    "TEMPLATE_RULES",
    "render",
    "render_line",
    "render_text",
    "render_not_found",
    "stream_bytes",
]
