"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps a resource path to the Content-Type of the response body.

=============================================================================
WHAT IS A MIME TYPE?
=============================================================================

MIME types tell the browser how to interpret the response body.
They follow the format: type/subtype

    ┌────────────────────────────────────────────────────────────────────┐
    │                    TYPES THIS SERVER KNOWS                         │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  text/html    → Rendered line by line, template tags substituted  │
    │  image/gif    → Streamed as raw bytes                              │
    │  image/jpeg   → Streamed as raw bytes                              │
    │  image/png    → Streamed as raw bytes                              │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

There is no "unknown" / application/octet-stream category. A .txt, a
.css, or a path with no extension at all is served as text/html, which
also means it goes through template substitution.

=============================================================================
MATCHING RULES
=============================================================================

Matching is a case-insensitive SUBSTRING test, not a suffix test, and
the rules are tried in a fixed order. The first hit wins:

    1. ".gif"   → GIF
    2. ".jpeg"  → JPEG
    3. ".png"   → PNG
    4. (none)   → HTML

    "photo.PNG"           → PNG   (case-insensitive)
    "a.gif.png"           → GIF   (GIF is tested before PNG)
    "archive.png.html"    → PNG   (substring, not suffix)
    "notes.jpg"           → HTML  (".jpg" is not ".jpeg")

=============================================================================
"""

from enum import Enum
from typing import Optional


class ContentType(Enum):
    """Response body types, valued by their MIME string."""

    HTML = "text/html"
    GIF = "image/gif"
    JPEG = "image/jpeg"
    PNG = "image/png"

    @property
    def mime_type(self) -> str:
        """The string sent in the Content-Type header."""
        return self.value

    @property
    def is_image(self) -> bool:
        """Images are streamed raw; everything else is rendered as text."""
        return self is not ContentType.HTML


# =============================================================================
# RULE TABLE
# =============================================================================
#
# Ordered (marker, type) pairs. Markers are lowercase; paths are lowercased
# before testing. Order is priority.
#
# =============================================================================

CONTENT_TYPE_RULES = (
    (".gif", ContentType.GIF),
    (".jpeg", ContentType.JPEG),
    (".png", ContentType.PNG),
)

DEFAULT_CONTENT_TYPE = ContentType.HTML


def get_content_type(path: Optional[str]) -> ContentType:
    """
    Classify a resource path.

    Args:
        path: The resource path from the request line. None (no GET line
              was seen) is classified like any other unmatched path.

    Returns:
        The first ContentType whose marker occurs in the path, or HTML.

    Examples:
        >>> get_content_type("photo.PNG")
        <ContentType.PNG: 'image/png'>

        >>> get_content_type("index.html")
        <ContentType.HTML: 'text/html'>
    """
    if not path:
        return DEFAULT_CONTENT_TYPE

    lowered = path.lower()
    for marker, content_type in CONTENT_TYPE_RULES:
        if marker in lowered:
            return content_type

    return DEFAULT_CONTENT_TYPE
