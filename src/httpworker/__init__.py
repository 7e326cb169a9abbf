"""
=============================================================================
HTTPWORKER - Single-Request HTTP/1.1 File Server
=============================================================================

Serves files from a directory over raw sockets, one worker thread per
connection, one response per connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /index.html   → text/html, <cs371date> / <cs371server>        │
    │                       template tags filled in line by line          │
    │                                                                      │
    │   GET /logo.png     → image/png (also .gif, .jpeg), raw bytes       │
    │                                                                      │
    │   anything missing  → 404 Not Found                                  │
    │   anything not GET  → 404 Not Found                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m httpworker)
    ├── server.py            # WebServer: accept loop + worker threads
    ├── worker.py            # WebWorker: one connection, one response
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Per-connection access log lines
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   └── connection.py    # Buffered line reads, writes, close
    ├── http/
    │   ├── request.py       # Request line → resource path
    │   ├── mime_types.py    # Resource path → ContentType
    │   ├── status_codes.py  # HTTPStatus enum
    │   ├── response.py      # Status line + header block
    │   └── renderer.py      # Body: templates, images, 404 page
    └── handlers/
        └── static.py        # Resource: file lookup held open per request

=============================================================================
QUICK START
=============================================================================

    from httpworker import WebServer, ServerConfig

    WebServer(ServerConfig(port=8080, document_root="./site")).run()

or from a shell:

    python -m httpworker --root ./site --port 8080

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig
from .worker import WebWorker

__all__ = ["WebServer", "ServerConfig", "WebWorker", "__version__"]
