"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web worker server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m httpworker --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 python -m httpworker                       │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE DOCUMENT ROOT
=============================================================================

Every request path is looked up relative to document_root. The default
is ".", the process working directory, so running the server from a
folder serves that folder:

    $ cd ~/site && python -m httpworker
    GET /index.html   →   ~/site/index.html
    GET /img/a.png    →   ~/site/img/a.png

The request target is used as-is (no percent-decoding, no ".." checks),
so only point the root at content you are willing to expose.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the web worker server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout, max_line_size

    CONTENT
    - document_root, server_name

    LIFECYCLE
    - shutdown_timeout

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 8192
    """
    Size of each recv() and of each chunk when streaming image files.
    """

    timeout: Optional[float] = 30.0
    """
    Socket read timeout in seconds.
    A client that connects and never finishes its header block is given
    this long before the worker stops waiting.
    None = block forever.
    """

    max_line_size: int = 8192
    """Longest request/header line accepted before the read is aborted."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """Directory that request paths are resolved against."""

    server_name: str = "httpworker/1.0"
    """
    Value of the Server header, also used by the <cs371server> template tag.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIFECYCLE
    # ─────────────────────────────────────────────────────────────────────

    shutdown_timeout: float = 5.0
    """How long shutdown waits for in-flight workers to finish."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST         Server host (default: 127.0.0.1)
        HTTP_PORT         Server port (default: 8080)
        HTTP_ROOT         Document root (default: .)
        HTTP_TIMEOUT      Read timeout in seconds (default: 30)
        HTTP_LOG_LEVEL    Logging level (default: INFO)
        HTTP_SERVER_NAME  Server header value (default: httpworker/1.0)

        =====================================================================
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            document_root=os.getenv("HTTP_ROOT", "."),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            server_name=os.getenv("HTTP_SERVER_NAME", "httpworker/1.0"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once when the server is constructed so that a bad value
        fails at startup, not on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_line_size < 256:
            raise ValueError("max_line_size must be >= 256")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.shutdown_timeout < 0:
            raise ValueError("shutdown_timeout must be >= 0")

        if not os.path.isdir(self.document_root):
            raise ValueError(f"document_root is not a directory: {self.document_root}")

        if "\r" in self.server_name or "\n" in self.server_name:
            raise ValueError("server_name must not contain line breaks")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with a dataclass
# 2. Environment variable support (from_env)
# 3. Validation at startup (fail-fast)
# 4. Defaults that serve the working directory on localhost:8080
# =============================================================================
