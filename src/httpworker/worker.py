"""
=============================================================================
WEB WORKER
=============================================================================

Handles exactly one accepted connection, start to finish, on its own
thread. This is the whole request/response protocol of the server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        WebWorker.run()                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_request(conn.iter_lines())   → Request(path="index.html")    │
    │           │                                                          │
    │   get_content_type(path)            → ContentType.HTML               │
    │           │                                                          │
    │   Resource.open(root, path)         → exists? (file held open)       │
    │           │                                                          │
    │   write_header(...)                 → "HTTP/1.1 200 OK" ... "\r\n"   │
    │           │                                                          │
    │   render(...)                       → body bytes                     │
    │           │                                                          │
    │   close resource, close connection, write access log line           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Workers share nothing. The filesystem is only ever read, so any number
of them can run at once without locks.

=============================================================================
FAILURES
=============================================================================

    Not a GET / garbage request line   → 404, normal flow
    File missing or a directory        → 404, normal flow
    Image missing (after 404 header)   → fault
    Socket reset, disk error, EACCES   → fault

A fault is logged with its traceback and the connection is closed. The
client sees whatever bytes were already sent, then EOF. Nothing
propagates to the accept loop or to other workers.

=============================================================================
"""

import time
import logging
from typing import Optional

from .config import ServerConfig
from .core.connection import Connection
from .handlers.static import Resource
from .http.mime_types import get_content_type
from .http.renderer import render
from .http.request import Request, read_request
from .http.response import write_header
from .access_log import RequestLog, log_request


logger = logging.getLogger(__name__)


class WebWorker:
    """
    Serves one HTTP request on one connection.

        worker = WebWorker(conn, config)
        threading.Thread(target=worker.run).start()
    """

    def __init__(self, connection: Connection, config: ServerConfig):
        self.connection = connection
        self.config = config

        self.request: Optional[Request] = None
        self.status: Optional[int] = None

    def run(self) -> None:
        """
        Worker entry point. Never raises.

        The connection is closed when this returns, whatever happened.
        """
        conn = self.connection
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")

        try:
            with conn:
                self.handle()
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
        finally:
            self._log_access()
            logger.debug(f"[{conn.id}] Done handling connection")

    def handle(self) -> None:
        """
        Read the request and write the response.

        Raises:
            OSError: Any I/O fault, including a missing image
                     (ResourceNotFoundError) at render time.
        """
        conn = self.connection

        self.request = read_request(conn.iter_lines())
        content_type = get_content_type(self.request.path)

        with Resource.open(self.config.document_root, self.request.path) as resource:
            self.status = write_header(
                conn,
                content_type,
                resource.exists,
                self.config.server_name,
            )
            render(
                conn,
                content_type,
                resource,
                self.config.server_name,
                chunk_size=self.config.buffer_size,
            )

    def _log_access(self) -> None:
        conn = self.connection
        log_request(RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            request_line=self.request.request_line if self.request else "",
            status_code=int(self.status) if self.status is not None else None,
            bytes_sent=conn.bytes_sent,
            duration_ms=(time.time() - conn.created_at) * 1000,
        ))
