"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per handled connection, on the "httpworker.access" logger.

    127.0.0.1 - - [18/Oct/2026:07:06:00 +0000] "GET /index.html HTTP/1.1" 200 412 1.32ms
    ─────────       ──────────────────────────  ─────────────────────────  ─── ─── ──────
        │                     │                            │                │   │    │
     client IP            timestamp                  request line        status │ duration
                                                                          bytes sent

Status is "-" when the worker failed before a header was written.

Route these lines elsewhere with the standard logging API:

    logging.getLogger("httpworker.access").addHandler(file_handler)

=============================================================================
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger("httpworker.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one connection.

    Attributes:
        connection_id: Short id shared with the worker's other log lines.
        client_ip: Client's IP address.
        request_line: First line of the request ("" if none arrived).
        status_code: Status sent, or None if no header was written.
        bytes_sent: Header and body bytes written.
        duration_ms: Time from accept to close.
        timestamp: When the entry was created.
    """

    connection_id: str
    client_ip: str
    request_line: str
    status_code: Optional[int]
    bytes_sent: int
    duration_ms: float
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def to_text(self) -> str:
        """Format in an Apache-style common log layout."""
        status = self.status_code if self.status_code is not None else "-"
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {status} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog, level: int = logging.INFO) -> None:
    """Emit an access log entry."""
    logger.log(level, entry.to_text())
