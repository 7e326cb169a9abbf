"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Callable, Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpworker import WebServer, ServerConfig


# Smallest valid PNG: signature + IHDR + IDAT + IEND for a 1x1 image.
# Contains "\r\n", "\n" and NUL bytes, so text-mode handling would corrupt it.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc33000000"
    "0049454e44ae426082"
)

GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A document root with HTML, images, and a directory."""
    (tmp_path / "index.html").write_bytes(
        b"<html>\n"
        b"<body>\n"
        b"Hello <cs371date> World\n"
        b"<p>ignored <CS371Server> text</p>\n"
        b"</body>\n"
        b"</html>\n"
    )
    (tmp_path / "plain.html").write_bytes(b"line one\r\nline two\nno newline")
    (tmp_path / "photo.PNG").write_bytes(PNG_BYTES)
    (tmp_path / "anim.gif").write_bytes(GIF_BYTES)
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "page.html").write_bytes(b"<p>nested</p>\n")
    return tmp_path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(site: Path, free_port: int) -> ServerConfig:
    """Test server configuration serving the `site` fixture."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        timeout=5.0,
        document_root=str(site),
        log_level="WARNING",
        shutdown_timeout=2.0,
    )


def send_request(port: int, raw: bytes, timeout: float = 5.0) -> bytes:
    """Send raw request bytes and read the response until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(raw)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def split_response(response: bytes):
    """Split a response into (status line, headers dict, body)."""
    head, _, body = response.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and return the full response."""
        return send_request(self.port, raw)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on a free port."""
    test_srv = TestServer(WebServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def response_parts() -> Callable:
    """Splits a raw response into (status line, headers, body)."""
    return split_response
