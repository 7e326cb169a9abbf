"""
Integration tests: a real WebServer on a real TCP port.
"""

import re
import socket
import threading
import time

from httpworker import WebServer, ServerConfig


class TestServerScenarios:
    """Request/response scenarios over TCP."""

    def test_index_with_date(self, test_server, response_parts):
        response = test_server.request(
            b"GET /index.html HTTP/1.1\r\nHost: localhost\r\nUser-Agent: pytest\r\n\r\n"
        )
        status_line, headers, body = response_parts(response)

        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert re.search(rb"Hello .+<br> World", body)
        assert b"<cs371date>" not in body.lower()

    def test_missing_html(self, test_server, response_parts):
        status_line, headers, body = response_parts(
            test_server.request(b"GET /missing.html HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 404 Not Found"
        assert headers["Content-Type"] == "text/html"
        assert b"Error: 404 Not Found" in body

    def test_png(self, test_server, site, response_parts):
        status_line, headers, body = response_parts(
            test_server.request(b"GET /photo.PNG HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "image/png"
        assert body == (site / "photo.PNG").read_bytes()

    def test_post(self, test_server, response_parts):
        status_line, _, body = response_parts(
            test_server.request(b"POST /x HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 404 Not Found"
        assert b"Error: 404 Not Found" in body

    def test_large_image_streamed(self, test_server, site, response_parts):
        data = bytes(range(256)) * 4096  # 1 MiB
        (site / "big.jpeg").write_bytes(data)

        _, headers, body = response_parts(
            test_server.request(b"GET /big.jpeg HTTP/1.1\r\n\r\n")
        )

        assert headers["Content-Type"] == "image/jpeg"
        assert len(body) == len(data)
        assert body == data


class TestConcurrency:
    """One worker per connection."""

    def test_slow_client_does_not_block_others(self, test_server, response_parts):
        """Test that a client stuck mid-headers does not delay another client."""
        slow = socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0)
        try:
            slow.sendall(b"GET /index.html HTTP/1.1\r\n")  # No blank line yet

            start = time.time()
            status_line, _, _ = response_parts(
                test_server.request(b"GET /plain.html HTTP/1.1\r\n\r\n")
            )
            assert status_line == "HTTP/1.1 200 OK"
            assert time.time() - start < 2.0

            slow.sendall(b"\r\n")
            chunks = []
            while True:
                chunk = slow.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
            assert b"".join(chunks).startswith(b"HTTP/1.1 200 OK\r\n")
        finally:
            slow.close()

    def test_parallel_requests(self, test_server, site):
        expected = (site / "photo.PNG").read_bytes()
        results = []
        lock = threading.Lock()

        def fetch():
            response = test_server.request(b"GET /photo.PNG HTTP/1.1\r\n\r\n")
            with lock:
                results.append(response.partition(b"\r\n\r\n")[2])

        threads = [threading.Thread(target=fetch) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert len(results) == 10
        assert all(body == expected for body in results)


class TestLifecycle:
    """Startup and shutdown."""

    def test_read_timeout_still_answers(self, site, free_port):
        """Test that a client that never ends its headers gets a response after the timeout."""
        server = WebServer(ServerConfig(
            port=free_port,
            document_root=str(site),
            timeout=0.3,
            log_level="WARNING",
        ))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)

        try:
            with socket.create_connection(("127.0.0.1", free_port), timeout=5.0) as s:
                s.sendall(b"GET /plain.html HTTP/1.1\r\nHost: x\r\n")
                data = b""
                while True:
                    chunk = s.recv(4096)
                    if not chunk:
                        break
                    data += chunk
            assert data.startswith(b"HTTP/1.1 200 OK\r\n")
        finally:
            server.shutdown()
            thread.join(timeout=5.0)

    def test_shutdown_stops_accepting(self, site, free_port):
        server = WebServer(ServerConfig(port=free_port, document_root=str(site), log_level="WARNING"))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)

        server.shutdown()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert server.active_workers == 0

    def test_port_zero_binds_free_port(self, site):
        server = WebServer(ServerConfig(port=0, document_root=str(site), log_level="WARNING"))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        try:
            assert server.wait_until_ready(timeout=5.0)
            assert server.address[1] != 0
        finally:
            server.shutdown()
            thread.join(timeout=5.0)
