"""
=============================================================================
WEB SERVER
=============================================================================

Ties configuration, logging, the accept loop and the workers together.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │    WebServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │                  ┌──────────────┴──────────────┐                     │
    │                  ▼                             ▼                     │
    │          ┌──────────────┐             ┌────────────────┐             │
    │          │ SocketServer │  accept()   │ worker threads │             │
    │          │ (main thread)│ ──────────► │ one per conn.  │             │
    │          └──────────────┘             └───────┬────────┘             │
    │                                               ▼                      │
    │                                       ┌──────────────┐               │
    │                                       │  WebWorker   │               │
    │                                       │  .run()      │               │
    │                                       └──────────────┘               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THREAD PER CONNECTION
=============================================================================

Each accepted connection gets a fresh daemon thread running a WebWorker.
The thread lives for exactly one request. Workers hand nothing back to
the server; the server only remembers which threads are alive so that
shutdown can wait for them.

    accept ──► Thread(worker-3f2a1b9c) ──► read ─► write ─► close ─► exit
    accept ──► Thread(worker-77c0d1e4) ──► read ─► write ─► close ─► exit

=============================================================================
GRACEFUL SHUTDOWN
=============================================================================

    1. Stop accepting (SIGINT / SIGTERM / shutdown())
    2. Join live workers, up to shutdown_timeout seconds
    3. Anything still running is a daemon thread and dies with the process

=============================================================================
"""

import logging
import threading
from typing import Optional, Set, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .worker import WebWorker


logger = logging.getLogger(__name__)


class WebServer:
    """
    Multi-threaded single-request HTTP server.

    =========================================================================
    USAGE
    =========================================================================

        server = WebServer(ServerConfig(port=8080, document_root="./site"))
        server.run()   # Blocks until Ctrl+C

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)

        self._workers: Set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), once the server is listening."""
        return self._socket_server.address

    @property
    def active_workers(self) -> int:
        """Number of worker threads still running."""
        with self._workers_lock:
            return sum(1 for t in self._workers if t.is_alive())

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._running = True
        self._setup_logging()

        logger.info(f"Serving {self.config.document_root} as {self.config.server_name}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. Safe to call from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("httpworker").setLevel(level)

    def _shutdown(self):
        """Wait for in-flight workers, then report."""
        logger.info("Shutting down server...")
        self._running = False

        with self._workers_lock:
            workers = list(self._workers)

        for thread in workers:
            thread.join(timeout=self.config.shutdown_timeout)
            if thread.is_alive():
                logger.warning(f"{thread.name} still running after {self.config.shutdown_timeout}s")

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a new connection.

        Called by SocketServer on the accept thread.
        """
        worker = WebWorker(conn, self.config)
        thread = threading.Thread(
            target=self._run_worker,
            args=(worker,),
            name=f"worker-{conn.id}",
            daemon=True,
        )

        with self._workers_lock:
            self._workers.add(thread)

        try:
            thread.start()
        except RuntimeError as e:
            # Thread limit reached
            logger.error(f"[{conn.id}] Could not start worker: {e}")
            with self._workers_lock:
                self._workers.discard(thread)
            conn.close()

    def _run_worker(self, worker: WebWorker):
        try:
            worker.run()
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())
