"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    SocketServer   Listening socket and accept loop
    Connection     One client socket: line reads, writes, graceful close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",       # Accepts connections
    "Connection",         # Wrapper for a client socket
    "ConnectionState",    # Enum for connection lifecycle states
]
