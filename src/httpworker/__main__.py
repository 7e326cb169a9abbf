"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m httpworker

    # Another directory and port
    python -m httpworker --root ./site --port 3000

    # Listen on all interfaces (for containers)
    python -m httpworker --host 0.0.0.0

Configuration is read from the environment first (see
ServerConfig.from_env), then any flag given on the command line wins.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import WebServer
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser. Flags default to None so unset ones fall back to the environment."""
    parser = argparse.ArgumentParser(
        prog="httpworker",
        description="Single-request HTTP/1.1 file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpworker                      # Serve . on 127.0.0.1:8080
  python -m httpworker --root ./site        # Serve another directory
  python -m httpworker --port 3000          # Custom port
  python -m httpworker --host 0.0.0.0       # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Seconds to wait for request headers (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root (default: current directory)"
    )

    parser.add_argument(
        "--server-name",
        default=None,
        help="Server header and <cs371server> value (default: httpworker/1.0)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpworker {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment configuration with command-line overrides applied."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.root is not None:
        config.document_root = args.root
    if args.server_name is not None:
        config.server_name = args.server_name
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        server = WebServer(config_from_args(args))
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
