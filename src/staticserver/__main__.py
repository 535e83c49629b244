"""
=============================================================================
STATIC SERVER CLI ENTRY POINT
=============================================================================

Command-line interface for running the static file server.

=============================================================================
USAGE
=============================================================================

    # Serve the current directory on port 6789
    python -m staticserver

    # Custom port and document root
    python -m staticserver --port 8000 --root ./public

    # Localhost only
    python -m staticserver --host 127.0.0.1

    # Cap the number of handler threads
    python -m staticserver --workers 32

    # JSON access log for a log shipper
    python -m staticserver --log-format json

Every flag falls back to its STATICSERVER_* environment variable, then
to the built-in default (see ServerConfig.from_env).

=============================================================================
EXIT STATUS
=============================================================================

    0   Stopped normally (Ctrl+C / SIGTERM)
    1   Port could not be bound, or the server crashed
    2   Bad arguments or invalid configuration

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig
from .errors import BindError
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Create the argument parser, with defaults taken from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Concurrent HTTP/1.0 static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserver                        # Serve . on port 6789
  python -m staticserver --port 8000            # Custom port
  python -m staticserver --root ./public        # Custom document root
  python -m staticserver --workers 32           # At most 32 handler threads
  python -m staticserver --log-format json      # JSON access log
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help=f"Directory to serve files from (default: {defaults.document_root})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help="Maximum handler threads (default: one thread per connection)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserver {__version__}"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Invalid environment configuration: {e}", file=sys.stderr)
        sys.exit(2)

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        document_root=args.root,
        max_workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    try:
        server = HTTPServer(config)
    except ValueError as e:
        parser.error(str(e))  # exits with status 2

    try:
        server.run()
    except BindError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Server error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
