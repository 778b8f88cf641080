#!/usr/bin/env python3
"""
Idea Board - session and idea feed dashboard.

Command-line entry point that validates configuration and serves the
Flask dashboard:
  - Connects to the configured Appwrite project (or an in-memory backend)
  - Probes for an existing session on startup
  - Serves the JSON API for login/logout and the idea feed

Usage:
    python main.py                      # Serve against Appwrite
    python main.py --mock               # Serve against the in-memory backend
    python main.py --show-config        # Print configuration and exit

Examples:
    # Local development without an Appwrite project
    python main.py --mock --debug

    # Per-request feed stores, local filtering after deletes
    python main.py --feed-binding per_request --remove-strategy local_filter
"""

import argparse
import sys

from ideaboard import __version__
from ideaboard.backend import MockBackendClient
from ideaboard.config import (
    WEB_HOST,
    WEB_PORT,
    ConfigurationError,
    print_config_summary,
    validate_config,
)
from ideaboard.feed import BINDINGS, RemoveStrategy
from web.app import create_app


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="idea-board",
        description="Serve the Idea Board dashboard backed by Appwrite.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   Serve against Appwrite
  %(prog)s --mock                            Serve against in-memory backend
  %(prog)s --port 8080                       Listen on another port
  %(prog)s --feed-binding per_request        Fresh feed store per request
  %(prog)s --remove-strategy local_filter    Filter locally after deletes
  %(prog)s --show-config                     Print configuration and exit
        """,
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the in-memory backend instead of Appwrite (no config needed)",
    )

    parser.add_argument(
        "--host",
        default=WEB_HOST,
        help=f"Interface to listen on (default: {WEB_HOST})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=WEB_PORT,
        metavar="PORT",
        help=f"Port to listen on (default: {WEB_PORT})",
    )

    parser.add_argument(
        "--feed-binding",
        choices=sorted(BINDINGS),
        default="shared",
        help="How idea feed stores are scoped (default: shared)",
    )

    parser.add_argument(
        "--remove-strategy",
        choices=[s.value for s in RemoveStrategy],
        default=RemoveStrategy.REFETCH.value,
        help="How the feed is reconciled after a delete (default: refetch)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run Flask in debug mode",
    )

    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def show_config() -> int:
    """Display current configuration. Returns 1 if it is incomplete."""
    print("=" * 60)
    print("Idea Board Configuration")
    print("=" * 60)
    print_config_summary()

    errors = validate_config()
    if errors:
        print("\nConfiguration errors:")
        for error in errors:
            print(f"  ⚠️  {error}")
    else:
        print("\n✓ Configuration valid")
    print("=" * 60)
    return 1 if errors else 0


def main(argv: list = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 = success, 1 = error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.show_config:
        return show_config()

    backend = MockBackendClient() if args.mock else None

    try:
        app = create_app(
            backend=backend,
            feed_binding=args.feed_binding,
            remove_strategy=RemoveStrategy(args.remove_strategy),
        )
    except ConfigurationError as e:
        print("❌ Cannot start: configuration is incomplete")
        for error in e.errors:
            print(f"  - {error}")
        print("Set the variables in .env, or run with --mock")
        return 1

    print("=" * 60)
    print("Idea Board Dashboard")
    print("=" * 60)
    print(f"Backend:      {'mock (in-memory)' if args.mock else 'appwrite'}")
    print(f"Feed binding: {args.feed_binding}")
    print(f"Remove:       {args.remove_strategy}")
    print(f"Open http://{args.host}:{args.port}")
    print("=" * 60)

    try:
        app.run(host=args.host, port=args.port, debug=args.debug)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
