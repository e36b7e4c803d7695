"""
mockwire CLI

Command-line interface for running the mock server from mapping files.

Commands:
    serve       - Start the mock server with mappings from files
    check       - Validate a mapping file and list its mappings

Examples:
    # Serve mappings on port 9001
    mockwire serve -p 9001 -m mappings.yaml

    # Validate a mapping file
    mockwire check mappings.json
"""

import argparse
import json
import logging
import os
import sys
import time
from typing import List, Optional

from .errors import MockServerError
from .mock.mapping_file import apply_mappings, entries_to_dict, load_mappings
from .mock.server import MockServer, ServerConfig


DEFAULT_PORT = '9001'


def cmd_serve(args) -> int:
    """
    Start the mock server and block until interrupted.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    print(f"🎭 mockwire Mock Server")

    try:
        entries = []
        for mapping_file in args.mappings or []:
            loaded = load_mappings(mapping_file)
            print(f"   Loaded {len(loaded)} mappings from {mapping_file}")
            entries.extend(loaded)

        config = ServerConfig(
            host=args.host,
            log_level=args.log_level,
            admin_enabled=args.admin
        )
        server = apply_mappings(MockServer(config), entries)
        server.start(args.port)
    except (MockServerError, FileNotFoundError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(f"   Listening on http://{args.host}:{server.port}")
    if args.admin:
        print(f"   Admin API: http://{args.host}:{server.port}{config.admin_prefix}/mappings")
    print(f"   Press Ctrl+C to stop")
    print()

    try:
        wait_until_stopped(server)
    except KeyboardInterrupt:
        print("\n🛑 Stopping mock server")
    finally:
        server.close()

    return 0


def wait_until_stopped(server, poll_interval: float = 0.5) -> None:
    """Block while the server is up."""
    while server.is_server_up():
        time.sleep(poll_interval)


def cmd_check(args) -> int:
    """
    Validate a mapping file and print its mappings.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    try:
        entries = load_mappings(args.mapping_file)
    except (MockServerError, FileNotFoundError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(entries_to_dict(entries), indent=2, ensure_ascii=False))
        return 0

    print(f"✓ {args.mapping_file}: {len(entries)} mappings")
    for index, entry in enumerate(entries):
        request = entry.request
        method = request.method or '*'
        url = request.url or '*'
        data = f" data~{request.data}" if request.data else ''
        print(f"   #{index} {method} {url}{data}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='mockwire',
        description="mockwire - programmable mock HTTP server for test scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve mappings on port 9001
  %(prog)s serve -p 9001 -m mappings.yaml

  # Validate a mapping file
  %(prog)s check mappings.json
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Start the mock server')
    serve_parser.add_argument('-p', '--port', default=os.environ.get('MOCKWIRE_PORT', DEFAULT_PORT),
                              help=f'Port to bind, 1025-49151 (default: $MOCKWIRE_PORT or {DEFAULT_PORT})')
    serve_parser.add_argument('--host', default='127.0.0.1', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('-m', '--mappings', nargs='+', help='Mapping files (JSON or YAML)')
    serve_parser.add_argument('--admin', action='store_true', help='Enable the read-only admin API')
    serve_parser.add_argument('--log-level', default=os.environ.get('MOCKWIRE_LOG_LEVEL', 'info'),
                              choices=['debug', 'info', 'warning', 'error'],
                              help='Log level (default: $MOCKWIRE_LOG_LEVEL or info)')

    # --- CHECK command ---
    check_parser = subparsers.add_parser('check', help='Validate a mapping file')
    check_parser.add_argument('mapping_file', help='Mapping file (JSON or YAML)')
    check_parser.add_argument('--json', action='store_true', help='Print the normalized mappings as JSON')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'serve':
        logging.basicConfig(
            level=getattr(logging, args.log_level.upper()),
            format='%(asctime)s %(levelname)s %(name)s: %(message)s'
        )
        return cmd_serve(args)
    elif args.command == 'check':
        return cmd_check(args)

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
