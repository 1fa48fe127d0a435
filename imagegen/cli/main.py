"""Main CLI entry point for imagegen."""

import argparse
import sys
from typing import Optional

from .commands import run_command


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by every action command."""
    parser.add_argument(
        'names',
        nargs='*',
        metavar='NAME',
        help='Builds to operate on (default: all builds in the configuration)'
    )
    parser.add_argument(
        '--config',
        type=str,
        required=True,
        help='Path to configuration YAML file'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print commands that would be run without running them'
    )
    parser.add_argument(
        '--no-deps',
        action='store_true',
        help='Run commands only for the specified builds (do not run them for dependencies)'
    )
    parser.add_argument(
        '--tool',
        type=str,
        default='docker',
        help='Container build tool to invoke'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='warn',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the imagegen CLI."""
    parser = argparse.ArgumentParser(
        prog='imagegen',
        description='Builds, tags and publishes container images based on templates'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    build_parser = subparsers.add_parser(
        'build',
        help='Build and tag the images specified in the configuration'
    )
    add_common_arguments(build_parser)

    push_parser = subparsers.add_parser(
        'push',
        help='Push the tags of the images specified in the configuration'
    )
    add_common_arguments(push_parser)

    tags_parser = subparsers.add_parser(
        'tags',
        help='Print the tags of the images specified in the configuration'
    )
    add_common_arguments(tags_parser)

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    return run_command(parsed_args)


if __name__ == '__main__':
    sys.exit(main())
