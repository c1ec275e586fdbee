"""
CLI module for EstreUI.
"""

import sys

from estreui.cli.main import app

KNOWN_COMMANDS = ["init", "update", "dev", "add", "remove", "version", "help"]


def normalize_args(args: list[str]) -> list[str]:
    """Treat an unknown first word as the project name of ``init``."""
    if args and args[0] not in KNOWN_COMMANDS and not args[0].startswith("-"):
        return ["init"] + args
    return args


def cli(args: list[str] | None = None):
    """Entry point for the CLI."""
    app(args=normalize_args(sys.argv[1:] if args is None else list(args)), prog_name="estreui")

__all__ = ['app', 'cli', 'normalize_args']
