"""CLI command handlers."""

from .run import run_command

__all__ = ['run_command']
