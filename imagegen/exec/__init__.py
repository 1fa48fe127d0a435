"""
Execution module for imagegen.
Handles running external build tools or printing what would be run.
"""

from .executor import (
    Executor,
    CommandExecutor,
    PrintCommandExecutor,
    NoopExecutor,
    executor_for,
)

__all__ = [
    "Executor",
    "CommandExecutor",
    "PrintCommandExecutor",
    "NoopExecutor",
    "executor_for",
]
