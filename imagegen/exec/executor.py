"""
Executors for external commands.
Real execution streams combined output into the caller's sink; dry run only prints.
"""

import logging
import subprocess
from typing import TextIO

from ..exceptions import ExecutionError
from ..models import RunOptions

logger = logging.getLogger(__name__)


class Executor:
    """Runs an external command, writing its output to a text sink."""

    def run(self, output: TextIO, name: str, *args: str) -> None:
        raise NotImplementedError


class CommandExecutor(Executor):
    """
    Executes commands in argv mode (no shell).
    Stdout and stderr are merged and streamed line by line to the sink.
    Output is decoded as UTF-8 with undecodable bytes replaced.
    """

    def run(self, output: TextIO, name: str, *args: str) -> None:
        argv = [name, *args]
        logger.debug(f"Executing command: {argv}")

        try:
            process = subprocess.Popen(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ExecutionError(f"failed to execute command {argv}: {e}", argv) from e

        assert process.stdout is not None
        try:
            with process.stdout:
                for line in process.stdout:
                    output.write(line)
        finally:
            returncode = process.wait()

        if returncode != 0:
            raise ExecutionError(
                f"failed to execute command {argv}: exit status {returncode}",
                argv,
                returncode,
            )


class PrintCommandExecutor(Executor):
    """Dry run: writes the command line instead of running it."""

    def run(self, output: TextIO, name: str, *args: str) -> None:
        output.write(" ".join([name, *args]) + "\n")


class NoopExecutor(Executor):
    """Runs nothing. Used for tasks that are only present as dependencies."""

    def run(self, output: TextIO, name: str, *args: str) -> None:
        logger.debug(f"Skipping command: {[name, *args]}")


def executor_for(options: RunOptions, skipped: bool = False) -> Executor:
    """Pick the executor implementation for a task under the given run policy."""
    if skipped:
        return NoopExecutor()
    if options.dry_run:
        return PrintCommandExecutor()
    return CommandExecutor()
