"""Shared fixtures for imagegen tests."""

import io
from pathlib import Path
from typing import List, Optional

import pytest

from imagegen.exceptions import ExecutionError
from imagegen.exec.executor import Executor


class RecordingExecutor(Executor):
    """Records every command instead of running it.

    For build commands the contents of the '-f' file are captured at call time,
    since the file is removed once the command returns.
    """

    def __init__(self, fail_on: Optional[str] = None):
        self.commands: List[List[str]] = []
        self.artifacts: List[str] = []
        self.fail_on = fail_on

    def run(self, output, name, *args):
        argv = [name, *args]
        self.commands.append(argv)
        if "-f" in args:
            self.artifacts.append(Path(args[args.index("-f") + 1]).read_text())
        if self.fail_on is not None and self.fail_on in args:
            raise ExecutionError(f"failed to execute command {argv}: exit status 1", argv, 1)


@pytest.fixture
def recorder():
    return RecordingExecutor()


@pytest.fixture
def make_recorder():
    """Factory for recording executors that fail on a given argument."""
    return RecordingExecutor


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture(autouse=True)
def clear_build_id(monkeypatch):
    """Keep the environment's BUILD_ID out of tests."""
    monkeypatch.delenv("BUILD_ID", raising=False)
