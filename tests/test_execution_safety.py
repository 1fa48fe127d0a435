"""
Test command execution with argv mode (no shell).
Validates output streaming, failure reporting and the dry-run executors.
"""

import io
import sys

import pytest

from imagegen.exceptions import ExecutionError
from imagegen.exec.executor import (
    CommandExecutor,
    NoopExecutor,
    PrintCommandExecutor,
    executor_for,
)
from imagegen.models import RunOptions


class TestCommandExecutor:
    """Test real command execution."""

    def test_output_streamed_to_sink(self):
        output = io.StringIO()

        CommandExecutor().run(output, sys.executable, "-c", "print('hello'); print('world')")

        assert output.getvalue() == "hello\nworld\n"

    def test_stderr_merged_into_sink(self):
        output = io.StringIO()

        CommandExecutor().run(
            output,
            sys.executable,
            "-c",
            "import sys; sys.stderr.write('warning\\n'); sys.stderr.flush(); print('done')",
        )

        assert "warning" in output.getvalue()
        assert "done" in output.getvalue()

    def test_special_characters_passed_literally(self):
        """Arguments are not interpreted by a shell."""
        output = io.StringIO()

        CommandExecutor().run(
            output, sys.executable, "-c", "import sys; print(sys.argv[1:])", "$HOME", "&&", "ls"
        )

        assert output.getvalue() == "['$HOME', '&&', 'ls']\n"

    def test_non_zero_exit_raises(self):
        output = io.StringIO()
        argv = [sys.executable, "-c", "print('partial'); raise SystemExit(3)"]

        with pytest.raises(ExecutionError) as exc_info:
            CommandExecutor().run(output, *argv)

        error = exc_info.value
        assert error.returncode == 3
        assert error.command == argv
        assert error.exit_code == 1
        assert "exit status 3" in str(error)
        assert output.getvalue() == "partial\n"

    def test_undecodable_output_replaced(self):
        output = io.StringIO()

        CommandExecutor().run(output, "printf", "ok \\377\\n")

        assert output.getvalue() == "ok �\n"

    def test_undecodable_output_before_failure(self):
        with pytest.raises(ExecutionError) as exc_info:
            CommandExecutor().run(io.StringIO(), "sh", "-c", "printf 'bad \\377\\n'; exit 4")

        assert exc_info.value.returncode == 4

    def test_missing_binary_raises(self):
        with pytest.raises(ExecutionError) as exc_info:
            CommandExecutor().run(io.StringIO(), "imagegen-no-such-binary", "build")

        assert exc_info.value.returncode is None
        assert "failed to execute command ['imagegen-no-such-binary', 'build']" in str(exc_info.value)


class TestDryRunExecutors:
    """Test executors that do not run anything."""

    def test_print_executor_writes_command_line(self):
        output = io.StringIO()

        PrintCommandExecutor().run(output, "docker", "build", "-t", "app:1", ".")

        assert output.getvalue() == "docker build -t app:1 .\n"

    def test_print_executor_without_arguments(self):
        output = io.StringIO()
        PrintCommandExecutor().run(output, "true")
        assert output.getvalue() == "true\n"

    def test_noop_executor_writes_nothing(self):
        output = io.StringIO()
        NoopExecutor().run(output, "docker", "push", "app:1")
        assert output.getvalue() == ""


class TestExecutorSelection:
    """Test executor choice from the run policy."""

    def test_default_is_real_execution(self):
        assert isinstance(executor_for(RunOptions()), CommandExecutor)

    def test_dry_run(self):
        assert isinstance(executor_for(RunOptions(dry_run=True)), PrintCommandExecutor)

    def test_skipped_wins_over_dry_run(self):
        assert isinstance(executor_for(RunOptions(dry_run=True), skipped=True), NoopExecutor)
