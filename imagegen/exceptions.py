"""imagegen exceptions."""

from typing import List, Optional, Sequence
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class ConfigValidationError(Exception):
    """Raised when configuration validation fails.

    Raised by the loader, the dependency graph and the orchestrator before any
    external action runs, allowing the CLI to map it to the validation exit code.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        messages = []
        for error in errors:
            messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))


class SelectionError(Exception):
    """Raised when requested task names are not defined in configuration."""

    def __init__(self, unknown: Sequence[str], valid: Sequence[str]):
        self.unknown = sorted(unknown)
        self.valid = sorted(valid)
        self.exit_code = 2
        super().__init__(
            f"The following specified entries were not defined in configuration: {self.unknown}\n"
            f"Valid entries: {self.valid}"
        )


class BuildError(Exception):
    """Base class for failures while a run is in progress.

    Callers add context (task, iteration, template) while the error propagates;
    the exception type is preserved so handlers can still tell kinds apart.
    """

    exit_code = 1

    def __init__(self, message: str):
        self.message = message
        self.context: List[str] = []
        super().__init__(message)

    def add_context(self, context: str) -> "BuildError":
        """Prefix the message with context. Outermost context is added last."""
        self.context.insert(0, context)
        return self

    def __str__(self) -> str:
        return ": ".join(self.context + [self.message])


class RenderError(BuildError):
    """Template parse or evaluation failure."""

    def __init__(self, message: str, purpose: Optional[str] = None):
        super().__init__(message)
        self.purpose = purpose


class EmptyTagError(BuildError):
    """Rendered tag and suffix produced an empty string."""


class ArtifactError(BuildError):
    """The artifact template could not be read or written out."""


class ExecutionError(BuildError):
    """External command failed to start or exited non-zero."""

    def __init__(self, message: str, command: Sequence[str], returncode: Optional[int] = None):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
