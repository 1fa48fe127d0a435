"""
Data model for build tasks and run configuration.

Task and RunParams are produced once by the loader and never mutated during a run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Mapping

if TYPE_CHECKING:
    from .exec.executor import Executor


# Names of the functions exposed to templates; variables may not shadow them
TEMPLATE_FUNCTION_NAMES = frozenset({"Getenv", "BuildID", "Tag", "OuterIdx", "InnerIdx"})


class Action(str, Enum):
    """Action applied to every task instantiation."""
    BUILD = "build"
    PUSH = "push"
    TAGS = "tags"


def validate_for_vars(for_vars: Mapping[str, List[str]], label: str) -> List[str]:
    """
    Check that every list of a 'for' mapping has the same length.

    Returns:
        List of validation error messages (empty if valid)
    """
    names = sorted(for_vars)
    lengths = {len(for_vars[name]) for name in names}
    if len(lengths) <= 1:
        return []

    parts = [f"Length of all {label} 'for' variable arrays must be the same:"]
    for name in names:
        parts.append(f"{name}: {len(for_vars[name])}")
    return ["\n\t".join(parts)]


def _reserved_names(names) -> List[str]:
    return sorted(name for name in names if name in TEMPLATE_FUNCTION_NAMES)


@dataclass(frozen=True)
class Task:
    """
    A named image build definition.

    Attributes:
        name: Unique task name
        artifact_template_path: Path of the template rendered into the build file
        tag_template: Template producing the image tag (before suffix)
        requires: Names of tasks that must be processed first
        for_vars: Inner iteration bindings, variable name -> value templates
    """
    name: str
    artifact_template_path: str = ""
    tag_template: str = ""
    requires: List[str] = field(default_factory=list)
    for_vars: Dict[str, List[str]] = field(default_factory=dict)

    def validate(self) -> List[str]:
        errors = [f"Task '{self.name}': {e}" for e in validate_for_vars(self.for_vars, "inner")]
        reserved = _reserved_names(self.for_vars)
        if reserved:
            errors.append(f"Task '{self.name}': 'for' variables shadow template functions: {reserved}")
        return errors


@dataclass(frozen=True)
class RunParams:
    """
    Run-wide configuration.

    Attributes:
        build_id_env_var: Environment variable holding the build identifier
        template_vars: Variables rendered once per run
        tag_suffix_template: Template appended to every tag (default '-{{ BuildID() }}')
        for_vars: Outer iteration bindings applied to every task
    """
    build_id_env_var: str = ""
    template_vars: Dict[str, str] = field(default_factory=dict)
    tag_suffix_template: str = ""
    for_vars: Dict[str, List[str]] = field(default_factory=dict)

    def validate(self) -> List[str]:
        """
        Validate run parameters.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        duplicates = sorted(k for k in self.template_vars if k in self.for_vars)
        if duplicates:
            errors.append(
                f"the following variables were defined as both template and for variables: {duplicates}"
            )

        errors.extend(validate_for_vars(self.for_vars, "outer"))

        reserved = _reserved_names(list(self.template_vars) + list(self.for_vars))
        if reserved:
            errors.append(f"variables shadow template functions: {reserved}")

        return errors

    def validate_task(self, task: Task) -> List[str]:
        """Check a task's own bindings, including collisions with template variables."""
        errors = task.validate()
        duplicates = sorted(k for k in self.template_vars if k in task.for_vars)
        if duplicates:
            errors.append(
                f"Task '{task.name}': the following variables were defined as both "
                f"template and for variables: {duplicates}"
            )
        return errors


@dataclass(frozen=True)
class RunOptions:
    """Explicit run policy threaded through selection and actions."""
    dry_run: bool = False
    no_deps: bool = False
    tool: str = "docker"


@dataclass(frozen=True)
class ScheduledTask:
    """
    A task paired with the executor it runs through.

    Attributes:
        task: Task definition
        executor: Executor used by build and push actions
        skipped: True for tasks pulled in only as dependencies in no-deps mode
    """
    task: Task
    executor: "Executor"
    skipped: bool = False
