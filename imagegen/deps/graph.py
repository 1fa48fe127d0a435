"""Dependency graph over tasks: validation, closure and topological ordering."""

from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..exceptions import ConfigValidationError, ValidationError
from ..models import Task


def required_closure(task: Task, all_tasks: Sequence[Task]) -> List[Task]:
    """
    Return the task and every task it transitively requires.

    Traverses 'requires' breadth-first. The result is deduplicated and sorted by name.
    """
    by_name = {t.name: t for t in all_tasks}

    found: Dict[str, Task] = {}
    remaining = deque([task])
    while remaining:
        current = remaining.popleft()
        if current.name in found:
            continue
        found[current.name] = current
        for dep in current.requires:
            if dep not in by_name:
                raise ConfigValidationError([ValidationError(
                    f"Task {current.name} requires task {dep}, which is not defined in configuration"
                )])
            remaining.append(by_name[dep])

    return [found[name] for name in sorted(found)]


def topological_sort(tasks: Sequence[Task]) -> List[Task]:
    """
    Order tasks so that each appears after everything it requires.

    Tasks with no ordering constraint between them keep their input order.
    Works on a reverse-dependency map: tasks are visited in reverse input order,
    each task's dependents are placed before the task itself, and the accumulated
    list is reversed at the end.
    """
    reverse_deps: Dict[str, List[str]] = {}
    for task in tasks:
        for req in task.requires:
            dependents = reverse_deps.setdefault(req, [])
            if task.name not in dependents:
                dependents.append(task.name)

    by_name = {t.name: t for t in tasks}
    visited: Set[str] = set()
    ordered: List[Task] = []

    for task in reversed(tasks):
        if task.name in visited:
            continue
        visited.add(task.name)
        stack = [(task.name, iter(reverse_deps.get(task.name, ())))]
        while stack:
            name, dependents = stack[-1]
            child = next(dependents, None)
            if child is None:
                stack.pop()
                ordered.append(by_name[name])
                continue
            if child in visited:
                continue
            visited.add(child)
            stack.append((child, iter(reverse_deps.get(child, ()))))

    ordered.reverse()
    return ordered


class DependencyGraph:
    """The 'requires' relation among a set of named tasks."""

    def __init__(self, tasks: Iterable[Task]):
        self.tasks: List[Task] = list(tasks)
        self._by_name: Dict[str, Task] = {}
        for task in self.tasks:
            self._by_name.setdefault(task.name, task)

        # first-level dependencies, deduplicated and sorted for a stable traversal
        self._deps: Dict[str, List[str]] = {
            name: sorted(set(task.requires)) for name, task in self._by_name.items()
        }

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Task:
        return self._by_name[name]

    @property
    def names(self) -> List[str]:
        return [task.name for task in self.tasks]

    def validate(self) -> None:
        """
        Validate names, references and acyclicity.

        Raises:
            ConfigValidationError: On duplicate names, missing references or a cycle
        """
        errors: List[ValidationError] = []

        seen: Set[str] = set()
        for task in self.tasks:
            if task.name in seen:
                errors.append(ValidationError(f"Duplicate task name '{task.name}'"))
            seen.add(task.name)

        for task in self.tasks:
            for req in task.requires:
                if req not in self._by_name:
                    errors.append(ValidationError(
                        f"Task {task.name} requires task {req}, which is not defined in configuration"
                    ))

        if errors:
            raise ConfigValidationError(errors)

        done: Set[str] = set()
        for task in self.tasks:
            cycle = self._find_cycle(task.name, done)
            if cycle:
                raise ConfigValidationError([ValidationError(
                    f"Invalid configuration: dependency cycle exists: {' -> '.join(cycle)}"
                )])

    def _find_cycle(self, root: str, done: Set[str]) -> Optional[List[str]]:
        """
        Depth-first search from root with an explicit ancestor path.

        Returns:
            The path ending in the repeated node, or None. Nodes fully explored
            without finding a cycle are added to done.
        """
        if root in done:
            return None

        path = [root]
        on_path = {root}
        stack = [iter(self._deps[root])]
        while stack:
            dep = next(stack[-1], None)
            if dep is None:
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                stack.pop()
                continue
            if dep in on_path:
                return path + [dep]
            if dep in done:
                continue
            path.append(dep)
            on_path.add(dep)
            stack.append(iter(self._deps[dep]))
        return None

    def required_closure(self, name: str) -> List[Task]:
        return required_closure(self.get(name), self.tasks)

    def topological_sort(self, tasks: Optional[Sequence[Task]] = None) -> List[Task]:
        return topological_sort(self.tasks if tasks is None else tasks)
