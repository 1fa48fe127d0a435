"""Selection of the tasks a run operates on."""

import logging
from typing import List, Sequence

from ..deps.graph import DependencyGraph
from ..exceptions import SelectionError
from ..exec.executor import Executor, executor_for
from ..models import RunOptions, ScheduledTask, Task

logger = logging.getLogger(__name__)


def select_tasks(
    requested: Sequence[str],
    tasks: Sequence[Task],
    options: RunOptions = RunOptions(),
) -> List[ScheduledTask]:
    """
    Resolve requested task names into an ordered execution plan.

    An empty request selects every task. Otherwise each requested task is
    expanded to its dependency closure. The result is topologically sorted from
    configuration order. In no-deps mode, tasks present only as dependencies
    still run through the pipeline (so their tags are recorded) but use a
    NoopExecutor and print nothing.

    Args:
        requested: Task names given by the user
        tasks: Every task defined in configuration, in configuration order
        options: Run policy

    Returns:
        Scheduled tasks in execution order

    Raises:
        SelectionError: If any requested name is not defined
    """
    graph = DependencyGraph(tasks)

    unknown = sorted({name for name in requested if name not in graph})
    if unknown:
        raise SelectionError(unknown, graph.names)

    if not requested:
        selected = {task.name for task in tasks}
    else:
        selected = set()
        for name in requested:
            selected.update(t.name for t in graph.required_closure(name))

    explicit = set(requested) if requested else selected
    ordered = graph.topological_sort([task for task in tasks if task.name in selected])

    scheduled = []
    for task in ordered:
        skipped = options.no_deps and task.name not in explicit
        if skipped:
            logger.info(f"Task {task.name} is only a dependency; its commands will be skipped")
        scheduled.append(ScheduledTask(task, executor_for(options, skipped), skipped))
    return scheduled


def schedule(tasks: Sequence[Task], executor: Executor) -> List[ScheduledTask]:
    """Pair every task with the same executor, keeping the given order."""
    return [ScheduledTask(task, executor) for task in tasks]
