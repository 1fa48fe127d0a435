"""Tag registry for a single run.

Records the tags rendered for each task, indexed by outer and inner iteration,
so that later templates can refer to them through Tag().
"""

import copy
from typing import Dict, List

from .exceptions import RenderError


class TagRegistry:
    """
    Append-only mapping of task name -> outer index -> inner index -> tag.

    Buckets are created positionally: the bucket for outer index i of a task
    can only be opened after buckets 0..i-1 exist.
    """

    def __init__(self):
        self._tags: Dict[str, List[List[str]]] = {}

    def open(self, task_name: str, outer_idx: int) -> None:
        """Create the (empty) bucket for a task's outer iteration."""
        buckets = self._tags.setdefault(task_name, [])
        if outer_idx != len(buckets):
            raise ValueError(
                f"cannot open outer index {outer_idx} for task {task_name}: "
                f"{len(buckets)} outer entries recorded"
            )
        buckets.append([])

    def add(self, task_name: str, outer_idx: int, tag: str) -> int:
        """
        Record the next inner tag for a task's outer iteration.

        Returns:
            Inner index the tag was recorded under
        """
        buckets = self._tags.get(task_name)
        if buckets is None or outer_idx != len(buckets) - 1:
            raise ValueError(f"outer index {outer_idx} of task {task_name} is not open")
        buckets[outer_idx].append(tag)
        return len(buckets[outer_idx]) - 1

    def lookup(self, task_name: str, outer_idx: int, inner_idx: int) -> str:
        """Return a recorded tag, raising RenderError if it does not exist."""
        buckets = self._tags.get(task_name)
        if buckets is None:
            raise RenderError(f"unknown task name {task_name}")
        if not 0 <= outer_idx < len(buckets):
            raise RenderError(f"outer index out of bounds: {outer_idx} >= {len(buckets)}")
        inner = buckets[outer_idx]
        if not 0 <= inner_idx < len(inner):
            raise RenderError(f"inner index out of bounds: {inner_idx} >= {len(inner)}")
        return inner[inner_idx]

    def __contains__(self, task_name: str) -> bool:
        return task_name in self._tags

    def get(self, task_name: str) -> List[List[str]]:
        return copy.deepcopy(self._tags.get(task_name, []))

    def as_dict(self) -> Dict[str, List[List[str]]]:
        return copy.deepcopy(self._tags)
