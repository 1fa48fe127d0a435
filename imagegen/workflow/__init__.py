"""Orchestration of build, push and tag runs."""

from .orchestrator import Orchestrator, build, push, tags
from .selection import select_tasks, schedule

__all__ = ["Orchestrator", "build", "push", "tags", "select_tasks", "schedule"]
