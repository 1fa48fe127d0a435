"""Dependency graph module."""

from .graph import DependencyGraph, required_closure, topological_sort

__all__ = [
    "DependencyGraph",
    "required_closure",
    "topological_sort",
]
