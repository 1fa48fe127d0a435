"""
Template rendering with the imagegen function table.

Templates are Jinja2 text. Variables come from the render context
({{ name }}); the functions Getenv, BuildID, Tag, OuterIdx and InnerIdx are
bound to the same context for each render call.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional

from jinja2 import Environment, StrictUndefined

from ..exceptions import RenderError
from ..state import TagRegistry


@dataclass(frozen=True)
class RenderContext:
    """
    Everything a single template evaluation can see.

    Attributes:
        build_id: Build identifier of the run
        variables: Current variable environment
        tags: Tag registry of the run
        outer_idx: Current outer iteration index, None when unset
        inner_idx: Current inner iteration index, None when unset
    """
    build_id: str
    variables: Mapping[str, str] = field(default_factory=dict)
    tags: TagRegistry = field(default_factory=TagRegistry)
    outer_idx: Optional[int] = None
    inner_idx: Optional[int] = None

    def with_variables(self, variables: Mapping[str, str]) -> "RenderContext":
        return replace(self, variables=dict(variables))

    def at(self, outer_idx: Optional[int], inner_idx: Optional[int]) -> "RenderContext":
        return replace(self, outer_idx=outer_idx, inner_idx=inner_idx)


def _check_index(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RenderError(f"{label} index must be an integer, got {value!r}")
    return value


def template_functions(context: RenderContext) -> Dict[str, Callable[..., Any]]:
    """Build the function table exposed to templates for one render call."""

    def getenv(name: str) -> str:
        return os.environ.get(name, "")

    def build_id() -> str:
        return context.build_id

    def tag(task_name: str, outer_idx: int, inner_idx: int) -> str:
        return context.tags.lookup(
            task_name,
            _check_index(outer_idx, "outer"),
            _check_index(inner_idx, "inner"),
        )

    def outer_index() -> int:
        if context.outer_idx is None:
            raise RenderError("OuterIdx was not set")
        return context.outer_idx

    def inner_index() -> int:
        if context.inner_idx is None:
            raise RenderError("InnerIdx was not set")
        return context.inner_idx

    return {
        "Getenv": getenv,
        "BuildID": build_id,
        "Tag": tag,
        "OuterIdx": outer_index,
        "InnerIdx": inner_index,
    }


class TemplateRenderer:
    """Renders template text against a RenderContext."""

    def __init__(self):
        self.environment = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self, text: str, context: RenderContext, purpose: str = "template") -> str:
        """
        Render template text.

        Args:
            text: Template source
            context: Variables, indices and tag registry visible to the template
            purpose: What the template is for (tag, suffix, artifact...), used in errors

        Returns:
            Rendered text

        Raises:
            RenderError: On syntax errors, unresolved variables or any evaluation failure
        """
        namespace: Dict[str, Any] = dict(context.variables)
        namespace.update(template_functions(context))

        try:
            template = self.environment.from_string(text)
            return template.render(namespace)
        except RenderError as e:
            e.purpose = e.purpose or purpose
            raise e.add_context(f"failed to execute {purpose} template")
        except Exception as e:
            raise RenderError(f"failed to execute {purpose} template: {e}", purpose) from e
