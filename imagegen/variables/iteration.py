"""
'for' iteration expansion.

A binding maps variable names to equal-length lists of value templates; the
callback runs once per index with those variables rendered into the environment.
"""

from typing import Callable, Dict, List, Mapping, Sequence, TypeVar

from ..exceptions import RenderError
from .rendering import RenderContext, TemplateRenderer

T = TypeVar("T")


def run_iterations(
    bindings: Mapping[str, Sequence[str]],
    context: RenderContext,
    callback: Callable[[int, Dict[str, str]], T],
    renderer: TemplateRenderer,
) -> List[T]:
    """
    Invoke callback once per iteration of the bindings.

    With no bindings the callback runs exactly once with index 0 and the
    unmodified environment. Otherwise variable names are evaluated in sorted
    order, so a later name can reference the value an earlier name received in
    the same iteration. Bindings must already be validated as equal length.

    Args:
        bindings: Variable name -> value templates
        context: Render context holding the starting variable environment
        callback: Called with (index, variables); receives its own copy
        renderer: Renderer for value templates

    Returns:
        Callback results in iteration order

    Raises:
        RenderError: If a value template fails; remaining iterations are not run
    """
    # copy so that values set while looping never reach the caller's environment
    variables = dict(context.variables)

    if not bindings:
        return [callback(0, dict(variables))]

    names = sorted(bindings)
    results = []
    for index in range(len(bindings[names[0]])):
        for name in names:
            try:
                value = renderer.render(
                    bindings[name][index],
                    context.with_variables(variables).at(None, None),
                    purpose="'for' variable",
                )
            except RenderError as e:
                raise e.add_context(f"variable {name} at index {index}")
            variables[name] = value
        results.append(callback(index, dict(variables)))
    return results
