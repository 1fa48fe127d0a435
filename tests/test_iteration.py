"""Tests for 'for' iteration expansion."""

import pytest

from imagegen.exceptions import RenderError
from imagegen.variables.iteration import run_iterations
from imagegen.variables.rendering import RenderContext, TemplateRenderer


@pytest.fixture
def renderer():
    return TemplateRenderer()


def collect(bindings, renderer, variables=None):
    """Run iterations and return the (index, variables) pairs seen by the callback."""
    calls = []
    context = RenderContext(build_id="1", variables=variables or {})
    run_iterations(bindings, context, lambda i, v: calls.append((i, v)), renderer)
    return calls


def test_no_bindings_runs_once(renderer):
    calls = collect({}, renderer, {"base": "alpine"})
    assert calls == [(0, {"base": "alpine"})]


def test_runs_once_per_index(renderer):
    calls = collect({"x": ["a", "b", "c"]}, renderer)
    assert calls == [(0, {"x": "a"}), (1, {"x": "b"}), (2, {"x": "c"})]


def test_values_are_templates(renderer):
    calls = collect({"x": ["{{ base }}-{{ BuildID() }}"]}, renderer, {"base": "alpine"})
    assert calls == [(0, {"base": "alpine", "x": "alpine-1"})]


def test_later_names_see_earlier_values(renderer):
    """Names are evaluated in sorted order within each iteration."""
    bindings = {
        "b": ["{{ a }}-suffix", "{{ a }}-other"],
        "a": ["one", "two"],
    }
    calls = collect(bindings, renderer)
    assert calls == [
        (0, {"a": "one", "b": "one-suffix"}),
        (1, {"a": "two", "b": "two-other"}),
    ]


def test_returns_callback_results(renderer):
    context = RenderContext(build_id="1")
    results = run_iterations({"x": ["a", "b"]}, context, lambda i, v: f"{i}:{v['x']}", renderer)
    assert results == ["0:a", "1:b"]


def test_empty_lists_run_nothing(renderer):
    assert collect({"x": []}, renderer) == []


def test_caller_environment_not_modified(renderer):
    variables = {"base": "alpine"}
    context = RenderContext(build_id="1", variables=variables)

    def mutate(index, current):
        current["base"] = "changed"

    run_iterations({"x": ["a"]}, context, mutate, renderer)

    assert context.variables == {"base": "alpine"}
    assert variables == {"base": "alpine"}


def test_callback_copy_isolated_between_iterations(renderer):
    seen = []

    def mutate(index, current):
        seen.append(dict(current))
        current["leak"] = "yes"

    context = RenderContext(build_id="1")
    run_iterations({"x": ["a", "b"]}, context, mutate, renderer)

    assert seen == [{"x": "a"}, {"x": "b"}]


def test_render_error_aborts_with_context(renderer):
    calls = []
    context = RenderContext(build_id="1")

    with pytest.raises(RenderError) as exc_info:
        run_iterations(
            {"x": ["a", "{{ missing }}", "c"]},
            context,
            lambda i, v: calls.append(i),
            renderer,
        )

    assert calls == [0]
    assert "variable x at index 1" in str(exc_info.value)


def test_indices_unset_for_values(renderer):
    context = RenderContext(build_id="1").at(0, 0)

    with pytest.raises(RenderError, match="OuterIdx was not set"):
        run_iterations({"x": ["{{ OuterIdx() }}"]}, context, lambda i, v: None, renderer)


def test_callback_error_propagates(renderer):
    def fail(index, current):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        run_iterations({"x": ["a", "b"]}, RenderContext(build_id="1"), fail, renderer)
