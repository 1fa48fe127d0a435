"""
Run orchestration.

Expands the outer iteration, walks the scheduled tasks in order, expands each
task's inner iteration, renders tags and applies the requested action while
recording every tag into the run's TagRegistry.
"""

import logging
import os
import sys
from typing import Dict, List, Optional, Sequence, TextIO

from ..exceptions import BuildError, ConfigValidationError, EmptyTagError, RenderError, ValidationError
from ..models import Action, RunOptions, RunParams, ScheduledTask
from ..state import TagRegistry
from ..variables.iteration import run_iterations
from ..variables.rendering import RenderContext, TemplateRenderer
from .actions import ActionParams, run_action

logger = logging.getLogger(__name__)

DEFAULT_TAG_SUFFIX = "-{{ BuildID() }}"
DEFAULT_BUILD_ID = "unspecified"


def resolve_build_id(run_params: RunParams) -> str:
    """Read the build identifier from the configured environment variable."""
    if run_params.build_id_env_var:
        value = os.environ.get(run_params.build_id_env_var, "")
        if value:
            return value
    return DEFAULT_BUILD_ID


class Orchestrator:
    """
    Drives one run of an action over a list of scheduled tasks.
    Execution is strictly sequential; the first failure aborts the run.
    """

    def __init__(
        self,
        run_params: RunParams,
        output: Optional[TextIO] = None,
        options: Optional[RunOptions] = None,
        renderer: Optional[TemplateRenderer] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            run_params: Run-wide configuration
            output: Sink for build output, pushed tags and printed tags (default: stdout)
            options: Run policy (dry run, no deps, build tool)
            renderer: Template renderer (default: a new TemplateRenderer)
        """
        self.run_params = run_params
        self.output = output if output is not None else sys.stdout
        self.options = options or RunOptions()
        self.renderer = renderer or TemplateRenderer()

    def validate(self, scheduled: Sequence[ScheduledTask]) -> None:
        """Validate run parameters and every task's bindings."""
        messages = self.run_params.validate()
        for entry in scheduled:
            messages.extend(self.run_params.validate_task(entry.task))
        if messages:
            raise ConfigValidationError([ValidationError(m) for m in messages])

    def run(self, action: Action, scheduled: Sequence[ScheduledTask]) -> TagRegistry:
        """
        Apply an action to every instantiation of the scheduled tasks.

        Args:
            action: Action to apply
            scheduled: Tasks in execution order (already topologically sorted)

        Returns:
            Tag registry populated by the run

        Raises:
            ConfigValidationError: If run parameters or task bindings are invalid
            BuildError: On the first render, tag or execution failure
        """
        self.validate(scheduled)

        build_id = resolve_build_id(self.run_params)
        suffix_template = self.run_params.tag_suffix_template or DEFAULT_TAG_SUFFIX
        registry = TagRegistry()
        logger.info(f"Running {Action(action).value} for {len(scheduled)} task(s) with build ID {build_id}")

        base_context = RenderContext(build_id=build_id, tags=registry)
        variables: Dict[str, str] = {}
        for name in sorted(self.run_params.template_vars):
            try:
                variables[name] = self.renderer.render(
                    self.run_params.template_vars[name], base_context, purpose="template variable"
                )
            except RenderError as e:
                raise e.add_context(f"failed to evaluate variable {name}")

        def run_outer(outer_idx: int, outer_vars: Dict[str, str]) -> None:
            for entry in scheduled:
                try:
                    self._run_task(action, entry, base_context.with_variables(outer_vars), outer_idx, suffix_template)
                except BuildError as e:
                    raise e.add_context(f"task {entry.task.name} ({Action(action).value})")

        run_iterations(
            self.run_params.for_vars,
            base_context.with_variables(variables),
            run_outer,
            self.renderer,
        )
        return registry

    def _run_task(
        self,
        action: Action,
        entry: ScheduledTask,
        context: RenderContext,
        outer_idx: int,
        suffix_template: str,
    ) -> List[str]:
        """Run every inner iteration of one task for one outer iteration."""
        task = entry.task
        context.tags.open(task.name, outer_idx)

        def run_inner(inner_idx: int, inner_vars: Dict[str, str]) -> str:
            current = context.with_variables(inner_vars).at(outer_idx, inner_idx)
            try:
                tag = self.render_tag(task.tag_template, suffix_template, current)
                logger.debug(f"Task {task.name} [{outer_idx}][{inner_idx}]: {tag}")
                run_action(action, ActionParams(
                    scheduled=entry,
                    tag=tag,
                    context=current,
                    renderer=self.renderer,
                    options=self.options,
                    output=self.output,
                ))
            except BuildError as e:
                raise e.add_context(f"outer index {outer_idx}, inner index {inner_idx}")
            context.tags.add(task.name, outer_idx, tag)
            return tag

        return run_iterations(task.for_vars, context, run_inner, self.renderer)

    def render_tag(self, tag_template: str, suffix_template: str, context: RenderContext) -> str:
        """Render tag and suffix and join them; an empty result is an error."""
        tag = self.renderer.render(tag_template, context, purpose="tag")
        suffix = self.renderer.render(suffix_template, context, purpose="tag suffix")
        full = tag + suffix
        if not full:
            raise EmptyTagError("tag must be non-empty")
        return full


def build(run_params: RunParams, scheduled: Sequence[ScheduledTask], output: Optional[TextIO] = None,
          options: Optional[RunOptions] = None) -> TagRegistry:
    return Orchestrator(run_params, output, options).run(Action.BUILD, scheduled)


def push(run_params: RunParams, scheduled: Sequence[ScheduledTask], output: Optional[TextIO] = None,
         options: Optional[RunOptions] = None) -> TagRegistry:
    return Orchestrator(run_params, output, options).run(Action.PUSH, scheduled)


def tags(run_params: RunParams, scheduled: Sequence[ScheduledTask], output: Optional[TextIO] = None,
         options: Optional[RunOptions] = None) -> TagRegistry:
    return Orchestrator(run_params, output, options).run(Action.TAGS, scheduled)
