"""
Actions applied to each task instantiation.

The action set is closed: build, push and tags share one parameter structure
and are dispatched through ACTIONS.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, TextIO

from ..exceptions import ArtifactError
from ..models import Action, RunOptions, ScheduledTask
from ..variables.rendering import RenderContext, TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionParams:
    """
    Input shared by every action.

    Attributes:
        scheduled: Task and the executor assigned to it
        tag: Fully rendered tag (template plus suffix)
        context: Render context at the current outer/inner index
        renderer: Template renderer of the run
        options: Run policy
        output: Output sink
    """
    scheduled: ScheduledTask
    tag: str
    context: RenderContext
    renderer: TemplateRenderer
    options: RunOptions
    output: TextIO


def run_build_action(params: ActionParams) -> None:
    """Render the artifact template and build it with the tag."""
    task = params.scheduled.task
    if not task.artifact_template_path:
        raise ArtifactError(f"task {task.name} does not define an artifact template")

    template_path = Path(task.artifact_template_path)
    try:
        template_text = template_path.read_text()
    except OSError as e:
        raise ArtifactError(f"failed to read artifact template {template_path}: {e}") from e

    rendered = params.renderer.render(template_text, params.context, purpose="artifact")
    build_artifact(params, rendered, template_path)


def build_artifact(params: ActionParams, contents: str, template_path: Path) -> None:
    """
    Write rendered contents beside the template and invoke the build tool.

    The temporary file is removed on every exit path. Failing to remove it is
    an error only when the build itself succeeded.
    """
    context_dir = template_path.parent
    try:
        fd, artifact_path = tempfile.mkstemp(prefix="Dockerfile", dir=str(context_dir))
    except OSError as e:
        raise ArtifactError(f"failed to create temporary file for rendered artifact: {e}") from e

    succeeded = False
    try:
        try:
            with os.fdopen(fd, "w") as f:
                f.write(contents)
        except OSError as e:
            raise ArtifactError(f"failed to write rendered artifact {artifact_path}: {e}") from e

        logger.info(f"Building {params.tag} from {template_path}")
        params.scheduled.executor.run(
            params.output,
            params.options.tool, "build", "-t", params.tag, "-f", artifact_path, str(context_dir),
        )
        succeeded = True
    finally:
        try:
            os.remove(artifact_path)
        except OSError as e:
            if succeeded:
                raise ArtifactError(
                    f"failed to remove temporary file for rendered artifact {artifact_path}: {e}"
                ) from e
            logger.warning(f"Failed to remove temporary file {artifact_path}: {e}")


def run_push_action(params: ActionParams) -> None:
    """Push the tag."""
    logger.info(f"Pushing {params.tag}")
    params.scheduled.executor.run(params.output, params.options.tool, "push", params.tag)


def run_tag_action(params: ActionParams) -> None:
    """Print the tag. Tasks only present as dependencies print nothing."""
    if params.scheduled.skipped:
        return
    params.output.write(f"{params.tag}\n")


ACTIONS: Dict[Action, Callable[[ActionParams], None]] = {
    Action.BUILD: run_build_action,
    Action.PUSH: run_push_action,
    Action.TAGS: run_tag_action,
}


def run_action(action: Action, params: ActionParams) -> None:
    """Dispatch to the implementation of an action."""
    try:
        handler = ACTIONS[Action(action)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown action: {action}") from None
    handler(params)
