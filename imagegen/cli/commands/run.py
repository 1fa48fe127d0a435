"""Build, push and tags command implementation."""

import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Optional, TextIO

from imagegen.exceptions import BuildError, ConfigValidationError, SelectionError
from imagegen.loader import ConfigLoader
from imagegen.models import Action, RunOptions
from imagegen.workflow.orchestrator import Orchestrator
from imagegen.workflow.selection import select_tasks


logger = logging.getLogger(__name__)


def configure_logging(args: Namespace) -> None:
    """Set up logging from the command line flags."""
    level_name = 'warning' if args.log_level == 'warn' else args.log_level
    log_level = getattr(logging, level_name.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def run_command(args: Namespace, output: Optional[TextIO] = None) -> int:
    """
    Run one of the build, push or tags commands.

    Exit codes: 0 on success, 2 for configuration or selection errors,
    1 for failures while running.
    """
    configure_logging(args)
    output = output if output is not None else sys.stdout

    try:
        action = Action(args.command)
        config_path = Path(args.config)
        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            return 1

        logger.info(f"Loading configuration: {config_path}")
        try:
            config = ConfigLoader().load(config_path)
        except ConfigValidationError as e:
            for error in e.errors:
                logger.error(f"Validation error: {error.message}")
            return e.exit_code

        options = RunOptions(dry_run=args.dry_run, no_deps=args.no_deps, tool=args.tool)
        scheduled = select_tasks(args.names, config.tasks, options)

        orchestrator = Orchestrator(config.run_params, output=output, options=options)
        orchestrator.run(action, scheduled)
        return 0

    except ConfigValidationError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code
    except SelectionError as e:
        logger.error(str(e))
        return e.exit_code
    except BuildError as e:
        logger.error(str(e))
        return e.exit_code
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
