"""Configuration loader and strict validation of the build configuration file."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from imagegen.deps.graph import DependencyGraph
from imagegen.exceptions import ConfigValidationError, ValidationError
from imagegen.models import RunParams, Task


class ScalarStringLoader(yaml.SafeLoader):
    """YAML loader that keeps scalars such as 'on', 'yes', '1.10' and '07' as strings."""
    pass


STRING_TAGS = {
    'tag:yaml.org,2002:bool',
    'tag:yaml.org,2002:int',
    'tag:yaml.org,2002:float',
    'tag:yaml.org,2002:timestamp',
}

# Drop implicit bool/int/float/timestamp resolution so that 'for' values like 1.10 are not
# turned into 1.1 and 'on' is not turned into True. null is still recognised.
ScalarStringLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers
        if tag not in STRING_TAGS
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class Config:
    """Loaded configuration."""
    run_params: RunParams = field(default_factory=RunParams)
    tasks: List[Task] = field(default_factory=list)

    def task_names(self) -> List[str]:
        return [task.name for task in self.tasks]


class ConfigLoader:
    """Loads and validates the YAML build configuration."""

    TOP_LEVEL_FIELDS = {'build-id-var', 'template-vars', 'tag-suffix', 'for', 'builds'}
    BUILD_FIELDS = {'docker-template', 'tag', 'for', 'requires'}

    def __init__(self):
        self.errors: List[ValidationError] = []

    def load(self, config_path: Path) -> Config:
        """
        Load and validate a configuration file.

        Relative 'docker-template' paths are resolved against the directory of
        the configuration file.

        Raises:
            ConfigValidationError: With every problem found in the file
        """
        self.errors = []
        config_path = Path(config_path)
        try:
            with open(config_path, 'r') as f:
                document = yaml.load(f, Loader=ScalarStringLoader)
        except (OSError, yaml.YAMLError) as e:
            self._add_error(f"Failed to load configuration: {e}")
            self._raise_validation_errors()

        return self.load_document(document, base_dir=config_path.parent)

    def load_document(self, document: Any, base_dir: Optional[Path] = None) -> Config:
        """Validate an already parsed YAML document and build the model from it."""
        self.errors = []

        if document is None:
            document = {}
        if not isinstance(document, dict):
            self._add_error("Configuration must be a YAML object/dictionary")
            self._raise_validation_errors()

        for key in document:
            if key not in self.TOP_LEVEL_FIELDS:
                self._add_error(f"Unknown field '{key}'")

        run_params = RunParams(
            build_id_env_var=self._string(document.get('build-id-var'), 'build-id-var'),
            template_vars=self._string_map(document.get('template-vars'), 'template-vars'),
            tag_suffix_template=self._string(document.get('tag-suffix'), 'tag-suffix'),
            for_vars=self._for_vars(document.get('for'), 'for'),
        )

        tasks = self._tasks(document.get('builds'), base_dir)

        for message in run_params.validate():
            self._add_error(message)
        for task in tasks:
            for message in run_params.validate_task(task):
                self._add_error(message)

        if self.errors:
            self._raise_validation_errors()

        DependencyGraph(tasks).validate()

        return Config(run_params=run_params, tasks=tasks)

    def _tasks(self, builds: Any, base_dir: Optional[Path]) -> List[Task]:
        if builds is None:
            return []
        if not isinstance(builds, dict):
            self._add_error("'builds' must be a dictionary of build name to build definition")
            return []

        tasks = []
        for name, build in builds.items():
            if not isinstance(name, str) or not name:
                self._add_error(f"Build name must be a non-empty string, got {name!r}")
                continue
            if build is None:
                build = {}
            if not isinstance(build, dict):
                self._add_error(f"Build '{name}' must be a dictionary")
                continue

            for key in build:
                if key not in self.BUILD_FIELDS:
                    self._add_error(f"Build '{name}': unknown field '{key}'")

            template_path = self._string(build.get('docker-template'), f"builds.{name}.docker-template")
            if template_path and base_dir is not None and not Path(template_path).is_absolute():
                template_path = str(base_dir / template_path)

            tasks.append(Task(
                name=name,
                artifact_template_path=template_path,
                tag_template=self._string(build.get('tag'), f"builds.{name}.tag"),
                requires=self._string_list(build.get('requires'), f"builds.{name}.requires"),
                for_vars=self._for_vars(build.get('for'), f"builds.{name}.for"),
            ))
        return tasks

    def _string(self, value: Any, context: str) -> str:
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            self._add_error(f"'{context}' must be a string")
            return ""
        return str(value)

    def _string_list(self, value: Any, context: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            self._add_error(f"'{context}' must be a list")
            return []
        return [self._string(item, f"{context}[{i}]") for i, item in enumerate(value)]

    def _string_map(self, value: Any, context: str) -> Dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            self._add_error(f"'{context}' must be a dictionary")
            return {}
        return {str(k): self._string(v, f"{context}.{k}") for k, v in value.items()}

    def _for_vars(self, value: Any, context: str) -> Dict[str, List[str]]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            self._add_error(f"'{context}' must be a dictionary of variable name to list of values")
            return {}
        return {str(k): self._string_list(v, f"{context}.{k}") for k, v in value.items()}

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        """Add validation error."""
        self.errors.append(ValidationError(message, path, exit_code))

    def _raise_validation_errors(self):
        """Raise ConfigValidationError with accumulated errors."""
        raise ConfigValidationError(self.errors)
