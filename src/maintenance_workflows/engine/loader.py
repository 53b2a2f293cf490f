"""
YAML plan loader.

Loads plan files into validated PlanSchema models, then builds the action
graph through an ActionRegistry.

Features:
- Load plans from YAML files or strings (LoadResult, never raises)
- Build actions recursively, including composites and hooks
- Build a plan into a PlanRunner that keeps each top-level action's own
  fatal and success_required flags
"""

import logging
from pathlib import Path
from typing import NoReturn

import yaml

from .action import Action
from .actions_check import ConfigFileHasValidEntries
from .actions_list import FilesInDirectory
from .actions_transform import ChangeConfigFileEntries, ModifyFile
from .conditionals import ForEachLoop, IfStatement, SwitchStatement
from .exceptions import ConfigurationFailure
from .load_result import LoadResult
from .registry import ActionRegistry
from .runner import PlanRunner
from .schema import ActionSpec, PlanSchema

logger = logging.getLogger(__name__)


def load_plan_from_file(file_path: str | Path) -> LoadResult[PlanSchema]:
    """
    Load and validate a plan from a YAML file.

    Args:
        file_path: Path to YAML plan file

    Returns:
        LoadResult.success(PlanSchema) if valid
        LoadResult.failure(error_message) with validation errors
    """
    path = Path(file_path)

    if not path.exists():
        return LoadResult.failure(f"Plan file not found: {file_path}")

    if not path.is_file():
        return LoadResult.failure(f"Path is not a file: {file_path}")

    try:
        yaml_content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return LoadResult.failure(f"Failed to read file '{file_path}': {e}")

    return load_plan_from_yaml(yaml_content, source=str(file_path))


def load_plan_from_yaml(yaml_content: str, source: str = "<string>") -> LoadResult[PlanSchema]:
    """
    Load and validate a plan from a YAML string.

    Example:
        yaml_str = '''
        name: my-plan
        actions:
          - type: MakeDirectory
            params: {path: build}
        '''
        result = load_plan_from_yaml(yaml_str)
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        return LoadResult.failure(f"Invalid YAML syntax in {source}: {e}")

    if not isinstance(data, dict):
        return LoadResult.failure(
            f"Plan {source} must be a YAML dictionary, got {type(data).__name__}"
        )

    schema_result = PlanSchema.validate_yaml_dict(data)
    if not schema_result.is_success:
        return LoadResult.failure(f"{schema_result.error} (in {source})")

    logger.debug("Loaded plan '%s' from %s", schema_result.unwrap().name, source)
    return schema_result


def build_action(spec: ActionSpec, registry: ActionRegistry) -> Action:
    """
    Build an action (and its nested actions) from its spec.

    Nested fields are only accepted by the action types that use them.

    Raises:
        ConfigurationFailure: Unknown type, bad parameters or misplaced
            nested fields
    """
    action = registry.create(spec.type, **spec.params)

    if spec.actions:
        members = [build_action(member, registry) for member in spec.actions]
        if isinstance(action, (ForEachLoop, FilesInDirectory)):
            action.add_actions(members)
        elif isinstance(action, ModifyFile):
            for member in members:
                action.add_edit(member)  # type: ignore[arg-type]
        elif isinstance(action, ChangeConfigFileEntries):
            for member in members:
                action.add_modification(member)  # type: ignore[arg-type]
        elif isinstance(action, ConfigFileHasValidEntries):
            for member in members:
                action.add_check(member)  # type: ignore[arg-type]
        else:
            _reject_field(spec, "actions")

    if spec.statements:
        if not isinstance(action, IfStatement):
            _reject_field(spec, "statements")
        for statement in spec.statements:
            action.add_statement(
                build_action(statement.condition, registry),
                build_action(statement.then, registry),
            )

    if spec.expression is not None or spec.cases:
        if not isinstance(action, SwitchStatement):
            _reject_field(spec, "expression/cases")
        if isinstance(spec.expression, ActionSpec):
            action.add_expression(build_action(spec.expression, registry))
        elif spec.expression is not None:
            action.add_expression(spec.expression)
        for case in spec.cases:
            action.add_case(case.value, build_action(case.action, registry))

    if spec.default is not None:
        default = build_action(spec.default, registry)
        if isinstance(action, IfStatement):
            action.add_default_statement(default)
        elif isinstance(action, SwitchStatement):
            action.add_default_case(default)
        else:
            _reject_field(spec, "default")

    for hook in spec.before:
        action.add_before_action(build_action(hook, registry))
    for hook in spec.after:
        action.add_after_action(build_action(hook, registry))

    action.set_fatal(spec.fatal)
    action.set_success_required(spec.success_required)
    return action


def build_plan(schema: PlanSchema, registry: ActionRegistry) -> PlanRunner:
    """Build the plan's top-level actions into a runner, in order."""
    return PlanRunner(schema.name, [build_action(spec, registry) for spec in schema.actions])


def _reject_field(spec: ActionSpec, field_name: str) -> NoReturn:
    raise ConfigurationFailure(
        f"Action type {spec.type} does not accept nested field '{field_name}'."
    )


__all__ = ["load_plan_from_file", "load_plan_from_yaml", "build_action", "build_plan"]
