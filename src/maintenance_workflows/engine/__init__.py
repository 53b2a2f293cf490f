"""Action execution engine.

Key Components:

- Action: Base class driving the lifecycle (validate, hooks, apply, severity)
- Severity: The four policies derived from (fatal, success_required)
- Outcome / OutcomeStatus: Per-run record with nested, pre-run and post-run outcomes
- ActionFailure / ValidationFailure: Failure trees preserving the causal chain
- IfStatement / SwitchStatement / ForEachLoop: Control-flow composites
- FilesInDirectory: Path-based actions applied to every file of a directory tree
- run_nested_pipeline: Content threading for structured-file editors
- ActionRegistry: Type-name to factory mapping used by the plan loader
- PlanSchema / ActionSpec: Pydantic v2 schema for YAML plans
- LoadResult: Error monad for loader and config-file I/O
- PlanRunner: Runs a plan's top-level actions with their own severity flags
"""

from .action import Action
from .actions_check import (
    ConfigFileHasValidEntries,
    DirectoryDoesNotExist,
    DirectoryExists,
    FileDoesNotExist,
    FileExists,
    VerifyArray,
    VerifyString,
)
from .actions_file import (
    CopyFile,
    MakeDirectory,
    MoveDirectory,
    MoveFile,
    RemoveFile,
    RenameDirectory,
    RenameFile,
    UnzipFile,
)
from .actions_list import FilesInDirectory, PathConsumer
from .actions_transform import (
    ChangeConfigFileEntries,
    EmptyTransform,
    LineEdit,
    ModifyArray,
    ModifyFile,
)
from .conditionals import ForEachLoop, IfStatement, SwitchStatement
from .config_files import ContentType
from .exceptions import (
    ActionFailure,
    ConfigurationFailure,
    MissingKeyFailure,
    ValidationFailure,
    WorkerFailure,
)
from .load_result import LoadResult, LoadStatus
from .loader import build_action, build_plan, load_plan_from_file, load_plan_from_yaml
from .outcome import Outcome, OutcomeStatus
from .pipeline import run_nested_pipeline
from .registry import ActionRegistry, create_default_registry
from .runner import PlanRunner
from .schema import ActionSpec, PlanSchema
from .severity import Severity

__all__ = [
    # Core
    "Action",
    "Severity",
    "Outcome",
    "OutcomeStatus",
    "run_nested_pipeline",
    # Failures
    "WorkerFailure",
    "ActionFailure",
    "ValidationFailure",
    "ConfigurationFailure",
    "MissingKeyFailure",
    # Composites
    "IfStatement",
    "SwitchStatement",
    "ForEachLoop",
    # File actions
    "MakeDirectory",
    "RemoveFile",
    "CopyFile",
    "MoveFile",
    "MoveDirectory",
    "RenameFile",
    "RenameDirectory",
    "UnzipFile",
    # Checks
    "FileExists",
    "FileDoesNotExist",
    "DirectoryExists",
    "DirectoryDoesNotExist",
    "VerifyString",
    "VerifyArray",
    "ConfigFileHasValidEntries",
    # Transforms
    "ModifyArray",
    "EmptyTransform",
    "ChangeConfigFileEntries",
    "LineEdit",
    "ModifyFile",
    # Lists
    "FilesInDirectory",
    "PathConsumer",
    "ContentType",
    # Plans
    "PlanRunner",
    "ActionRegistry",
    "create_default_registry",
    "ActionSpec",
    "PlanSchema",
    "LoadResult",
    "LoadStatus",
    "load_plan_from_file",
    "load_plan_from_yaml",
    "build_action",
    "build_plan",
]
