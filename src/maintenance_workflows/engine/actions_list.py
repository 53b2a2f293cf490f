"""List actions - FilesInDirectory.

FilesInDirectory runs a list of path-based actions against every file found
recursively in a directory, optionally filtered by file name patterns and
skipping some subdirectories.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, ClassVar, Protocol, runtime_checkable

from .action import Action
from .actions_file import require_directory
from .exceptions import ConfigurationFailure, ValidationFailure
from .outcome import Outcome

logger = logging.getLogger(__name__)

# Path given to registered actions until a real file is bound at run time
FILE_PLACEHOLDER = "<file>"


@runtime_checkable
class PathConsumer(Protocol):
    """An action that can be pointed at another file path."""

    def set_path(self, path: str) -> Any: ...


class FilesInDirectory(Action):
    """Apply path-based actions to all files in a directory (recursive).

    Registered actions are copied as fatal and not success-required, like
    ForEachLoop members. Files are visited in sorted order, and every action
    runs on a file before the next file is visited.
    """

    type_name: ClassVar[str] = "FilesInDirectory"

    def __init__(
        self,
        directory_path: str = "",
        file_patterns: Iterable[str] | None = None,
        excluded_directories: Iterable[str] | None = None,
    ):
        super().__init__()
        self.directory_path = str(directory_path)
        self.file_patterns: list[str] = list(file_patterns or [])
        self.excluded_directories: list[str] = list(excluded_directories or [])
        self.actions: list[Action] = []

    def in_directory(self, directory_path: str) -> FilesInDirectory:
        self.directory_path = str(directory_path)
        return self

    def with_patterns(self, *patterns: str) -> FilesInDirectory:
        self.file_patterns.extend(patterns)
        return self

    def exclude(self, *directories: str) -> FilesInDirectory:
        self.excluded_directories.extend(directories)
        return self

    def add_action(self, action: Action) -> FilesInDirectory:
        member = self._adopt(action)
        if not isinstance(member, PathConsumer):
            raise ConfigurationFailure(
                f"Action type {type(member).__name__} cannot be applied to a file path."
            )
        member = member.with_severity(fatal=True, success_required=False)
        member.set_path(FILE_PLACEHOLDER)  # type: ignore[attr-defined]
        self.actions.append(member)
        return self

    def add_actions(self, actions: Iterable[Any]) -> FilesInDirectory:
        for action in actions:
            self.add_action(action)
        return self

    def stringify(self) -> str:
        message = f"Apply the following actions to all files in '{self.directory_path}' (recursive)"
        if self.excluded_directories:
            message += f" (excluded directories: [{', '.join(self.excluded_directories)}])"
        if self.file_patterns:
            message += f" with patterns [{', '.join(self.file_patterns)}]"
        message += ": \n"
        for action in self.actions:
            message += f"{action}\n"
        return message

    def validate_instance(self) -> bool:
        if not self.directory_path:
            raise ValidationFailure(self, "Directory path cannot be empty.")
        return self.validate_nested_actions(
            self.actions, "One or more of the registered actions are not valid."
        )

    def list_files(self, directory: Path) -> list[Path]:
        """Files under directory matching the patterns, outside excluded subdirectories."""
        excluded = [Path(name).parts for name in self.excluded_directories]
        files: list[Path] = []
        for path in sorted(directory.rglob("*")):
            if not path.is_file():
                continue
            parents = path.relative_to(directory).parts[:-1]
            if any(parents[: len(parts)] == parts for parts in excluded):
                continue
            if self.file_patterns and not any(
                fnmatch.fnmatch(path.name, pattern) for pattern in self.file_patterns
            ):
                continue
            files.append(path)
        return files

    def apply(self, outcome: Outcome) -> Outcome:
        files = self.list_files(require_directory(self, self.directory_path))
        logger.info(
            "Applying %d action(s) to %d file(s) in %s",
            len(self.actions),
            len(files),
            self.directory_path,
        )
        for file_path in files:
            for action in self.actions:
                bound = action.copy()
                bound.set_path(str(file_path))  # type: ignore[attr-defined]
                outcome.add_nested_outcome(bound.run())
        return outcome.set_result(all(nested.is_successful_run() for nested in outcome.nested))


__all__ = ["FilesInDirectory", "PathConsumer", "FILE_PLACEHOLDER"]
