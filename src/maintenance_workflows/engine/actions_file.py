"""File system actions - MakeDirectory, RemoveFile, CopyFile, MoveFile,
MoveDirectory, RenameFile, RenameDirectory, UnzipFile.

Architecture:
- validate_instance() checks configuration only (no file system access)
- apply() raises ActionFailure (or lets OSError escape) on operational errors
- The runtime decides from the severity flags whether a failure is recorded
  or propagated
"""

from __future__ import annotations

import glob
import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import ClassVar

from ..settings import get_settings
from .action import Action
from .exceptions import ActionFailure, ValidationFailure
from .outcome import Outcome

logger = logging.getLogger(__name__)


def require_file(action: Action, path: str | Path) -> Path:
    """Return path as a Path, raising the action's failure if it is not a file."""
    file_path = Path(path)
    if not file_path.is_file():
        raise ActionFailure(action, f"'{path}' is not a valid file path.")
    return file_path


def require_directory(action: Action, path: str | Path) -> Path:
    """Return path as a Path, raising the action's failure if it is not a directory."""
    directory = Path(path)
    if not directory.is_dir():
        raise ActionFailure(action, f"'{path}' is not a valid directory path.")
    return directory


# ============================================================================
# MakeDirectory
# ============================================================================


class MakeDirectory(Action):
    """Create a directory, including missing parents.

    The path must not exist yet: an existing path is an operational failure
    ("Directory already exists."), recorded or raised per severity.
    """

    type_name: ClassVar[str] = "MakeDirectory"

    def __init__(self, path: str = "", mode: int | None = None):
        super().__init__()
        self.path = str(path)
        self.mode = mode

    def create(self, path: str) -> MakeDirectory:
        self.path = str(path)
        return self

    def stringify(self) -> str:
        return f"Create directory '{self.path}'."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify the directory path.")
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        directory = Path(self.path)
        if directory.exists():
            raise ActionFailure(self, "Directory already exists.")
        mode = self.mode if self.mode is not None else get_settings().directory_mode
        directory.mkdir(mode=mode, parents=True)
        logger.info("Created directory %s", directory)
        return outcome.set_result(True)


# ============================================================================
# RemoveFile
# ============================================================================


class RemoveFile(Action):
    """Remove a single file, a whole directory, or every path matching a glob."""

    type_name: ClassVar[str] = "RemoveFile"

    REMOVE_SINGLE_FILE: ClassVar[str] = "remove_single_file"
    REMOVE_DIRECTORY: ClassVar[str] = "remove_directory"
    REMOVE_FILE_PATTERN: ClassVar[str] = "remove_file_pattern"
    SUPPORTED_MODES: ClassVar[tuple[str, ...]] = (
        REMOVE_SINGLE_FILE,
        REMOVE_DIRECTORY,
        REMOVE_FILE_PATTERN,
    )

    def __init__(self, path: str = "", mode: str = REMOVE_SINGLE_FILE):
        super().__init__()
        self.path = str(path)
        self.mode = mode

    def remove(self, path: str) -> RemoveFile:
        self.path, self.mode = str(path), self.REMOVE_SINGLE_FILE
        return self

    def remove_directory(self, path: str) -> RemoveFile:
        self.path, self.mode = str(path), self.REMOVE_DIRECTORY
        return self

    def remove_pattern(self, pattern: str) -> RemoveFile:
        self.path, self.mode = str(pattern), self.REMOVE_FILE_PATTERN
        return self

    def set_path(self, path: str) -> RemoveFile:
        self.path = str(path)
        return self

    def stringify(self) -> str:
        if self.mode == self.REMOVE_DIRECTORY:
            return f"Remove directory '{self.path}'."
        if self.mode == self.REMOVE_FILE_PATTERN:
            return f"Remove files with pattern '{self.path}'."
        return f"Remove file '{self.path}'."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify the file path.")
        if not self.mode:
            raise ValidationFailure(self, "You must specify the remove mode.")
        if self.mode not in self.SUPPORTED_MODES:
            raise ValidationFailure(
                self,
                f"The specified mode '{self.mode}' is not supported. "
                f"Supported modes are: '{', '.join(self.SUPPORTED_MODES)}'",
            )
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        if self.mode == self.REMOVE_SINGLE_FILE:
            require_file(self, self.path).unlink()
        elif self.mode == self.REMOVE_DIRECTORY:
            directory = Path(self.path)
            if not directory.is_dir():
                raise ActionFailure(self, f"'{self.path}' is not a valid file path.")
            shutil.rmtree(directory)
        else:
            matches = sorted(glob.glob(self.path))
            for match in matches:
                if os.path.isdir(match) and not os.path.islink(match):
                    shutil.rmtree(match)
                else:
                    os.remove(match)
            logger.info("Removed %d path(s) matching %s", len(matches), self.path)
            return outcome.set_result(bool(matches))
        logger.info("Removed %s", self.path)
        return outcome.set_result(True)


# ============================================================================
# CopyFile
# ============================================================================


class CopyFile(Action):
    """Copy a file, by default next to itself as <stem><suffix><ext>."""

    type_name: ClassVar[str] = "CopyFile"

    def __init__(self, path: str = "", folder: str = "", name: str = ""):
        super().__init__()
        self.path = str(path)
        self.folder = str(folder)
        self.name = name

    def copy_file(self, path: str) -> CopyFile:
        self.path = str(path)
        return self

    def to_folder(self, folder: str) -> CopyFile:
        self.folder = str(folder)
        return self

    def with_name(self, name: str) -> CopyFile:
        self.name = name
        return self

    def destination(self) -> str:
        """Destination file path ("" while no origin path is configured)."""
        if not self.path:
            return ""
        origin = Path(self.path)
        folder = Path(self.folder) if self.folder else origin.parent
        name = self.name or f"{origin.stem}{get_settings().copy_suffix}{origin.suffix}"
        return str(folder / name)

    def stringify(self) -> str:
        return f"Copy file '{self.path}' to '{self.destination()}'."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify a file to be copied.")
        destination = self.destination()
        if os.path.abspath(self.path) == os.path.abspath(destination):
            raise ValidationFailure(
                self,
                f"The origin file '{self.path}' and the specified destination file "
                f"'{destination}' cannot be the same.",
            )
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        origin = require_file(self, self.path)
        destination = Path(self.destination())
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(origin, destination)
        logger.info("Copied %s to %s", origin, destination)
        return outcome.set_result(True)


# ============================================================================
# MoveFile / MoveDirectory
# ============================================================================


class MoveFile(Action):
    """Move a file to a target path."""

    type_name: ClassVar[str] = "MoveFile"
    subject: ClassVar[str] = "file"

    def __init__(self, path: str = "", target: str = ""):
        super().__init__()
        self.path = str(path)
        self.target = str(target)

    def move(self, path: str) -> MoveFile:
        self.path = str(path)
        return self

    def to(self, target: str) -> MoveFile:
        self.target = str(target)
        return self

    def stringify(self) -> str:
        return f"Move {self.subject} '{self.path}' to '{self.target}'."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify a source path.")
        if not self.target:
            raise ValidationFailure(self, "You must specify a target path.")
        return True

    def _require_source(self) -> Path:
        return require_file(self, self.path)

    def apply(self, outcome: Outcome) -> Outcome:
        source = self._require_source()
        target = Path(self.target)
        if target.exists():
            raise ActionFailure(self, f"The target path '{self.target}' already exists.")
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))
        logger.info("Moved %s to %s", source, target)
        return outcome.set_result(True)


class MoveDirectory(MoveFile):
    """Move a directory (and its content) to a target path."""

    type_name: ClassVar[str] = "MoveDirectory"
    subject: ClassVar[str] = "directory"

    def _require_source(self) -> Path:
        return require_directory(self, self.path)


# ============================================================================
# RenameFile / RenameDirectory
# ============================================================================


class RenameFile(Action):
    """Rename a file in place (the new name is a bare name, not a path)."""

    type_name: ClassVar[str] = "RenameFile"
    subject: ClassVar[str] = "file"

    def __init__(self, path: str = "", name: str = ""):
        super().__init__()
        self.path = str(path)
        self.name = name

    def rename(self, path: str) -> RenameFile:
        self.path = str(path)
        return self

    def to(self, name: str) -> RenameFile:
        self.name = name
        return self

    def stringify(self) -> str:
        return f"Rename {self.subject} '{self.path}' to '{self.name}'."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify a source path.")
        if not self.name:
            raise ValidationFailure(self, "You must specify a target name.")
        if "/" in self.name or os.sep in self.name:
            raise ValidationFailure(
                self,
                "Valid target names should not contain any directory separator. "
                f"Found '{self.name}'.",
            )
        return True

    def _require_source(self) -> Path:
        return require_file(self, self.path)

    def apply(self, outcome: Outcome) -> Outcome:
        source = self._require_source()
        target = source.with_name(self.name)
        if target.exists():
            raise ActionFailure(self, f"The target path '{target}' already exists.")
        source.rename(target)
        logger.info("Renamed %s to %s", source, target)
        return outcome.set_result(True)


class RenameDirectory(RenameFile):
    """Rename a directory in place."""

    type_name: ClassVar[str] = "RenameDirectory"
    subject: ClassVar[str] = "directory"

    def _require_source(self) -> Path:
        return require_directory(self, self.path)


# ============================================================================
# UnzipFile
# ============================================================================


class UnzipFile(Action):
    """Extract a ZIP archive (by default into the archive's folder)."""

    type_name: ClassVar[str] = "UnzipFile"

    def __init__(self, path: str = "", target: str = ""):
        super().__init__()
        self.path = str(path)
        self.target = str(target)

    def open(self, path: str) -> UnzipFile:
        self.path = str(path)
        return self

    def extract_to(self, target: str) -> UnzipFile:
        self.target = str(target)
        return self

    def extract_path(self) -> str:
        if self.target or not self.path:
            return self.target
        return str(Path(self.path).parent)

    def stringify(self) -> str:
        return f"Unzip file '{self.path}' to '{self.extract_path()}'."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify the zip file path.")
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        archive = require_file(self, self.path)
        try:
            with zipfile.ZipFile(archive) as zip_file:
                zip_file.extractall(self.extract_path())
        except (zipfile.BadZipFile, OSError) as e:
            raise ActionFailure(
                self, f"Impossible to unzip the ZIP file {self.path}. Reason: {e}"
            ) from e
        logger.info("Extracted %s to %s", archive, self.extract_path())
        return outcome.set_result(True)


__all__ = [
    "MakeDirectory",
    "RemoveFile",
    "CopyFile",
    "MoveFile",
    "MoveDirectory",
    "RenameFile",
    "RenameDirectory",
    "UnzipFile",
    "require_file",
    "require_directory",
]
