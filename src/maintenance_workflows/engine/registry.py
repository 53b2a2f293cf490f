"""Action registry - maps plan type names to action factories."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, PrivateAttr

from .action import Action
from .exceptions import ConfigurationFailure

logger = logging.getLogger(__name__)

ActionFactory = Callable[..., Action]


class ActionRegistry(BaseModel):
    """
    Registry of action factories.

    Maps type names (as used in plan files) to callables building an Action
    from keyword parameters. Action classes are their own factories.
    """

    model_config = {"arbitrary_types_allowed": True}

    _factories: dict[str, ActionFactory] = PrivateAttr(default_factory=dict)

    def register(self, factory: ActionFactory, type_name: str | None = None) -> None:
        """Register factory under type_name (defaults to factory.type_name)."""
        name = type_name or getattr(factory, "type_name", None)
        if not name:
            raise ValueError(f"Cannot register {factory!r}: no type name given")
        if name in self._factories:
            raise ValueError(f"Action type already registered: {name}")
        self._factories[name] = factory

    def get(self, type_name: str) -> ActionFactory:
        """Get factory by type name."""
        if type_name not in self._factories:
            available = sorted(self._factories.keys())
            raise ValueError(f"Unknown action type: {type_name}. Available: {available}")
        return self._factories[type_name]

    def has(self, type_name: str) -> bool:
        return type_name in self._factories

    def list_types(self) -> list[str]:
        """List registered action types."""
        return list(self._factories.keys())

    def create(self, type_name: str, **params: Any) -> Action:
        """Build an action of the given type.

        Raises:
            ConfigurationFailure: Unknown type or parameters the factory rejects
        """
        try:
            factory = self.get(type_name)
        except ValueError as e:
            raise ConfigurationFailure(str(e)) from e
        try:
            return factory(**params)
        except TypeError as e:
            raise ConfigurationFailure(f"Invalid parameters for action type {type_name}: {e}") from e


def create_default_registry() -> ActionRegistry:
    """Create ActionRegistry with every built-in action and composite registered.

    Example:
        registry = create_default_registry()
        action = registry.create("MakeDirectory", path="build")
    """
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
    from .actions_list import FilesInDirectory
    from .actions_transform import (
        ChangeConfigFileEntries,
        EmptyTransform,
        LineEdit,
        ModifyArray,
        ModifyFile,
    )
    from .conditionals import ForEachLoop, IfStatement, SwitchStatement

    registry = ActionRegistry()
    action_classes: list[type[Action]] = [
        MakeDirectory,
        RemoveFile,
        CopyFile,
        MoveFile,
        MoveDirectory,
        RenameFile,
        RenameDirectory,
        UnzipFile,
        FileExists,
        FileDoesNotExist,
        DirectoryExists,
        DirectoryDoesNotExist,
        VerifyString,
        VerifyArray,
        ConfigFileHasValidEntries,
        ModifyArray,
        EmptyTransform,
        ChangeConfigFileEntries,
        LineEdit,
        ModifyFile,
        FilesInDirectory,
        IfStatement,
        SwitchStatement,
        ForEachLoop,
    ]
    for action_class in action_classes:
        registry.register(action_class)

    logger.debug("Registered %d action types", len(action_classes))
    return registry


__all__ = ["ActionFactory", "ActionRegistry", "create_default_registry"]
