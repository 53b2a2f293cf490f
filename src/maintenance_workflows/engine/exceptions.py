"""Failure types raised by actions and by the action runtime.

Every failure an action can produce is a WorkerFailure. ActionFailure is the
tree-shaped variant: it names the failing action and embeds the failures of
the nested or hook actions that caused it, so a composite failure preserves
the full causal chain for reporting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .action import Action


class WorkerFailure(Exception):
    """
    Base class for every failure produced by the engine.

    Attributes:
        message: Human-readable failure description
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the failure for reports."""
        return {"error_message": self.message}

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{type(self).__name__}(message={self.message!r})"


class ActionFailure(WorkerFailure):
    """
    Operational failure of an action.

    Raised by apply() logic or by the runtime while driving an action. Whether
    it propagates out of Action.run() is decided by the action's severity
    flags (see severity.Severity).

    Attributes:
        action: The action that failed
        children: Failures of nested/hook actions that caused this failure
    """

    def __init__(
        self,
        action: Action,
        message: str,
        children: list[ActionFailure] | None = None,
    ):
        """
        Initialize action failure.

        Args:
            action: Failing action (the failure's origin)
            message: Failure description
            children: Optional child failures, attached in order
        """
        super().__init__(message)
        self.action = action
        self.children: list[ActionFailure] = []
        for child in children or []:
            self.add_child(child)

    def add_child(self, failure: ActionFailure) -> ActionFailure:
        """Append a child failure and return self."""
        self.children.append(failure)
        return self

    def is_critical(self) -> bool:
        """Check if this failure tree holds a fatal or success-required action."""
        return failures_are_critical([self])

    def to_dict(self) -> dict[str, Any]:
        """Serialize the failure tree (children serialized recursively)."""
        return {
            "action": self.action.stringify(),
            "error_message": self.message,
            "children_failures": [child.to_dict() for child in self.children],
        }

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"{type(self).__name__}(action={self.action.stringify()!r}, "
            f"message={self.message!r}, children={len(self.children)})"
        )


class ValidationFailure(ActionFailure):
    """
    Configuration breach detected by Action.is_valid().

    Never subject to the severity policy: a badly configured action always
    aborts its caller.
    """


class ConfigurationFailure(WorkerFailure):
    """
    Invalid builder call (e.g. a non-action registered as a nested action).

    Raised immediately while an action graph is being assembled, before any
    action runs.
    """


class MissingKeyFailure(WorkerFailure):
    """
    A dotted key is not defined in nested content.

    Attributes:
        missing_key: The full dotted key that could not be resolved
    """

    def __init__(self, missing_key: str, message: str | None = None):
        self.missing_key = missing_key
        super().__init__(message or f"The key '{missing_key}' is not defined.")

    def to_dict(self) -> dict[str, Any]:
        """Serialize the failure with the missing key."""
        return {"missing_key": self.missing_key, "error_message": self.message}

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"MissingKeyFailure(missing_key={self.missing_key!r})"


def failures_are_critical(failures: list[ActionFailure]) -> bool:
    """Walk failure trees and report whether any failing action is critical.

    A failing action is critical when it is flagged fatal or success-required.
    The walk is iterative and does not raise.

    Args:
        failures: Root failures to inspect

    Returns:
        True if any failure in any tree names a critical action
    """
    pending = list(failures)
    while pending:
        failure = pending.pop()
        if failure.action.fatal or failure.action.success_required:
            return True
        pending.extend(failure.children)
    return False


__all__ = [
    "WorkerFailure",
    "ActionFailure",
    "ValidationFailure",
    "ConfigurationFailure",
    "MissingKeyFailure",
    "failures_are_critical",
]
