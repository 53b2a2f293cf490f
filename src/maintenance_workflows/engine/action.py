"""Base action and the lifecycle driver shared by every action.

An action is a self-validating, self-describing unit of work. Concrete
actions implement three hooks:

- validate_instance(): structural checks, raising ValidationFailure on breach
- apply(outcome): the actual work, storing the result via outcome.set_result()
- stringify(): human-readable description, safe to call before validation

run() drives the lifecycle for all of them:

    is_valid() -> before-hooks -> apply() -> severity disposition
               -> success-required check -> after-hooks

Severity is two independent flags (fatal, success_required); see
severity.Severity for the four resulting policies.
"""

from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar

from .exceptions import (
    ActionFailure,
    ConfigurationFailure,
    ValidationFailure,
    failures_are_critical,
)
from .outcome import Outcome
from .severity import Severity

logger = logging.getLogger(__name__)

CHILD_FAILURE_MESSAGE = "Action failure caused by one failed child action."
SUCCESS_REQUIRED_MESSAGE = "Positive result expected (action marked as 'success-required')."
PRE_RUN_FAILURE_MESSAGE = "Action failure caused by a fatal pre-run failed action."
POST_RUN_FAILURE_MESSAGE = "Action failure caused by a fatal post-run failed action."
NESTED_ACTIONS_INVALID_MESSAGE = "One or more nested actions are not valid."


class Action(ABC):
    """Base class for every leaf action and composite.

    Subclasses must:
    1. Call super().__init__() before setting their own configuration
    2. Implement validate_instance(), apply() and stringify()
    3. Optionally override validate_result() and set_negative_result()

    Example:
        class TouchFile(Action):
            def __init__(self, path: str = ""):
                super().__init__()
                self.path = path

            def validate_instance(self) -> bool:
                if not self.path:
                    raise ValidationFailure(self, "You must specify the file path.")
                return True

            def apply(self, outcome: Outcome) -> Outcome:
                Path(self.path).touch()
                return outcome.set_result(True)

            def stringify(self) -> str:
                return f"Touch file '{self.path}'."
    """

    # Plan/registry identifier (e.g., "MakeDirectory"), set by concrete subclasses
    type_name: ClassVar[str]

    def __init__(self) -> None:
        self.fatal = False
        self.success_required = False
        self.before_actions: list[Action] = []
        self.after_actions: list[Action] = []
        self.execution_id = f"{type(self).__name__}_{uuid.uuid4().hex[:13]}"

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @abstractmethod
    def validate_instance(self) -> bool:
        """Check the action configuration.

        Returns:
            True if the action is well configured

        Raises:
            ValidationFailure: On any configuration breach
        """

    @abstractmethod
    def apply(self, outcome: Outcome) -> Outcome:
        """Perform the action and store its result on the given outcome.

        Args:
            outcome: Fresh outcome created by run()

        Returns:
            The same outcome, with its result set

        Raises:
            ActionFailure: Operational failure (subject to the severity policy)
        """

    @abstractmethod
    def stringify(self) -> str:
        """Describe the action. Must not raise."""

    def validate_result(self, outcome: Outcome) -> bool:
        """Check if the outcome's result is this action's positive case."""
        return bool(outcome.result)

    def set_negative_result(self, outcome: Outcome) -> None:
        """Store this action's negative-case result on the outcome."""
        outcome.set_result(False)

    def __str__(self) -> str:
        return self.stringify()

    # ------------------------------------------------------------------
    # Builder setters
    # ------------------------------------------------------------------

    def set_fatal(self, fatal: bool = True) -> Action:
        self.fatal = fatal
        return self

    def set_success_required(self, success_required: bool = True) -> Action:
        self.success_required = success_required
        return self

    def set_severity(self, severity: Severity) -> Action:
        """Set both severity flags from a Severity member."""
        self.fatal, self.success_required = severity.flags
        return self

    @property
    def severity(self) -> Severity:
        return Severity.of(self.fatal, self.success_required)

    def add_before_action(self, action: Action) -> Action:
        """Register a hook run before apply(). The hook is copied on registration."""
        self.before_actions.append(self._adopt(action).copy())
        return self

    def add_after_action(self, action: Action) -> Action:
        """Register a hook run after apply(). The hook is copied on registration."""
        self.after_actions.append(self._adopt(action).copy())
        return self

    def copy(self) -> Action:
        """Return an independent deep copy (same execution id)."""
        return copy.deepcopy(self)

    def with_severity(
        self, fatal: bool | None = None, success_required: bool | None = None
    ) -> Action:
        """Return a copy with the given severity flags forced.

        Flags left as None keep their current value. The receiver is never
        modified.
        """
        clone = self.copy()
        if fatal is not None:
            clone.fatal = fatal
        if success_required is not None:
            clone.success_required = success_required
        return clone

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_valid(self) -> bool:
        """Run validate_instance(), normalizing every error to ValidationFailure."""
        try:
            valid = self.validate_instance()
        except ValidationFailure:
            raise
        except Exception as e:
            raise ValidationFailure(self, str(e)) from e
        if not valid:
            raise ValidationFailure(self, f"Invalid action configuration: {self.stringify()}")
        return True

    def validate_nested_actions(
        self,
        actions: Iterable[Any],
        message: str = NESTED_ACTIONS_INVALID_MESSAGE,
        expected_type: type[Action] | None = None,
    ) -> bool:
        """Validate nested actions, aggregating every breach into one failure.

        Args:
            actions: Nested actions to check
            message: Message of the aggregated failure
            expected_type: Required action class (defaults to Action)

        Returns:
            True if every nested action is valid

        Raises:
            ValidationFailure: With one child per invalid nested action
        """
        expected = expected_type or Action
        breaches: list[ActionFailure] = []
        for action in actions:
            if not isinstance(action, expected):
                breaches.append(
                    ValidationFailure(
                        self,
                        f"Unsupported nested action type [{type(action).__name__}] registered "
                        f"in [{type(self).__name__}]. Nested actions should be instances of "
                        f"[{expected.__name__}].",
                    )
                )
                continue
            try:
                action.is_valid()
            except ValidationFailure as failure:
                breaches.append(failure)
        if breaches:
            raise ValidationFailure(self, message, breaches)
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> Outcome:
        """Validate and execute the action with its hooks.

        Returns:
            The outcome of this run (may record non-critical failures)

        Raises:
            ValidationFailure: The action (or a hook) is badly configured
            ActionFailure: A failure that the severity policy does not absorb
        """
        self.is_valid()

        outcome = Outcome(self)
        outcome.mark_started()
        logger.debug("Running action %s: %s", self.execution_id, self.stringify())

        self._run_hooks(self.before_actions, outcome, pre_run=True)

        try:
            outcome = self.apply(outcome)
        except Exception as e:
            failure, child_critical = self._failure_from(e)
            self.set_negative_result(outcome)
            if self.fatal or child_critical:
                logger.debug("Action %s raised: %s", self.execution_id, failure.message)
                if failure is e:
                    raise
                raise failure from e
            logger.warning("Action failed (non-critical): %s - %s", self.stringify(), failure.message)
            outcome.add_failure(failure)

        if self.success_required and not self.validate_result(outcome):
            logger.debug("Action %s returned a negative result", self.execution_id)
            if len(outcome.failures) == 1:
                raise outcome.failures[0]
            raise ActionFailure(self, SUCCESS_REQUIRED_MESSAGE, list(outcome.failures))

        self._run_hooks(self.after_actions, outcome, pre_run=False)

        outcome.mark_finished()
        logger.debug("Action %s finished: %s", self.execution_id, outcome.status.value)
        return outcome

    def _failure_from(self, error: Exception) -> tuple[ActionFailure, bool]:
        """Convert an apply-time error into this action's failure.

        Returns:
            (failure, child_critical) where child_critical tells whether the
            error came from a child action whose failure tree is critical
        """
        if not isinstance(error, ActionFailure):
            return ActionFailure(self, str(error)), False
        if error.action is self:
            return error, failures_are_critical(error.children)
        # Raised by a nested child action
        wrapper = ActionFailure(self, CHILD_FAILURE_MESSAGE, [error])
        return wrapper, failures_are_critical([error])

    def _run_hooks(self, hooks: list[Action], outcome: Outcome, pre_run: bool) -> None:
        record = outcome.add_pre_run_outcome if pre_run else outcome.add_post_run_outcome
        for hook in hooks:
            hook_outcome = Outcome(hook)
            hook_outcome.mark_started()
            try:
                hook_outcome = hook.run()
                failed = not hook_outcome.is_successful_run() or not hook.validate_result(
                    hook_outcome
                )
            except ValidationFailure:
                raise
            except ActionFailure as failure:
                hook_outcome.add_failure(failure)
                hook_outcome.mark_finished()
                record(hook_outcome, True)
                if hook.fatal or hook.success_required:
                    message = PRE_RUN_FAILURE_MESSAGE if pre_run else POST_RUN_FAILURE_MESSAGE
                    raise ActionFailure(self, message, [failure]) from failure
                logger.warning("Hook failed (non-critical): %s - %s", hook.stringify(), failure.message)
                continue
            record(hook_outcome, failed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _adopt(self, action: Any) -> Action:
        if not isinstance(action, Action):
            raise ConfigurationFailure(
                f"Invalid action detected. Found [{describe_value(action)}]. "
                "Action subclass instance expected."
            )
        return action

    def to_dict(self) -> dict[str, Any]:
        """Describe the action configuration for reports."""
        return {
            "action_type": type(self).__name__,
            "action_description": self.stringify(),
            "execution_id": self.execution_id,
            "fatal": self.fatal,
            "success_required": self.success_required,
        }


def describe_value(value: Any) -> str:
    """Short type/value description used in configuration error messages."""
    return f"Class type: {type(value).__name__}. Value: {value!r}."


__all__ = [
    "Action",
    "describe_value",
    "CHILD_FAILURE_MESSAGE",
    "SUCCESS_REQUIRED_MESSAGE",
    "PRE_RUN_FAILURE_MESSAGE",
    "POST_RUN_FAILURE_MESSAGE",
    "NESTED_ACTIONS_INVALID_MESSAGE",
]
