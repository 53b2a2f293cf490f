"""
Plan runner.

Runs a plan's top-level actions in order, each one with its own fatal and
success_required flags: a raised failure stops the run, a recorded one does
not. Outcomes are kept per action execution id.
"""

import logging
from collections.abc import Iterable
from typing import Any

from .action import Action, describe_value
from .exceptions import ConfigurationFailure
from .outcome import Outcome

logger = logging.getLogger(__name__)


class PlanRunner:
    """
    Ordered list of actions plus the outcomes of the ones that ran.

    Usage:
        runner = PlanRunner("cleanup", [RemoveFile("build/tmp.log")])
        runner.is_valid()
        runner.run()
        if not runner.check_results():
            print(runner.to_dict())
    """

    def __init__(self, name: str = "", actions: Iterable[Any] | None = None):
        self.name = name
        self.actions: list[Action] = []
        self.outcomes: dict[str, Outcome] = {}
        if actions is not None:
            self.add_actions(actions)

    def add_action(self, action: Action) -> "PlanRunner":
        if not isinstance(action, Action):
            raise ConfigurationFailure(
                f"Invalid action detected. Found [{describe_value(action)}]. "
                "Action subclass instance expected."
            )
        self.actions.append(action)
        return self

    def add_actions(self, actions: Iterable[Any]) -> "PlanRunner":
        for action in actions:
            self.add_action(action)
        return self

    def is_valid(self) -> bool:
        """Validate every action before anything runs.

        Raises:
            ValidationFailure: The first badly configured action
        """
        for action in self.actions:
            action.is_valid()
        return True

    def run(self) -> list[Outcome]:
        """Run the actions in order and return their outcomes.

        Raises:
            ValidationFailure: An action is badly configured
            ActionFailure: A fatal or success-required action failed; actions
                after it do not run
        """
        for action in self.actions:
            logger.info("Running action %s", action.execution_id)
            outcome = action.run()
            self.outcomes[action.execution_id] = outcome
            if not outcome.is_successful_run():
                logger.warning(
                    "Action %s finished with status %s", action.execution_id, outcome.status.value
                )
        return list(self.outcomes.values())

    def check_results(self) -> bool:
        """True if every action that ran returned a positive result."""
        return all(
            outcome.action.validate_result(outcome) for outcome in self.outcomes.values()
        )

    def has_critical_failures(self) -> bool:
        return any(outcome.has_critical_failures() for outcome in self.outcomes.values())

    def reset(self) -> None:
        """Drop every action and outcome."""
        self.actions = []
        self.outcomes = {}

    def to_dict(self) -> dict[str, Any]:
        """Report of the run: outcomes of the actions that ran, then the rest."""
        return {
            "plan": self.name,
            "succeeded": self.check_results(),
            "action_results": [outcome.to_dict() for outcome in self.outcomes.values()],
            "pending_actions": [
                action.to_dict()
                for action in self.actions
                if action.execution_id not in self.outcomes
            ],
        }


__all__ = ["PlanRunner"]
