"""
Outcome record for a single action run.

An Outcome is created at the start of Action.run(), mutated only by that run,
and returned to the caller. It owns a snapshot of the action it describes, so
reconfiguring the live action later never rewrites a recorded outcome.

Outcomes nest: failed and successful hook outcomes hang off the parent, and
composites append the outcomes of the children they ran. The derived status
and the critical-failure walk both work over that tree.
"""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import ActionFailure, failures_are_critical

if TYPE_CHECKING:
    from .action import Action

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    """
    Derived run status.

    Crosses "has direct failures?" with "has failed pre-run hooks?" with
    "has failed post-run hooks?".
    """

    SUCCESS_NO_FAILURES = "success_no_failures"
    SUCCESS_WITH_PRE_RUN_FAILURES = "success_with_pre_run_failures"
    SUCCESS_WITH_POST_RUN_FAILURES = "success_with_post_run_failures"
    SUCCESS_WITH_PRE_POST_RUN_FAILURES = "success_with_pre_post_run_failures"
    FAILED = "failed"
    FAILED_WITH_PRE_RUN_FAILURES = "failed_with_pre_run_failures"
    FAILED_WITH_POST_RUN_FAILURES = "failed_with_post_run_failures"
    FAILED_WITH_PRE_POST_RUN_FAILURES = "failed_with_pre_post_run_failures"

    @classmethod
    def derive(cls, failed: bool, failed_pre_run: bool, failed_post_run: bool) -> OutcomeStatus:
        """Select the status for the given combination of failure flags."""
        return _STATUS_TABLE[(failed, failed_pre_run, failed_post_run)]

    def is_success(self) -> bool:
        """Check if the action itself recorded no direct failures."""
        return self.value.startswith("success")

    def is_successful_run(self) -> bool:
        """Check if neither the action nor any of its hooks failed."""
        return self == OutcomeStatus.SUCCESS_NO_FAILURES


_STATUS_TABLE: dict[tuple[bool, bool, bool], OutcomeStatus] = {
    (False, False, False): OutcomeStatus.SUCCESS_NO_FAILURES,
    (False, True, False): OutcomeStatus.SUCCESS_WITH_PRE_RUN_FAILURES,
    (False, False, True): OutcomeStatus.SUCCESS_WITH_POST_RUN_FAILURES,
    (False, True, True): OutcomeStatus.SUCCESS_WITH_PRE_POST_RUN_FAILURES,
    (True, False, False): OutcomeStatus.FAILED,
    (True, True, False): OutcomeStatus.FAILED_WITH_PRE_RUN_FAILURES,
    (True, False, True): OutcomeStatus.FAILED_WITH_POST_RUN_FAILURES,
    (True, True, True): OutcomeStatus.FAILED_WITH_PRE_POST_RUN_FAILURES,
}


@dataclass
class Outcome:
    """
    Record of one action execution.

    Usage:
        outcome = MakeDirectory("/tmp/build").run()
        if not outcome.is_successful_run():
            for failure in outcome.failures:
                print(failure.message)
    """

    action: Action
    result: Any = None
    failures: list[ActionFailure] = field(default_factory=list)
    failed_pre_run: list[Outcome] = field(default_factory=list)
    successful_pre_run: list[Outcome] = field(default_factory=list)
    failed_post_run: list[Outcome] = field(default_factory=list)
    successful_post_run: list[Outcome] = field(default_factory=list)
    nested: list[Outcome] = field(default_factory=list)
    start_timestamp: float | None = None
    end_timestamp: float | None = None

    def __post_init__(self) -> None:
        # Snapshot: later changes to the live action must not leak in
        self.action = copy.deepcopy(self.action)

    def set_result(self, result: Any) -> Outcome:
        """Set the result value and return self."""
        self.result = result
        return self

    def add_failure(self, failure: ActionFailure) -> Outcome:
        """Append a direct failure and return self."""
        self.failures.append(failure)
        return self

    def add_pre_run_outcome(self, outcome: Outcome, failed: bool) -> Outcome:
        """Record a before-hook outcome in the failed or successful list."""
        (self.failed_pre_run if failed else self.successful_pre_run).append(outcome)
        return self

    def add_post_run_outcome(self, outcome: Outcome, failed: bool) -> Outcome:
        """Record an after-hook outcome in the failed or successful list."""
        (self.failed_post_run if failed else self.successful_post_run).append(outcome)
        return self

    def add_nested_outcome(self, outcome: Outcome) -> Outcome:
        """Append the outcome of a child run by a composite."""
        self.nested.append(outcome)
        return self

    def mark_started(self) -> None:
        self.start_timestamp = time.time()

    def mark_finished(self) -> None:
        self.end_timestamp = time.time()

    @property
    def status(self) -> OutcomeStatus:
        """Derived status (see OutcomeStatus)."""
        return OutcomeStatus.derive(
            bool(self.failures), bool(self.failed_pre_run), bool(self.failed_post_run)
        )

    def is_successful_run(self) -> bool:
        """Check if the run recorded no failure at all (direct or hook)."""
        return self.status.is_successful_run()

    def has_critical_failures(self) -> bool:
        """Check if a fatal or success-required action failed anywhere in this tree."""
        return outcome_has_critical_failures(self)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize the outcome tree for reporting.

        Failed hook outcomes are listed before successful ones.
        """
        result = self.result
        if hasattr(result, "stringify") and hasattr(result, "to_dict"):
            result = result.to_dict()
        return {
            "action": self.action.to_dict(),
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "execution_status": self.status.value,
            "result": result,
            "main_action_failures": [failure.to_dict() for failure in self.failures],
            "pre_run_action_results": [
                outcome.to_dict() for outcome in self.failed_pre_run + self.successful_pre_run
            ],
            "post_run_action_results": [
                outcome.to_dict() for outcome in self.failed_post_run + self.successful_post_run
            ],
            "nested_action_results": [outcome.to_dict() for outcome in self.nested],
        }


def outcome_has_critical_failures(outcome: Outcome) -> bool:
    """Pure critical-failure walk over an outcome tree.

    Inspects the outcome's direct failures (and their children), then every
    failed pre-/post-run hook outcome recursively.

    Args:
        outcome: Root outcome

    Returns:
        True if any failing action in the tree is fatal or success-required
    """
    pending = [outcome]
    while pending:
        current = pending.pop()
        if failures_are_critical(current.failures):
            return True
        pending.extend(current.failed_pre_run)
        pending.extend(current.failed_post_run)
    return False


__all__ = ["Outcome", "OutcomeStatus", "outcome_has_critical_failures"]
