"""Tests for Outcome status derivation, critical-failure detection and reports."""

import pytest
from action_helpers import StubAction

from maintenance_workflows.engine.exceptions import ActionFailure, failures_are_critical
from maintenance_workflows.engine.outcome import (
    Outcome,
    OutcomeStatus,
    outcome_has_critical_failures,
)


@pytest.mark.parametrize(
    ("failed", "pre", "post", "expected"),
    [
        (False, False, False, OutcomeStatus.SUCCESS_NO_FAILURES),
        (False, True, True, OutcomeStatus.SUCCESS_WITH_PRE_POST_RUN_FAILURES),
        (True, False, True, OutcomeStatus.FAILED_WITH_POST_RUN_FAILURES),
        (True, True, False, OutcomeStatus.FAILED_WITH_PRE_RUN_FAILURES),
    ],
)
def test_status_derivation(failed: bool, pre: bool, post: bool, expected: OutcomeStatus) -> None:
    assert OutcomeStatus.derive(failed, pre, post) == expected


def test_status_helpers() -> None:
    assert OutcomeStatus.SUCCESS_WITH_PRE_RUN_FAILURES.is_success()
    assert not OutcomeStatus.SUCCESS_WITH_PRE_RUN_FAILURES.is_successful_run()
    assert not OutcomeStatus.FAILED.is_success()


def test_status_reflects_recorded_lists() -> None:
    action = StubAction("main")
    outcome = Outcome(action)
    outcome.add_failure(ActionFailure(action, "broken"))
    outcome.add_post_run_outcome(Outcome(StubAction("after")), failed=True)

    assert outcome.status == OutcomeStatus.FAILED_WITH_POST_RUN_FAILURES
    assert not outcome.is_successful_run()


def test_outcome_snapshots_action() -> None:
    """Reconfiguring the live action does not rewrite a recorded outcome."""
    action = StubAction("before-change")
    outcome = action.run()

    action.name = "after-change"
    action.set_fatal()

    assert outcome.action.name == "before-change"
    assert outcome.action.fatal is False


# ============================================================================
# Critical failures
# ============================================================================


def test_non_critical_failures_are_not_critical() -> None:
    action = StubAction("main")
    outcome = Outcome(action).add_failure(ActionFailure(action, "recorded"))

    assert not outcome.has_critical_failures()


def test_critical_failure_deep_in_tree() -> None:
    """A fatal action buried under non-critical failures makes the tree critical."""
    leaf = StubAction("leaf").set_fatal()
    middle = ActionFailure(StubAction("middle"), "middle", [ActionFailure(leaf, "leaf broke")])
    root = ActionFailure(StubAction("root"), "root", [middle])

    assert failures_are_critical([root])
    assert root.is_critical()
    assert Outcome(StubAction("holder")).add_failure(root).has_critical_failures()


def test_critical_failure_in_failed_hook_outcome() -> None:
    hook = StubAction("hook").set_success_required()
    hook_outcome = Outcome(hook).add_failure(ActionFailure(hook, "hook broke"))
    outcome = Outcome(StubAction("main")).add_pre_run_outcome(hook_outcome, failed=True)

    assert outcome_has_critical_failures(outcome)


def test_successful_hook_outcomes_are_ignored() -> None:
    hook = StubAction("hook").set_fatal()
    hook_outcome = Outcome(hook).add_failure(ActionFailure(hook, "ignored"))
    outcome = Outcome(StubAction("main")).add_post_run_outcome(hook_outcome, failed=False)

    assert not outcome.has_critical_failures()


# ============================================================================
# Reports
# ============================================================================


def test_to_dict_report() -> None:
    action = StubAction("main", error="boom").add_before_action(StubAction("before"))
    outcome = action.run()

    report = outcome.to_dict()

    assert report["execution_status"] == "failed"
    assert report["result"] is False
    assert report["action"]["action_description"] == "Stub action 'main'."
    assert report["main_action_failures"] == [
        {"action": "Stub action 'main'.", "error_message": "boom", "children_failures": []}
    ]
    assert len(report["pre_run_action_results"]) == 1
    assert report["post_run_action_results"] == []
    assert report["start_timestamp"] <= report["end_timestamp"]
