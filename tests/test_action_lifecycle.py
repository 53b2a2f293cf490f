"""Tests for the Action lifecycle: validation, severity disposition and hooks."""

import pytest
from action_helpers import CallLog, CrashingAction, StubAction

from maintenance_workflows.engine.action import (
    CHILD_FAILURE_MESSAGE,
    POST_RUN_FAILURE_MESSAGE,
    PRE_RUN_FAILURE_MESSAGE,
    SUCCESS_REQUIRED_MESSAGE,
)
from maintenance_workflows.engine.exceptions import (
    ActionFailure,
    ConfigurationFailure,
    ValidationFailure,
)
from maintenance_workflows.engine.outcome import OutcomeStatus
from maintenance_workflows.engine.severity import Severity

# ============================================================================
# Severity disposition
# ============================================================================


def test_non_critical_failure_is_recorded(call_log: CallLog) -> None:
    """A failing non-critical action returns an outcome holding the failure."""
    action = StubAction("main", error="boom", log=call_log)

    outcome = action.run()

    assert call_log.calls == ["main"]
    assert outcome.result is False
    assert [failure.message for failure in outcome.failures] == ["boom"]
    assert outcome.status == OutcomeStatus.FAILED
    assert not outcome.has_critical_failures()


def test_non_critical_plain_error_is_wrapped() -> None:
    """Plain Python errors from apply() become failures of the action."""
    action = CrashingAction("crash")

    outcome = action.run()

    assert len(outcome.failures) == 1
    assert outcome.failures[0].message == "crash crashed"
    assert outcome.failures[0].action is action


def test_fatal_failure_propagates() -> None:
    action = StubAction(error="boom").set_fatal()

    with pytest.raises(ActionFailure, match="boom") as exc_info:
        action.run()

    assert exc_info.value.action is action


def test_fatal_plain_error_is_raised_as_action_failure() -> None:
    """The original error is kept as the cause of the raised failure."""
    action = CrashingAction("crash").set_fatal()

    with pytest.raises(ActionFailure, match="crash crashed") as exc_info:
        action.run()

    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_fatal_accepts_negative_result() -> None:
    outcome = StubAction(result=False).set_fatal().run()

    assert outcome.result is False
    assert outcome.status == OutcomeStatus.SUCCESS_NO_FAILURES


def test_success_required_promotes_negative_result() -> None:
    """A negative result raises even though apply() raised nothing."""
    action = StubAction(result=False).set_success_required()

    with pytest.raises(ActionFailure, match="Positive result expected") as exc_info:
        action.run()

    assert exc_info.value.message == SUCCESS_REQUIRED_MESSAGE
    assert exc_info.value.children == []


def test_success_required_raises_recorded_apply_failure() -> None:
    """The recorded apply failure leaves a negative result, raised as is."""
    action = StubAction(error="disk full").set_success_required()

    with pytest.raises(ActionFailure, match="disk full"):
        action.run()


def test_success_required_positive_result_returns() -> None:
    outcome = StubAction(result="done").set_success_required().run()

    assert outcome.result == "done"
    assert outcome.is_successful_run()


def test_critical_raises_on_negative_result() -> None:
    action = StubAction(result=0).set_severity(Severity.CRITICAL)

    with pytest.raises(ActionFailure):
        action.run()


# ============================================================================
# Validation
# ============================================================================


def test_validation_failure_ignores_severity(call_log: CallLog) -> None:
    """An invalid action raises even when non-critical, and never applies."""
    action = StubAction("broken", log=call_log, invalid=True)

    with pytest.raises(ValidationFailure, match="misconfigured"):
        action.run()

    assert call_log.calls == []


def test_validate_nested_actions_aggregates_breaches() -> None:
    parent = StubAction("parent")
    nested = [StubAction("a", invalid=True), StubAction("b"), "not an action"]

    with pytest.raises(ValidationFailure) as exc_info:
        parent.validate_nested_actions(nested, "Nested actions are broken.")

    failure = exc_info.value
    assert failure.message == "Nested actions are broken."
    assert len(failure.children) == 2
    assert "Unsupported nested action type [str]" in failure.children[1].message


# ============================================================================
# Hooks
# ============================================================================


def test_hooks_run_around_apply_in_order(call_log: CallLog) -> None:
    action = (
        StubAction("main", log=call_log)
        .add_before_action(StubAction("before-1", log=call_log))
        .add_before_action(StubAction("before-2", log=call_log))
        .add_after_action(StubAction("after-1", log=call_log))
    )

    outcome = action.run()

    assert call_log.calls == ["before-1", "before-2", "main", "after-1"]
    assert len(outcome.successful_pre_run) == 2
    assert len(outcome.successful_post_run) == 1
    assert outcome.status == OutcomeStatus.SUCCESS_NO_FAILURES


def test_non_critical_hook_failure_is_absorbed(call_log: CallLog) -> None:
    action = StubAction("main", log=call_log).add_before_action(
        StubAction("before", error="hook broke", log=call_log)
    )

    outcome = action.run()

    assert call_log.calls == ["before", "main"]
    assert outcome.status == OutcomeStatus.SUCCESS_WITH_PRE_RUN_FAILURES
    assert outcome.failed_pre_run[0].failures[0].message == "hook broke"


def test_negative_hook_result_counts_as_failed_hook() -> None:
    action = StubAction("main").add_after_action(StubAction("after", result=False))

    outcome = action.run()

    assert outcome.status == OutcomeStatus.SUCCESS_WITH_POST_RUN_FAILURES
    assert outcome.failed_post_run[0].result is False


def test_fatal_before_hook_aborts_parent(call_log: CallLog) -> None:
    hook = StubAction("before", error="hook broke", log=call_log).set_fatal()
    action = StubAction("main", log=call_log).add_before_action(hook)

    with pytest.raises(ActionFailure) as exc_info:
        action.run()

    failure = exc_info.value
    assert failure.message == PRE_RUN_FAILURE_MESSAGE
    assert failure.action is action
    assert [child.message for child in failure.children] == ["hook broke"]
    assert call_log.calls == ["before"]


def test_success_required_after_hook_aborts_parent() -> None:
    hook = StubAction("after", result=False).set_success_required()
    action = StubAction("main").add_after_action(hook)

    with pytest.raises(ActionFailure) as exc_info:
        action.run()

    assert exc_info.value.message == POST_RUN_FAILURE_MESSAGE


def test_after_hooks_skipped_when_apply_raises(call_log: CallLog) -> None:
    action = (
        StubAction("main", error="boom", log=call_log)
        .set_fatal()
        .add_after_action(StubAction("after", log=call_log))
    )

    with pytest.raises(ActionFailure):
        action.run()

    assert call_log.calls == ["main"]


def test_invalid_hook_raises_validation_failure(call_log: CallLog) -> None:
    action = StubAction("main", log=call_log).add_before_action(
        StubAction("before", invalid=True, log=call_log)
    )

    with pytest.raises(ValidationFailure):
        action.run()

    assert call_log.calls == []


def test_hook_is_copied_on_registration() -> None:
    hook = StubAction("before")
    action = StubAction("main").add_before_action(hook)

    hook.set_fatal()

    assert action.before_actions[0] is not hook
    assert action.before_actions[0].fatal is False


def test_non_action_hook_is_rejected() -> None:
    with pytest.raises(ConfigurationFailure, match="Action subclass instance expected"):
        StubAction().add_before_action("echo hello")  # type: ignore[arg-type]


# ============================================================================
# Copies and descriptions
# ============================================================================


def test_with_severity_leaves_original_untouched() -> None:
    original = StubAction("template")

    forced = original.with_severity(fatal=True, success_required=True)

    assert forced.severity == Severity.CRITICAL
    assert original.severity == Severity.NON_CRITICAL
    assert forced.execution_id == original.execution_id


def test_child_failure_from_nested_run_is_wrapped() -> None:
    """A failure raised by a nested action is wrapped with the parent as origin."""

    class Parent(StubAction):
        def apply(self, outcome):  # type: ignore[no-untyped-def]
            StubAction("child", error="child broke").set_fatal().run()
            return outcome.set_result(True)

    parent = Parent("parent")

    with pytest.raises(ActionFailure) as exc_info:
        parent.run()

    failure = exc_info.value
    assert failure.message == CHILD_FAILURE_MESSAGE
    assert failure.action is parent
    assert failure.children[0].message == "child broke"


def test_to_dict_describes_action() -> None:
    data = StubAction("main").set_fatal().to_dict()

    assert data["action_type"] == "StubAction"
    assert data["action_description"] == "Stub action 'main'."
    assert data["fatal"] is True
    assert data["success_required"] is False
    assert data["execution_id"].startswith("StubAction_")
