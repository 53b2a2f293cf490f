"""Tests for IfStatement, SwitchStatement and ForEachLoop."""

from pathlib import Path

import pytest
from action_helpers import CallLog, StubAction

from maintenance_workflows.engine.action import CHILD_FAILURE_MESSAGE
from maintenance_workflows.engine.actions_file import RemoveFile
from maintenance_workflows.engine.conditionals import (
    ForEachLoop,
    IfStatement,
    SwitchStatement,
    identical,
)
from maintenance_workflows.engine.exceptions import (
    ActionFailure,
    ConfigurationFailure,
    ValidationFailure,
)

# ============================================================================
# IfStatement
# ============================================================================


def test_if_runs_every_matching_branch(call_log: CallLog) -> None:
    """Conditions are independent: each positive one fires its action."""
    statement = (
        IfStatement()
        .add_statement(StubAction("cond1", log=call_log), StubAction("run1", log=call_log))
        .add_statement(
            StubAction("cond2", log=call_log),
            StubAction("run2", result=False, log=call_log),
        )
    )

    outcome = statement.run()

    assert call_log.calls == ["cond1", "run1", "cond2", "run2"]
    assert outcome.result is False
    assert len(outcome.nested) == 4


def test_if_skips_negative_condition(call_log: CallLog) -> None:
    statement = IfStatement().add_statement(
        StubAction("cond", result=False, log=call_log), StubAction("run", log=call_log)
    )

    outcome = statement.run()

    assert call_log.calls == ["cond"]
    assert outcome.result is None
    assert outcome.is_successful_run()


def test_if_default_runs_when_nothing_matched(call_log: CallLog) -> None:
    statement = IfStatement(
        statements=[(StubAction("cond", result=False, log=call_log), StubAction("run"))],
        default_action=StubAction("default", log=call_log),
    )

    outcome = statement.run()

    assert call_log.calls == ["cond", "default"]
    assert outcome.result is True


def test_if_default_skipped_after_match(call_log: CallLog) -> None:
    statement = (
        IfStatement()
        .add_statement(StubAction("cond", log=call_log), StubAction("run", log=call_log))
        .add_default_statement(StubAction("default", log=call_log))
    )

    statement.run()

    assert call_log.calls == ["cond", "run"]


def test_if_error_in_condition_aborts_chain(call_log: CallLog) -> None:
    """Even a non-critical IfStatement raises: branch members are fatal."""
    statement = (
        IfStatement()
        .add_statement(StubAction("cond1", error="cannot evaluate", log=call_log), StubAction("a"))
        .add_statement(StubAction("cond2", log=call_log), StubAction("b"))
    )

    with pytest.raises(ActionFailure) as exc_info:
        statement.run()

    assert exc_info.value.message == CHILD_FAILURE_MESSAGE
    assert exc_info.value.children[0].message == "cannot evaluate"
    assert call_log.calls == ["cond1"]


def test_if_registration_copies_members() -> None:
    condition = StubAction("cond").set_success_required()
    action = StubAction("run")

    statement = IfStatement().add_statement(condition, action)

    stored_condition, stored_action = statement.statements[0]
    assert (stored_condition.fatal, stored_condition.success_required) == (True, False)
    assert stored_action.fatal is True
    assert (condition.fatal, condition.success_required) == (False, True)
    assert action.fatal is False


def test_if_rejects_malformed_statements() -> None:
    with pytest.raises(ConfigurationFailure, match="not well formed"):
        IfStatement().add_statements([(StubAction("only-condition"),)])


def test_if_validates_nested_actions() -> None:
    statement = IfStatement().add_statement(StubAction("cond", invalid=True), StubAction("run"))

    with pytest.raises(ValidationFailure, match="registered conditions are not valid"):
        statement.run()


def test_empty_if_is_valid() -> None:
    outcome = IfStatement().run()

    assert outcome.result is None


def test_if_description() -> None:
    statement = (
        IfStatement()
        .add_statement(StubAction("cond"), StubAction("run"))
        .add_default_statement(StubAction("default"))
    )

    assert statement.stringify() == (
        "Run the following chain of if-else statements: \n"
        "IF [Stub action 'cond'.] THEN [Stub action 'run'.]; \n"
        "DEFAULT CONDITION [Stub action 'default'.]"
    )


# ============================================================================
# SwitchStatement
# ============================================================================


def test_switch_runs_every_matching_case(call_log: CallLog) -> None:
    switch = SwitchStatement(
        1,
        cases=[
            (1, StubAction("A", result="a", log=call_log)),
            (2, StubAction("B", log=call_log)),
            (1, StubAction("C", result="c", log=call_log)),
        ],
    )

    outcome = switch.run()

    assert call_log.calls == ["A", "C"]
    assert outcome.result == "c"


def test_switch_default_only_when_no_match(call_log: CallLog) -> None:
    switch = (
        SwitchStatement(3)
        .add_case(1, StubAction("A", log=call_log))
        .add_case(2, StubAction("B", log=call_log))
        .add_default_case(StubAction("D", result="default", log=call_log))
    )

    outcome = switch.run()

    assert call_log.calls == ["D"]
    assert outcome.result == "default"


def test_switch_uses_identical_comparison(call_log: CallLog) -> None:
    switch = (
        SwitchStatement(1)
        .add_case(True, StubAction("bool", log=call_log))
        .add_case(1.0, StubAction("float", log=call_log))
        .add_case("1", StubAction("str", log=call_log))
        .add_case(1, StubAction("int", log=call_log))
    )

    switch.run()

    assert call_log.calls == ["int"]
    assert identical([1, 2], [1, 2])
    assert not identical(0, False)


def test_switch_expression_action(call_log: CallLog) -> None:
    expression = StubAction("env", result="prod", log=call_log)
    switch = (
        SwitchStatement(expression)
        .add_case("dev", StubAction("dev-setup", log=call_log))
        .add_case("prod", StubAction("prod-setup", log=call_log))
    )

    outcome = switch.run()

    assert call_log.calls == ["env", "prod-setup"]
    assert len(outcome.nested) == 2


def test_switch_negative_case_result_is_accepted() -> None:
    switch = SwitchStatement("x").add_case("x", StubAction("case", result=False))

    outcome = switch.run()

    assert outcome.result is False
    assert outcome.is_successful_run()


def test_switch_case_error_aborts() -> None:
    switch = SwitchStatement("x").add_case("x", StubAction("case", error="case broke"))

    with pytest.raises(ActionFailure, match="failed child action"):
        switch.run()


def test_switch_rejects_object_case_value() -> None:
    with pytest.raises(ConfigurationFailure, match="object as an expression value"):
        SwitchStatement("x").add_case(object(), StubAction())


@pytest.mark.parametrize("expression", [0, False, 0.0, []])
def test_switch_falsy_expression_is_valid(expression: object, call_log: CallLog) -> None:
    switch = (
        SwitchStatement(expression)
        .add_case(expression, StubAction("match", log=call_log))
        .add_default_case(StubAction("default", log=call_log))
    )

    assert switch.is_valid()
    switch.run()

    assert call_log.calls == ["match"]


@pytest.mark.parametrize(
    ("switch", "message"),
    [
        (SwitchStatement("x"), "No cases and no default action specified."),
        (SwitchStatement().add_case("x", StubAction()), "No expression specified."),
        (SwitchStatement("").add_default_case(StubAction()), "No expression specified."),
    ],
)
def test_switch_validation(switch: SwitchStatement, message: str) -> None:
    with pytest.raises(ValidationFailure, match=message):
        switch.is_valid()


def test_switch_invalid_case_action() -> None:
    switch = SwitchStatement("x").add_case("x", StubAction(invalid=True))

    with pytest.raises(ValidationFailure, match="case blocks are not valid") as exc_info:
        switch.is_valid()

    assert len(exc_info.value.children) == 1


# ============================================================================
# ForEachLoop
# ============================================================================


def test_foreach_runs_members_in_order(call_log: CallLog) -> None:
    loop = ForEachLoop(
        [
            StubAction("first", log=call_log),
            StubAction("second", result=False, log=call_log),
            StubAction("third", log=call_log),
        ]
    )

    outcome = loop.run()

    assert call_log.calls == ["first", "second", "third"]
    assert outcome.result is True
    assert [nested.result for nested in outcome.nested] == [True, False, True]


def test_foreach_keeps_duplicate_members(call_log: CallLog) -> None:
    action = StubAction("repeat", log=call_log)

    ForEachLoop().add_action(action).add_action(action).run()

    assert call_log.calls == ["repeat", "repeat"]


def test_foreach_member_error_aborts_loop(call_log: CallLog) -> None:
    loop = ForEachLoop(
        [
            StubAction("first", log=call_log),
            StubAction("second", error="second broke", log=call_log),
            StubAction("third", log=call_log),
        ]
    )

    with pytest.raises(ActionFailure) as exc_info:
        loop.run()

    assert call_log.calls == ["first", "second"]
    assert exc_info.value.action is loop
    assert exc_info.value.children[0].message == "second broke"


def test_foreach_remove_files_stops_at_missing_file(workspace: Path) -> None:
    first = workspace / "a.txt"
    missing = workspace / "b.txt"
    third = workspace / "c.txt"
    first.write_text("a")
    third.write_text("c")

    loop = ForEachLoop(
        [
            RemoveFile().remove(str(first)),
            RemoveFile().remove(str(missing)).set_fatal(),
            RemoveFile().remove(str(third)),
        ]
    )

    with pytest.raises(ActionFailure) as exc_info:
        loop.run()

    assert not first.exists()
    assert third.exists()
    assert exc_info.value.children[0].message == f"'{missing}' is not a valid file path."


def test_foreach_registration_copies_members() -> None:
    member = StubAction("member").set_success_required()

    loop = ForEachLoop([member])

    assert (loop.actions[0].fatal, loop.actions[0].success_required) == (True, False)
    assert (member.fatal, member.success_required) == (False, True)


def test_empty_foreach_is_valid() -> None:
    assert ForEachLoop().run().result is True
