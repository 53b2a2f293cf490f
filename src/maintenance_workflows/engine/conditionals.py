"""Control-flow composites: IfStatement, SwitchStatement, ForEachLoop.

Composites are ordinary actions whose apply() runs other actions. Children
are copied on registration and their severity flags forced on the copy, so
an error inside any branch aborts the composite through the regular
severity policy while a negative child result stays plain control flow.
The caller's original actions are never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, ClassVar

from .action import Action, describe_value
from .exceptions import ActionFailure, ConfigurationFailure, ValidationFailure
from .outcome import Outcome

logger = logging.getLogger(__name__)

# Non-object values accepted as switch expressions and case values
CASE_VALUE_TYPES: tuple[type, ...] = (str, int, float, bool, type(None), list, tuple, dict)


def identical(left: Any, right: Any) -> bool:
    """Strict equality: same type and equal value (1 is not 1.0, nor True)."""
    return type(left) is type(right) and left == right


# ============================================================================
# IfStatement
# ============================================================================


class IfStatement(Action):
    """Chain of (condition, action) statements with an optional default.

    Every condition whose result is positive fires its paired action; the
    last fired action decides the statement result. The default action runs
    only when no statement fired.

    Example:
        IfStatement().add_statement(
            FileExists("setup.cfg"), ChangeConfigFileEntries("setup.cfg").remove_key("a.b")
        ).add_default_statement(EmptyTransform())
    """

    type_name: ClassVar[str] = "IfStatement"

    def __init__(
        self,
        statements: Iterable[Any] | None = None,
        default_action: Action | None = None,
    ):
        super().__init__()
        self.statements: list[tuple[Action, Action]] = []
        self.default_action: Action | None = None
        if statements is not None:
            self.add_statements(statements)
        if default_action is not None:
            self.add_default_statement(default_action)

    def add_statement(self, condition: Action, action: Action) -> IfStatement:
        """Register a statement.

        The condition is copied as fatal and not success-required (a negative
        condition is control flow); the action is copied as fatal.
        """
        condition_copy = self._adopt(condition).with_severity(fatal=True, success_required=False)
        action_copy = self._adopt(action).with_severity(fatal=True)
        self.statements.append((condition_copy, action_copy))
        return self

    def add_statements(self, statements: Iterable[Any]) -> IfStatement:
        """Register a list of (condition, action) pairs."""
        for statement in statements:
            if not isinstance(statement, (list, tuple)) or len(statement) != 2:
                raise ConfigurationFailure("The given statements list is not well formed.")
            self.add_statement(statement[0], statement[1])
        return self

    def add_default_statement(self, action: Action) -> IfStatement:
        """Register the action run when no condition fires (copied as fatal)."""
        self.default_action = self._adopt(action).with_severity(fatal=True)
        return self

    def stringify(self) -> str:
        message = "Run the following chain of if-else statements: \n"
        for condition, action in self.statements:
            message += f"IF [{condition}] THEN [{action}]; \n"
        if self.default_action is not None:
            message += f"DEFAULT CONDITION [{self.default_action}]"
        return message

    def validate_instance(self) -> bool:
        nested: list[Action] = []
        for condition, action in self.statements:
            nested.extend((condition, action))
        if self.default_action is not None:
            nested.append(self.default_action)
        return self.validate_nested_actions(
            nested, "One or more of the registered conditions are not valid."
        )

    def apply(self, outcome: Outcome) -> Outcome:
        running: Action = self
        try:
            for condition, action in self.statements:
                running = condition
                condition_outcome = condition.run()
                outcome.add_nested_outcome(condition_outcome)
                if not condition.validate_result(condition_outcome):
                    continue
                running = action
                self._run_branch(action, outcome)

            if outcome.result is None and self.default_action is not None:
                running = self.default_action
                self._run_branch(self.default_action, outcome)
        except ActionFailure:
            raise
        except Exception as e:
            raise ActionFailure(running, str(e)) from e
        return outcome

    def _run_branch(self, action: Action, outcome: Outcome) -> None:
        branch_outcome = action.run()
        outcome.add_nested_outcome(branch_outcome)
        outcome.set_result(action.validate_result(branch_outcome))


# ============================================================================
# SwitchStatement
# ============================================================================


class SwitchStatement(Action):
    """Multi-way branch over a value or over an action's result.

    Every case whose value is identical to the expression runs, in
    registration order; the last one sets the result. The default action
    runs only when no case matched.

    Example:
        SwitchStatement("prod").add_case("dev", dev_setup).add_case("prod", prod_setup)
    """

    type_name: ClassVar[str] = "SwitchStatement"

    def __init__(
        self,
        expression: Any = None,
        cases: Iterable[Any] | None = None,
        default_action: Action | None = None,
    ):
        super().__init__()
        self.expression: Any = None
        self.cases: list[tuple[Any, Action]] = []
        self.default_action: Action | None = None
        if expression is not None:
            self.add_expression(expression)
        if cases is not None:
            self.add_cases(cases)
        if default_action is not None:
            self.add_default_case(default_action)

    def add_expression(self, expression: Any) -> SwitchStatement:
        """Set the expression: a plain value, or an action whose result is used."""
        if isinstance(expression, Action):
            self.expression = expression.with_severity(fatal=True, success_required=False)
        elif isinstance(expression, CASE_VALUE_TYPES):
            self.expression = expression
        else:
            raise ConfigurationFailure(
                f"Invalid expression detected. Found [{describe_value(expression)}]. "
                "Non-object value or Action subclass instance expected."
            )
        return self

    def add_case(self, value: Any, action: Action) -> SwitchStatement:
        """Register a case (action copied as fatal, not success-required)."""
        if not isinstance(value, CASE_VALUE_TYPES):
            raise ConfigurationFailure(
                "It is not possible to add a case statement with an object as an expression "
                f"value. Found [{describe_value(value)}]."
            )
        self.cases.append(
            (value, self._adopt(action).with_severity(fatal=True, success_required=False))
        )
        return self

    def add_cases(self, cases: Iterable[Any]) -> SwitchStatement:
        """Register a list of (value, action) pairs."""
        for case in cases:
            if not isinstance(case, (list, tuple)) or len(case) != 2:
                raise ConfigurationFailure("The given cases list is not well formed.")
            self.add_case(case[0], case[1])
        return self

    def add_default_case(self, action: Action) -> SwitchStatement:
        self.default_action = self._adopt(action).with_severity(
            fatal=True, success_required=False
        )
        return self

    def stringify(self) -> str:
        message = "Run the following sequence of switch case statements: \n"
        for value, action in self.cases:
            message += f"IF EXPRESSION VALUE IS [{value!r}] THEN [{action}]; \n"
        if self.default_action is not None:
            message += f"DEFAULT STATEMENT [{self.default_action}]; \n"
        return message

    def validate_instance(self) -> bool:
        if not self.cases and self.default_action is None:
            raise ValidationFailure(self, "No cases and no default action specified.")
        if self.expression is None or self.expression == "":
            raise ValidationFailure(self, "No expression specified.")

        breaches: list[ActionFailure] = []
        for value, action in self.cases:
            if not isinstance(value, CASE_VALUE_TYPES):
                breaches.append(
                    ValidationFailure(
                        self,
                        f"Invalid expression value detected. Found [{describe_value(value)}]. "
                        "Non-object variable expected.",
                    )
                )
        nested = [action for _, action in self.cases]
        if self.default_action is not None:
            nested.append(self.default_action)
        if isinstance(self.expression, Action):
            nested.append(self.expression)
        try:
            self.validate_nested_actions(nested)
        except ValidationFailure as failure:
            breaches.extend(failure.children)
        if breaches:
            raise ValidationFailure(
                self, "One or more of the registered case blocks are not valid.", breaches
            )
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        if isinstance(self.expression, Action):
            expression_outcome = self.expression.run()
            outcome.add_nested_outcome(expression_outcome)
            value = expression_outcome.result
        else:
            value = self.expression

        matched = False
        for case_value, action in self.cases:
            if not identical(value, case_value):
                continue
            matched = True
            case_outcome = action.run()
            outcome.add_nested_outcome(case_outcome)
            outcome.set_result(case_outcome.result)

        if not matched and self.default_action is not None:
            default_outcome = self.default_action.run()
            outcome.add_nested_outcome(default_outcome)
            outcome.set_result(default_outcome.result)
        return outcome


# ============================================================================
# ForEachLoop
# ============================================================================


class ForEachLoop(Action):
    """Run a sequence of actions in order.

    Members are copied as fatal and not success-required: any member error
    aborts the loop, a negative member result does not. The loop result is
    True once every member ran.
    """

    type_name: ClassVar[str] = "ForEachLoop"

    def __init__(self, actions: Iterable[Any] | None = None):
        super().__init__()
        self.actions: list[Action] = []
        if actions is not None:
            self.add_actions(actions)

    def add_action(self, action: Action) -> ForEachLoop:
        self.actions.append(self._adopt(action).with_severity(fatal=True, success_required=False))
        return self

    def add_actions(self, actions: Iterable[Any]) -> ForEachLoop:
        for action in actions:
            self.add_action(action)
        return self

    def stringify(self) -> str:
        message = "Run the following sequence of actions: \n"
        for action in self.actions:
            message += f"{action}\n"
        return message

    def validate_instance(self) -> bool:
        return self.validate_nested_actions(
            self.actions, "One or more of the registered actions are not valid."
        )

    def apply(self, outcome: Outcome) -> Outcome:
        for action in self.actions:
            outcome.add_nested_outcome(action.run())
        return outcome.set_result(True)


__all__ = ["IfStatement", "SwitchStatement", "ForEachLoop", "identical", "CASE_VALUE_TYPES"]
