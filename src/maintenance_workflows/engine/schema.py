"""
YAML plan schema with Pydantic v2 models.

A plan is a named list of action specs, run in order by a PlanRunner.
Action specs nest: composites carry their children (statements, cases,
loop members, config-file edits and checks) and every spec may carry
before/after hooks.

Example YAML:
    name: prepare-release
    description: Prepare the release folder
    actions:
      - type: MakeDirectory
        params: {path: build/release}
      - type: IfStatement
        statements:
          - condition: {type: FileExists, params: {path: setup.cfg}}
            then:
              type: ChangeConfigFileEntries
              params: {path: setup.cfg}
              actions:
                - type: ModifyArray
                  params: {key: metadata.version, action: modify_change_value, value: "2.0"}
        default: {type: EmptyTransform}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .load_result import LoadResult

# Plain values accepted as switch case values
CaseValue = str | int | float | bool | list[Any] | dict[str, Any] | None
# Switch expressions: mappings are read as action specs
ExpressionValue = str | int | float | bool | list[Any] | None


class StatementSpec(BaseModel):
    """One IfStatement branch: run `then` when `condition` is positive."""

    model_config = {"extra": "forbid"}

    condition: ActionSpec
    then: ActionSpec


class CaseSpec(BaseModel):
    """One SwitchStatement case: run `action` when the expression equals `value`."""

    model_config = {"extra": "forbid"}

    value: CaseValue = None
    action: ActionSpec


class ActionSpec(BaseModel):
    """
    Declarative form of one action.

    Attributes:
        type: Registered action type name (e.g., "MakeDirectory")
        params: Constructor keyword arguments
        fatal: Raise on operational failure instead of recording it
        success_required: Treat a negative result as a failure
        before: Hooks run before the action
        after: Hooks run after the action
        actions: ForEachLoop or FilesInDirectory members, ModifyFile line
            edits, ChangeConfigFileEntries edits or ConfigFileHasValidEntries checks
        statements: IfStatement branches
        expression: SwitchStatement expression (plain value or action spec)
        cases: SwitchStatement cases
        default: IfStatement/SwitchStatement default action
    """

    model_config = {"extra": "forbid"}

    type: str = Field(min_length=1, description="Registered action type name")
    params: dict[str, Any] = Field(default_factory=dict)
    fatal: bool = False
    success_required: bool = False
    before: list[ActionSpec] = Field(default_factory=list)
    after: list[ActionSpec] = Field(default_factory=list)

    actions: list[ActionSpec] = Field(default_factory=list)
    statements: list[StatementSpec] = Field(default_factory=list)
    expression: ActionSpec | ExpressionValue = None
    cases: list[CaseSpec] = Field(default_factory=list)
    default: ActionSpec | None = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Action type must not be blank")
        return v.strip()


class PlanSchema(BaseModel):
    """
    Complete YAML plan.

    Attributes:
        name: Plan identifier
        description: Human-readable purpose
        actions: Top-level actions, run in order
    """

    model_config = {"extra": "forbid"}

    name: str = Field(
        description="Plan identifier",
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        min_length=1,
        max_length=100,
    )
    description: str = Field(default="", description="Plan description")
    actions: list[ActionSpec] = Field(default_factory=list)

    @staticmethod
    def validate_yaml_dict(data: dict[str, Any]) -> LoadResult[PlanSchema]:
        """
        Validate a YAML dictionary against the plan schema.

        Returns:
            LoadResult.success(PlanSchema) if valid
            LoadResult.failure(error_message) with the validation errors
        """
        try:
            return LoadResult.success(PlanSchema.model_validate(data))
        except ValidationError as e:
            return LoadResult.failure(f"Plan validation failed:\n{e}")


StatementSpec.model_rebuild()
CaseSpec.model_rebuild()
ActionSpec.model_rebuild()

__all__ = ["ActionSpec", "CaseSpec", "CaseValue", "ExpressionValue", "PlanSchema", "StatementSpec"]
