"""Check actions - file/directory existence, string and array predicates,
and config-file entry checks.

Checks never raise for a negative answer: the answer is the result value
(True/False) and the runtime applies the severity policy to it. Only
unusable input (e.g. a key missing where a value is required) raises.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, ClassVar

from .action import Action
from .actions_file import require_file
from .config_files import ContentType, content_type_for, parse_file, supported_content_types
from .content_utils import (
    get_required_nested_value,
    is_empty_value,
    is_numeric,
    stringify_value,
)
from .exceptions import ActionFailure, MissingKeyFailure, ValidationFailure
from .outcome import Outcome
from .pipeline import run_nested_pipeline

logger = logging.getLogger(__name__)


# ============================================================================
# File system checks
# ============================================================================


class FileExists(Action):
    """Check that a path is an existing file."""

    type_name: ClassVar[str] = "FileExists"

    def __init__(self, path: str = ""):
        super().__init__()
        self.path = str(path)

    def set_path(self, path: str) -> FileExists:
        self.path = str(path)
        return self

    def stringify(self) -> str:
        return f"Check if file '{self.path}' exists."

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "You must specify the file path.")
        return True

    def check(self, path: Path) -> bool:
        return path.is_file()

    def apply(self, outcome: Outcome) -> Outcome:
        return outcome.set_result(self.check(Path(self.path)))


class FileDoesNotExist(FileExists):
    type_name: ClassVar[str] = "FileDoesNotExist"

    def stringify(self) -> str:
        return f"Check if file '{self.path}' does not exist."

    def check(self, path: Path) -> bool:
        return not path.is_file()


class DirectoryExists(FileExists):
    type_name: ClassVar[str] = "DirectoryExists"

    def stringify(self) -> str:
        return f"Check if directory '{self.path}' exists."

    def check(self, path: Path) -> bool:
        return path.is_dir()


class DirectoryDoesNotExist(FileExists):
    type_name: ClassVar[str] = "DirectoryDoesNotExist"

    def stringify(self) -> str:
        return f"Check if directory '{self.path}' does not exist."

    def check(self, path: Path) -> bool:
        return not path.is_dir()


# ============================================================================
# VerifyString
# ============================================================================


class VerifyString(Action):
    """Compare a string content against a condition value."""

    type_name: ClassVar[str] = "VerifyString"

    CONDITION_EQUAL_TO: ClassVar[str] = "equal_to"
    CONDITION_LESS_THAN: ClassVar[str] = "less_than"
    CONDITION_LESS_EQUAL_THAN: ClassVar[str] = "less_equal_than"
    CONDITION_GREATER_THAN: ClassVar[str] = "greater_than"
    CONDITION_GREATER_EQUAL_THAN: ClassVar[str] = "greater_equal_than"
    CONDITION_DIFFERENT_THAN: ClassVar[str] = "different_than"
    CONDITION_CONTAINS: ClassVar[str] = "contains"
    CONDITION_STARTS_WITH: ClassVar[str] = "starts_with"
    CONDITION_ENDS_WITH: ClassVar[str] = "ends_with"
    CONDITION_IS_EMPTY: ClassVar[str] = "is_empty"
    CONDITION_REGEX: ClassVar[str] = "regex"

    # condition -> description fragment
    DESCRIPTIONS: ClassVar[dict[str, str]] = {
        "equal_to": "is equal to the specified check value '{value}'",
        "less_than": "is less than the specified check value '{value}'",
        "less_equal_than": "is less than or equal to the specified check value '{value}'",
        "greater_than": "is greater than the specified check value '{value}'",
        "greater_equal_than": "is greater than or equal to the specified check value '{value}'",
        "different_than": "is different than the specified check value '{value}'",
        "contains": "contains the specified check value '{value}'",
        "starts_with": "starts with the specified check value '{value}'",
        "ends_with": "ends with the specified check value '{value}'",
    }

    def __init__(
        self,
        condition: str = "",
        condition_value: str = "",
        content: str = "",
        case_sensitive: bool = False,
    ):
        super().__init__()
        self.condition = condition
        self.condition_value = condition_value
        self.content = content
        self.case_sensitive = case_sensitive

    @classmethod
    def supported_conditions(cls) -> list[str]:
        return [value for name, value in vars(cls).items() if name.startswith("CONDITION_")]

    def _with(self, condition: str, value: str = "") -> VerifyString:
        self.condition, self.condition_value = condition, value
        return self

    def starts_with(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_STARTS_WITH, value)

    def ends_with(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_ENDS_WITH, value)

    def contains(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_CONTAINS, value)

    def is_equal_to(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_EQUAL_TO, value)

    def is_less_than(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_LESS_THAN, value)

    def is_less_than_equal_to(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_LESS_EQUAL_THAN, value)

    def is_greater_than(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_GREATER_THAN, value)

    def is_greater_than_equal_to(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_GREATER_EQUAL_THAN, value)

    def is_different_than(self, value: str) -> VerifyString:
        return self._with(self.CONDITION_DIFFERENT_THAN, value)

    def matches_regex(self, pattern: str) -> VerifyString:
        return self._with(self.CONDITION_REGEX, pattern)

    def is_empty(self) -> VerifyString:
        return self._with(self.CONDITION_IS_EMPTY)

    def set_case_sensitive(self, case_sensitive: bool = True) -> VerifyString:
        self.case_sensitive = case_sensitive
        return self

    def check_content(self, content: str) -> VerifyString:
        self.content = content
        return self

    def stringify(self) -> str:
        prefix = f"Check if the given content '{self.content}'"
        if self.condition == self.CONDITION_IS_EMPTY:
            return f"{prefix} is empty."
        if self.condition == self.CONDITION_REGEX:
            return f'{prefix} respects the given regex "{self.condition_value}".'
        fragment = self.DESCRIPTIONS.get(self.condition)
        if fragment is None:
            return "Unsupported condition."
        sensitivity = "case sensitive" if self.case_sensitive else "case insensitive"
        return f"{prefix} {fragment.format(value=self.condition_value)} ({sensitivity})."

    def validate_instance(self) -> bool:
        supported = self.supported_conditions()
        if self.condition not in supported:
            raise ValidationFailure(
                self,
                f"Condition {self.condition} not supported. "
                f"Supported conditions are [{', '.join(supported)}]",
            )
        if self.condition != self.CONDITION_IS_EMPTY and not self.condition_value:
            raise ValidationFailure(
                self,
                f"Condition {self.condition} requires a condition value. "
                f"Empty value accepted only for condition {self.CONDITION_IS_EMPTY}.",
            )
        if self.condition == self.CONDITION_REGEX:
            re.compile(self.condition_value)
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        content, value = self.content, self.condition_value
        if self.condition == self.CONDITION_IS_EMPTY:
            return outcome.set_result(not content)
        if self.condition == self.CONDITION_REGEX:
            return outcome.set_result(re.search(value, content) is not None)
        if not self.case_sensitive:
            content, value = content.lower(), value.lower()

        if self.condition == self.CONDITION_EQUAL_TO:
            result = content == value
        elif self.condition == self.CONDITION_LESS_THAN:
            result = content < value
        elif self.condition == self.CONDITION_LESS_EQUAL_THAN:
            result = content <= value
        elif self.condition == self.CONDITION_GREATER_THAN:
            result = content > value
        elif self.condition == self.CONDITION_GREATER_EQUAL_THAN:
            result = content >= value
        elif self.condition == self.CONDITION_DIFFERENT_THAN:
            result = content != value
        elif self.condition == self.CONDITION_CONTAINS:
            result = value in content
        elif self.condition == self.CONDITION_STARTS_WITH:
            result = content.startswith(value)
        elif self.condition == self.CONDITION_ENDS_WITH:
            result = content.endswith(value)
        else:
            raise ActionFailure(self, f"Condition type {self.condition} not supported.")
        return outcome.set_result(result)


# ============================================================================
# VerifyArray
# ============================================================================


class VerifyArray(Action):
    """Check a value addressed by a dotted key in nested content."""

    type_name: ClassVar[str] = "VerifyArray"

    CHECK_STARTS_WITH: ClassVar[str] = "check_starts_with"
    CHECK_ENDS_WITH: ClassVar[str] = "check_ends_with"
    CHECK_CONTAINS: ClassVar[str] = "check_contains"
    CHECK_EQUALS: ClassVar[str] = "check_equals"
    CHECK_EMPTY: ClassVar[str] = "check_empty"
    CHECK_ANY: ClassVar[str] = "check_any"
    CHECK_MISSING_KEY: ClassVar[str] = "check_missing_key"

    ACCEPTS_EMPTY_VALUE: ClassVar[tuple[str, ...]] = (
        CHECK_ANY,
        CHECK_EQUALS,
        CHECK_EMPTY,
        CHECK_MISSING_KEY,
    )

    def __init__(
        self,
        key: str = "",
        check: str = "",
        value: Any = None,
        reverse: bool = False,
    ):
        super().__init__()
        self.key = key
        self.check = check
        self.value = value
        self.reverse_check = reverse
        self.content: dict[str, Any] = {}

    @classmethod
    def supported_checks(cls) -> list[str]:
        return [value for name, value in vars(cls).items() if name.startswith("CHECK_")]

    def _with(self, check: str, key: str, value: Any = None) -> VerifyArray:
        self.check, self.key, self.value = check, key, value
        return self

    def starts_with(self, key: str, value: str) -> VerifyArray:
        return self._with(self.CHECK_STARTS_WITH, key, value)

    def ends_with(self, key: str, value: str) -> VerifyArray:
        return self._with(self.CHECK_ENDS_WITH, key, value)

    def contains(self, key: str, value: Any) -> VerifyArray:
        return self._with(self.CHECK_CONTAINS, key, value)

    def is_equal_to(self, key: str, value: Any) -> VerifyArray:
        return self._with(self.CHECK_EQUALS, key, value)

    def is_empty(self, key: str) -> VerifyArray:
        return self._with(self.CHECK_EMPTY, key)

    def has_key(self, key: str) -> VerifyArray:
        return self._with(self.CHECK_ANY, key)

    def is_key_missing(self, key: str) -> VerifyArray:
        return self._with(self.CHECK_MISSING_KEY, key)

    def reverse(self) -> VerifyArray:
        """Toggle the reverse (negated) mode."""
        self.reverse_check = not self.reverse_check
        return self

    def check_content(self, content: dict[str, Any]) -> VerifyArray:
        self.content = content
        return self

    def set_content(self, content: dict[str, Any]) -> VerifyArray:
        return self.check_content(content)

    def _verb(self) -> str:
        verbs = {
            self.CHECK_CONTAINS: ("contains", "does not contain"),
            self.CHECK_ENDS_WITH: ("ends", "does not end"),
            self.CHECK_STARTS_WITH: ("starts", "does not start"),
            self.CHECK_EQUALS: ("is", "is not"),
            self.CHECK_EMPTY: ("is", "is not"),
            self.CHECK_MISSING_KEY: ("is not", "is"),
        }
        plain, reversed_ = verbs.get(self.check, ("not", "not"))
        return reversed_ if self.reverse_check else plain

    def stringify(self) -> str:
        base = f"Check if key '{self.key}' is set"
        value = stringify_value(self.value)
        if self.check == self.CHECK_ANY:
            return f"{base} and has any value"
        if self.check == self.CHECK_CONTAINS:
            return f"{base} and {self._verb()} value '{value}'"
        if self.check in (self.CHECK_STARTS_WITH, self.CHECK_ENDS_WITH):
            return f"{base} and {self._verb()} with value '{value}'"
        if self.check == self.CHECK_EQUALS:
            return f"{base} and {self._verb()} equal to value '{value}'"
        if self.check == self.CHECK_EMPTY:
            return f"{base} and {self._verb()} empty (empty string or null)"
        if self.check == self.CHECK_MISSING_KEY:
            return f"Check if key '{self.key}' {self._verb()} set"
        return base

    def validate_instance(self) -> bool:
        if not self.key:
            raise ValidationFailure(self, "You must specify the key to verify.")
        if not self.check:
            raise ValidationFailure(self, "You must specify the action type.")
        supported = self.supported_checks()
        if self.check not in supported:
            raise ValidationFailure(
                self,
                f"Action type {self.check} not supported. "
                f"Supported checks are [{', '.join(supported)}].",
            )
        if self.reverse_check and self.check == self.CHECK_ANY:
            raise ValidationFailure(
                self,
                f"Action type {self.check} not supported in the reverse mode. "
                f"Use {self.CHECK_EQUALS} instead.",
            )
        if is_empty_value(self.value) and self.check not in self.ACCEPTS_EMPTY_VALUE:
            raise ValidationFailure(
                self,
                f"Action type {self.check} not supported for empty values. "
                f"Supported actions for empty values are [{', '.join(self.ACCEPTS_EMPTY_VALUE)}]",
            )
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        try:
            found = get_required_nested_value(self.key, self.content)
        except MissingKeyFailure as e:
            if self.check != self.CHECK_MISSING_KEY:
                raise ActionFailure(self, e.message) from e
            return outcome.set_result(not self.reverse_check)

        if self.check == self.CHECK_ANY:
            return outcome.set_result(True)
        if self.check == self.CHECK_MISSING_KEY:
            return outcome.set_result(self.reverse_check)

        if self.check == self.CHECK_CONTAINS:
            matched = self._contains(found)
        elif self.check == self.CHECK_STARTS_WITH:
            matched = self._string_check(found, str.startswith)
        elif self.check == self.CHECK_ENDS_WITH:
            matched = self._string_check(found, str.endswith)
        elif self.check == self.CHECK_EQUALS:
            matched = self._equals(found)
        else:
            matched = is_empty_value(found)
        return outcome.set_result(not matched if self.reverse_check else matched)

    def _contains(self, found: Any) -> bool:
        if isinstance(found, str) and isinstance(self.value, str):
            return self.value in found
        if isinstance(found, (dict, list, tuple)):
            return self.value in found
        raise ActionFailure(
            self,
            f"Check {self.CHECK_CONTAINS} supports only strings and arrays for both "
            "the configured and expected values.",
        )

    def _string_check(self, found: Any, predicate: Any) -> bool:
        if isinstance(found, str) and isinstance(self.value, str):
            return bool(predicate(found, self.value))
        raise ActionFailure(
            self,
            f"Check {self.check} supports only strings for both the configured "
            "and expected values.",
        )

    def _equals(self, found: Any) -> bool:
        if is_numeric(found) and is_numeric(self.value):
            return float(found) == float(self.value)
        return type(found) is type(self.value) and found == self.value


# ============================================================================
# ConfigFileHasValidEntries
# ============================================================================


def validate_config_target(action: Action, path: str, content_type: str) -> None:
    """Shared validation for actions bound to a structured config file."""
    if not path:
        raise ValidationFailure(action, "You must specify the file path.")
    if not content_type:
        raise ValidationFailure(action, "You must specify the content type.")
    supported = supported_content_types()
    if content_type not in supported:
        raise ValidationFailure(
            action,
            f"Content type {content_type} not supported. "
            f"Supported types are [{', '.join(supported)}].",
        )


def guess_content_type(path: str, content_type: str = "") -> str:
    if content_type or not path:
        return str(content_type)
    guessed = content_type_for(path)
    return guessed.value if guessed else ""


class ConfigFileHasValidEntries(Action):
    """Run VerifyArray checks against the parsed content of a config file."""

    type_name: ClassVar[str] = "ConfigFileHasValidEntries"

    def __init__(self, path: str = "", content_type: str = ""):
        super().__init__()
        self.path = str(path)
        self.explicit_content_type = str(content_type)
        self.content_type = guess_content_type(self.path, content_type)
        self.checks: list[VerifyArray] = []

    def set_path(self, path: str) -> ConfigFileHasValidEntries:
        self.path = str(path)
        if not self.explicit_content_type:
            self.content_type = guess_content_type(self.path) or self.content_type
        return self

    def add_check(self, check: VerifyArray) -> ConfigFileHasValidEntries:
        self.checks.append(self._adopt(check).copy())  # type: ignore[arg-type]
        return self

    def has_key(self, key: str) -> ConfigFileHasValidEntries:
        self.checks.append(VerifyArray(key, VerifyArray.CHECK_ANY))
        return self

    def does_not_have_key(self, key: str) -> ConfigFileHasValidEntries:
        self.checks.append(VerifyArray(key, VerifyArray.CHECK_MISSING_KEY))
        return self

    def has_key_with_empty_value(self, key: str) -> ConfigFileHasValidEntries:
        self.checks.append(VerifyArray(key, VerifyArray.CHECK_EMPTY))
        return self

    def has_key_with_non_empty_value(self, key: str) -> ConfigFileHasValidEntries:
        self.checks.append(VerifyArray(key, VerifyArray.CHECK_EMPTY, reverse=True))
        return self

    def has_key_with_value(
        self, key: str, value: Any, check: str = VerifyArray.CHECK_CONTAINS
    ) -> ConfigFileHasValidEntries:
        self.checks.append(VerifyArray(key, check, value))
        return self

    def stringify(self) -> str:
        message = f"Run the following checks in file '{self.path}':"
        for index, check in enumerate(self.checks):
            message += f" {index}. {check}"
        return message

    def validate_instance(self) -> bool:
        validate_config_target(self, self.path, self.content_type)
        return self.validate_nested_actions(self.checks, expected_type=VerifyArray)

    def apply(self, outcome: Outcome) -> Outcome:
        require_file(self, self.path)
        parsed = parse_file(self.path, ContentType(self.content_type))
        if not parsed.is_success:
            raise ActionFailure(self, parsed.error or f"Cannot parse '{self.path}'.")
        run_nested_pipeline(self, outcome, self.checks, parsed.unwrap(), thread_content=False)
        return outcome


__all__ = [
    "FileExists",
    "FileDoesNotExist",
    "DirectoryExists",
    "DirectoryDoesNotExist",
    "VerifyString",
    "VerifyArray",
    "ConfigFileHasValidEntries",
    "validate_config_target",
    "guess_content_type",
]
