"""Transform actions - ModifyArray, EmptyTransform, ChangeConfigFileEntries,
LineEdit and ModifyFile.

ModifyArray edits nested dict content addressed by dotted keys. Its result is
the modified content, or False when no modification was applied.
ChangeConfigFileEntries threads a file's content through a list of
ModifyArray edits and writes the file back only when every edit succeeded.
ModifyFile does the same for plain text, one line at a time, through a list
of LineEdit actions.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, ClassVar

from .action import Action
from .actions_check import VerifyString, guess_content_type, validate_config_target
from .actions_file import require_file
from .config_files import ContentType, parse_file, write_file
from .content_utils import KEY_SEPARATOR, stringify_value
from .exceptions import ActionFailure, ValidationFailure
from .outcome import Outcome
from .pipeline import run_nested_pipeline

logger = logging.getLogger(__name__)


# ============================================================================
# ModifyArray
# ============================================================================


class ModifyArray(Action):
    """Add, remove or rename a key, or change a value, in nested content.

    Missing intermediate levels are created for add/change operations.
    Removing below a missing level is not a modification.
    """

    type_name: ClassVar[str] = "ModifyArray"

    MODIFY_ADD_KEY: ClassVar[str] = "modify_add_key"
    MODIFY_REMOVE_KEY: ClassVar[str] = "modify_remove_key"
    MODIFY_CHANGE_KEY: ClassVar[str] = "modify_change_key"
    MODIFY_CHANGE_VALUE: ClassVar[str] = "modify_change_value"

    CREATES_MISSING_LEVELS: ClassVar[tuple[str, ...]] = (
        MODIFY_ADD_KEY,
        MODIFY_CHANGE_VALUE,
        MODIFY_CHANGE_KEY,
    )

    def __init__(self, key: str = "", action: str = "", value: Any = None):
        super().__init__()
        self.key = key
        self.action = action
        self.value = value
        self.content: dict[str, Any] = {}
        self._modified = False

    @classmethod
    def supported_actions(cls) -> list[str]:
        return [value for name, value in vars(cls).items() if name.startswith("MODIFY_")]

    def add_key(self, key: str, value: Any) -> ModifyArray:
        self.key, self.action, self.value = key, self.MODIFY_ADD_KEY, value
        return self

    def change_value_by_key(self, key: str, value: Any) -> ModifyArray:
        self.key, self.action, self.value = key, self.MODIFY_CHANGE_VALUE, value
        return self

    def change_key(self, old_key: str, last_level_new_key: str) -> ModifyArray:
        """Rename the last level of old_key (e.g. "a.b" -> "a.c" with "c")."""
        self.key, self.action, self.value = old_key, self.MODIFY_CHANGE_KEY, last_level_new_key
        return self

    def remove_key(self, key: str) -> ModifyArray:
        self.key, self.action, self.value = key, self.MODIFY_REMOVE_KEY, None
        return self

    def modify_content(self, content: dict[str, Any]) -> ModifyArray:
        self.content = copy.deepcopy(content)
        return self

    def set_content(self, content: dict[str, Any]) -> ModifyArray:
        return self.modify_content(content)

    def validate_result(self, outcome: Outcome) -> bool:
        return isinstance(outcome.result, dict)

    def stringify(self) -> str:
        value = stringify_value(self.value)
        if self.action == self.MODIFY_ADD_KEY:
            return f"Add value '{value}' with key '{self.key}'"
        if self.action == self.MODIFY_CHANGE_VALUE:
            return f"Modify value with key '{self.key}' and set it to '{value}'"
        if self.action == self.MODIFY_REMOVE_KEY:
            return f"Remove key '{self.key}'"
        if self.action == self.MODIFY_CHANGE_KEY:
            return f"Change key '{self.key}' and set it to '{value}'"
        return "Unsupported action"

    def validate_instance(self) -> bool:
        if not self.key:
            raise ValidationFailure(self, "No key specified.")
        supported = self.supported_actions()
        if self.action not in supported:
            raise ValidationFailure(
                self,
                f"Action {self.action} not supported. "
                f"Supported actions are [{', '.join(supported)}]",
            )
        if self.action == self.MODIFY_CHANGE_KEY and (self.value is None or self.value == ""):
            raise ValidationFailure(
                self,
                f"Action {self.action} requires a value. None or empty value was given.",
            )
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        self._modified = False
        self._apply_change(self.content, self.key)
        if not self._modified:
            logger.debug("No modification applied for: %s", self.stringify())
            return outcome.set_result(False)
        return outcome.set_result(self.content)

    def _apply_change(self, content: dict[str, Any], key: str) -> None:
        current_key, _, rest = key.partition(KEY_SEPARATOR)
        if not rest:
            self._apply_to_level(content, current_key)
            return
        nested = content.get(current_key)
        if isinstance(nested, dict):
            self._apply_change(nested, rest)
        elif self.action in self.CREATES_MISSING_LEVELS:
            content[current_key] = {}
            self._apply_change(content[current_key], rest)

    def _apply_to_level(self, content: dict[str, Any], key: str) -> None:
        if self.action in (self.MODIFY_ADD_KEY, self.MODIFY_CHANGE_VALUE):
            content[key] = self.value
        elif self.action == self.MODIFY_REMOVE_KEY:
            content.pop(key, None)
        else:
            if self.value in content:
                raise ActionFailure(
                    self,
                    "It is not possible to override an existing key, "
                    f"when using action [{self.action}].",
                )
            if key not in content:
                raise ActionFailure(self, f"The key '{self.key}' is not defined.")
            content[self.value] = content.pop(key)
        self._modified = True


# ============================================================================
# EmptyTransform
# ============================================================================


class EmptyTransform(Action):
    """No-op transform; always positive."""

    type_name: ClassVar[str] = "EmptyTransform"

    def stringify(self) -> str:
        return "Empty transform"

    def validate_instance(self) -> bool:
        return True

    def apply(self, outcome: Outcome) -> Outcome:
        return outcome.set_result(True)


# ============================================================================
# ChangeConfigFileEntries
# ============================================================================


class ChangeConfigFileEntries(Action):
    """Apply ModifyArray edits to a JSON, YAML or INI file.

    The content type is guessed from the file extension when not given.
    The file is rewritten only if every edit produced a positive result.
    """

    type_name: ClassVar[str] = "ChangeConfigFileEntries"

    def __init__(self, path: str = "", content_type: str = ""):
        super().__init__()
        self.path = str(path)
        self.explicit_content_type = str(content_type)
        self.content_type = guess_content_type(self.path, content_type)
        self.modifications: list[ModifyArray] = []

    def set_path(self, path: str) -> ChangeConfigFileEntries:
        """Point at another file, guessing its content type unless one was given."""
        self.path = str(path)
        if not self.explicit_content_type:
            self.content_type = guess_content_type(self.path) or self.content_type
        return self

    def add_modification(self, modification: ModifyArray) -> ChangeConfigFileEntries:
        self.modifications.append(self._adopt(modification).copy())  # type: ignore[arg-type]
        return self

    def add_key_with_value(self, key: str, value: Any) -> ChangeConfigFileEntries:
        self.modifications.append(ModifyArray().add_key(key, value))
        return self

    def change_value_by_key(self, key: str, value: Any) -> ChangeConfigFileEntries:
        self.modifications.append(ModifyArray().change_value_by_key(key, value))
        return self

    def change_key(self, old_key: str, last_level_new_key: str) -> ChangeConfigFileEntries:
        self.modifications.append(ModifyArray().change_key(old_key, last_level_new_key))
        return self

    def remove_key(self, key: str) -> ChangeConfigFileEntries:
        self.modifications.append(ModifyArray().remove_key(key))
        return self

    def stringify(self) -> str:
        message = f"Modify the file '{self.path}' with the following modifications."
        for index, modification in enumerate(self.modifications):
            message += f" {index}. {modification}"
        return message

    def validate_instance(self) -> bool:
        validate_config_target(self, self.path, self.content_type)
        return self.validate_nested_actions(self.modifications, expected_type=ModifyArray)

    def apply(self, outcome: Outcome) -> Outcome:
        kind = ContentType(self.content_type)
        require_file(self, self.path)
        parsed = parse_file(self.path, kind)
        if not parsed.is_success:
            logger.debug("Cannot parse %s: %s", self.path, parsed.error)
            raise ActionFailure(
                self, f"Impossible to convert the content of file '{self.path}' to an array."
            )

        content = run_nested_pipeline(self, outcome, self.modifications, parsed.unwrap())

        if self.validate_result(outcome):
            written = write_file(content, self.path, kind)
            if not written.is_success:
                raise ActionFailure(self, written.error or f"Cannot write '{self.path}'.")
            logger.info("Updated %s (%d modification(s))", self.path, len(self.modifications))
        return outcome


# ============================================================================
# LineEdit / ModifyFile
# ============================================================================


class LineEdit(Action):
    """Edit one line of text when it meets a VerifyString condition.

    The line is set through set_content() (it keeps its line ending). The
    result is the edited line, the unchanged line when the condition is not
    met, or None when the line is removed.
    """

    type_name: ClassVar[str] = "LineEdit"

    MODE_REPLACE_CONTENT: ClassVar[str] = "replace_content_in_line"
    MODE_REPLACE_LINE: ClassVar[str] = "replace_line"
    MODE_REMOVE_CONTENT: ClassVar[str] = "remove_content_in_line"
    MODE_REMOVE_LINE: ClassVar[str] = "remove_line"
    MODE_APPEND_CONTENT: ClassVar[str] = "append_content_to_line"
    MODE_APPEND_TEMPLATE: ClassVar[str] = "append_template"
    MODE_REPLACE_WITH_TEMPLATE: ClassVar[str] = "replace_with_template"

    SEARCH_MODES: ClassVar[tuple[str, ...]] = (MODE_REPLACE_CONTENT, MODE_REMOVE_CONTENT)
    TEMPLATE_MODES: ClassVar[tuple[str, ...]] = (MODE_APPEND_TEMPLATE, MODE_REPLACE_WITH_TEMPLATE)

    def __init__(
        self,
        mode: str = "",
        condition: str = "",
        condition_value: str = "",
        value: str = "",
        search: str = "",
        case_sensitive: bool = False,
    ):
        super().__init__()
        self.mode = mode
        self.condition = VerifyString(condition, condition_value, "", case_sensitive)
        self.value = value
        self.search = search
        self.case_sensitive = case_sensitive
        self.line: str | None = None

    @classmethod
    def supported_modes(cls) -> list[str]:
        return [value for name, value in vars(cls).items() if name.startswith("MODE_")]

    def set_content(self, line: str | None) -> LineEdit:
        self.line = line
        return self

    def validate_result(self, outcome: Outcome) -> bool:
        return outcome.result is None or isinstance(outcome.result, str)

    def stringify(self) -> str:
        condition = self.condition.stringify()
        if self.mode == self.MODE_APPEND_CONTENT:
            return (
                f"Append content '{self.value}' to each line that meets the following "
                f"condition: '{condition}'"
            )
        if self.mode == self.MODE_REMOVE_CONTENT:
            return (
                f"Remove content '{self.search}' in each line that meets the following "
                f"condition: '{condition}'"
            )
        if self.mode == self.MODE_REMOVE_LINE:
            return f"Remove each line that meets the following condition: '{condition}'"
        if self.mode == self.MODE_REPLACE_CONTENT:
            return (
                f"Replace content '{self.search}' with '{self.value}' in each line that "
                f"meets the following condition: '{condition}'"
            )
        if self.mode == self.MODE_REPLACE_LINE:
            return (
                "Replace each line that meets the following condition with "
                f"'{self.value}': '{condition}'"
            )
        if self.mode == self.MODE_APPEND_TEMPLATE:
            return (
                f"Append template '{self.value}' to each line that meets the following "
                f"condition: '{condition}'"
            )
        if self.mode == self.MODE_REPLACE_WITH_TEMPLATE:
            return (
                "Replace each line that meets the following condition, with template "
                f"'{self.value}': '{condition}'"
            )
        return "Unsupported action"

    def validate_instance(self) -> bool:
        supported = self.supported_modes()
        if self.mode not in supported:
            raise ValidationFailure(
                self,
                f"Action {self.mode} not supported. "
                f"Supported actions are [{', '.join(supported)}].",
            )
        if self.mode in self.SEARCH_MODES and not self.search:
            raise ValidationFailure(
                self, f"Action {self.mode} requires the content to search in each line."
            )
        if self.mode in self.TEMPLATE_MODES and not self.value:
            raise ValidationFailure(self, f"Action {self.mode} requires a template file path.")
        return self.validate_nested_actions([self.condition])

    def apply(self, outcome: Outcome) -> Outcome:
        if self.line is None:
            return outcome.set_result(None)

        text = self.line.rstrip("\r\n")
        ending = self.line[len(text) :]
        check = self.condition.check_content(text).run()
        outcome.add_nested_outcome(check)
        if not check.result:
            return outcome.set_result(self.line)
        return outcome.set_result(self._edit(self.line, text, ending))

    def _edit(self, line: str, text: str, ending: str) -> str | None:
        if self.mode == self.MODE_APPEND_CONTENT:
            return text + self.value + ending
        if self.mode == self.MODE_REMOVE_CONTENT:
            return self._replace(line, "")
        if self.mode == self.MODE_REMOVE_LINE:
            return None
        if self.mode == self.MODE_REPLACE_CONTENT:
            return self._replace(line, self.value)
        if self.mode == self.MODE_REPLACE_LINE:
            return self.value + ending
        template = require_file(self, self.value).read_text(encoding="utf-8")
        if self.mode == self.MODE_APPEND_TEMPLATE:
            return line + template
        return template

    def _replace(self, line: str, replacement: str) -> str:
        if self.case_sensitive:
            return line.replace(self.search, replacement)
        return re.sub(re.escape(self.search), lambda _: replacement, line, flags=re.IGNORECASE)


class ModifyFile(Action):
    """Apply LineEdit actions to every line of a text file.

    Each line runs through the edits in order, each edit receiving the line
    as left by the previous one. The file is rewritten only if no edit
    failed on any line. The result is the list of written lines.
    """

    type_name: ClassVar[str] = "ModifyFile"

    def __init__(self, path: str = ""):
        super().__init__()
        self.path = str(path)
        self.edits: list[LineEdit] = []

    def set_path(self, path: str) -> ModifyFile:
        self.path = str(path)
        return self

    def add_edit(self, edit: LineEdit) -> ModifyFile:
        self.edits.append(self._adopt(edit).copy())  # type: ignore[arg-type]
        return self

    def add_line_edit(
        self,
        mode: str,
        condition: str,
        condition_value: str = "",
        value: str = "",
        search: str = "",
        case_sensitive: bool = False,
    ) -> ModifyFile:
        self.edits.append(
            LineEdit(mode, condition, condition_value, value, search, case_sensitive)
        )
        return self

    def replace_value_if_line_starts_with(
        self, condition_value: str, search: str, replace: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REPLACE_CONTENT,
            VerifyString.CONDITION_STARTS_WITH,
            condition_value,
            replace,
            search,
            case_sensitive,
        )

    def replace_value_if_line_contains(
        self, condition_value: str, search: str, replace: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REPLACE_CONTENT,
            VerifyString.CONDITION_CONTAINS,
            condition_value,
            replace,
            search,
            case_sensitive,
        )

    def replace_line_if_line_starts_with(
        self, condition_value: str, replace: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REPLACE_LINE,
            VerifyString.CONDITION_STARTS_WITH,
            condition_value,
            replace,
            case_sensitive=case_sensitive,
        )

    def remove_value_if_line_starts_with(
        self, condition_value: str, search: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REMOVE_CONTENT,
            VerifyString.CONDITION_STARTS_WITH,
            condition_value,
            search=search,
            case_sensitive=case_sensitive,
        )

    def remove_line_if_line_starts_with(
        self, condition_value: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REMOVE_LINE,
            VerifyString.CONDITION_STARTS_WITH,
            condition_value,
            case_sensitive=case_sensitive,
        )

    def remove_line_if_line_contains(
        self, condition_value: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REMOVE_LINE,
            VerifyString.CONDITION_CONTAINS,
            condition_value,
            case_sensitive=case_sensitive,
        )

    def append_value_if_line_ends_with(
        self, condition_value: str, value: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_APPEND_CONTENT,
            VerifyString.CONDITION_ENDS_WITH,
            condition_value,
            value,
            case_sensitive=case_sensitive,
        )

    def replace_with_template_if_line_equal_to(
        self, template_path: str, condition_value: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REPLACE_WITH_TEMPLATE,
            VerifyString.CONDITION_EQUAL_TO,
            condition_value,
            template_path,
            case_sensitive=case_sensitive,
        )

    def replace_with_template_if_line_contains(
        self, template_path: str, condition_value: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_REPLACE_WITH_TEMPLATE,
            VerifyString.CONDITION_CONTAINS,
            condition_value,
            template_path,
            case_sensitive=case_sensitive,
        )

    def add_template_if_line_equal_to(
        self, template_path: str, condition_value: str, case_sensitive: bool = False
    ) -> ModifyFile:
        return self.add_line_edit(
            LineEdit.MODE_APPEND_TEMPLATE,
            VerifyString.CONDITION_EQUAL_TO,
            condition_value,
            template_path,
            case_sensitive=case_sensitive,
        )

    def stringify(self) -> str:
        message = f"Apply the following transformations to the specified file '{self.path}': \n"
        if not self.edits:
            return message + "No transformations configured.\n"
        for index, edit in enumerate(self.edits, start=1):
            message += f"{index}. {edit};\n"
        return message

    def validate_result(self, outcome: Outcome) -> bool:
        return isinstance(outcome.result, list)

    def validate_instance(self) -> bool:
        if not self.path:
            raise ValidationFailure(self, "File path cannot be empty.")
        return self.validate_nested_actions(self.edits, expected_type=LineEdit)

    def apply(self, outcome: Outcome) -> Outcome:
        path = require_file(self, self.path)
        lines: list[str] = []
        failed = False
        for line in path.read_text(encoding="utf-8").splitlines(keepends=True):
            edited = run_nested_pipeline(self, outcome, self.edits, line)
            failed = failed or outcome.result is False
            if edited is not None:
                lines.append(edited)

        if failed:
            logger.debug("Not writing %s: one or more line edits failed", self.path)
            return outcome.set_result(False)
        path.write_text("".join(lines), encoding="utf-8")
        logger.info("Updated %s (%d line edit(s))", self.path, len(self.edits))
        return outcome.set_result(lines)


__all__ = ["ModifyArray", "EmptyTransform", "ChangeConfigFileEntries", "LineEdit", "ModifyFile"]
