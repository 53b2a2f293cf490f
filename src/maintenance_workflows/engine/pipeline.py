"""Nested pipeline for actions that edit structured content.

A parent action (e.g. ChangeConfigFileEntries) holds a list of edit actions.
Each edit receives the current content, runs, and on a positive result hands
its modified content to the next edit. Failed edits are collected and folded
into one parent failure, disposed of with the parent's severity.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from .action import Action
from .exceptions import ActionFailure, failures_are_critical
from .outcome import Outcome

logger = logging.getLogger(__name__)

SUB_ACTION_FAILURE_MESSAGE = "One or more sub-action failed."


@runtime_checkable
class ContentConsumer(Protocol):
    """An action that receives the pipeline content before it runs."""

    def set_content(self, content: Any) -> Any: ...


def run_nested_pipeline(
    parent: Action,
    outcome: Outcome,
    edits: Sequence[Action],
    content: Any,
    thread_content: bool = True,
) -> Any:
    """Thread content through the given edit actions.

    Args:
        parent: Action owning the edits (origin of the aggregated failure)
        outcome: Parent outcome; receives the nested outcomes, the result and
            the aggregated failure when it is not raised
        edits: Edit actions, run in order
        content: Initial content
        thread_content: Replace the content with each positive edit result
            (False for read-only checks)

    Returns:
        The content after every successful edit

    Raises:
        ActionFailure: A fatal edit failed, or the aggregated failure is
            critical for the parent
    """
    failed: list[Outcome] = []
    for edit in edits:
        edit_outcome = Outcome(edit)
        try:
            if isinstance(edit, ContentConsumer):
                edit.set_content(content)
            edit_outcome = edit.run()
            if edit.validate_result(edit_outcome):
                if thread_content:
                    content = edit_outcome.result
            else:
                failed.append(edit_outcome)
        except Exception as e:
            failure = e if isinstance(e, ActionFailure) else ActionFailure(edit, str(e))
            if edit.fatal:
                if failure is e:
                    raise
                raise failure from e
            edit_outcome.add_failure(failure)
            failed.append(edit_outcome)
        outcome.add_nested_outcome(edit_outcome)

    if not failed:
        outcome.set_result(True)
        return content

    aggregated = ActionFailure(parent, SUB_ACTION_FAILURE_MESSAGE)
    for edit_outcome in failed:
        for failure in edit_outcome.failures:
            aggregated.add_child(failure)
    outcome.set_result(False)

    if parent.fatal or failures_are_critical(aggregated.children):
        raise aggregated
    logger.warning(
        "%d nested action(s) failed in: %s", len(failed), parent.stringify()
    )
    outcome.add_failure(aggregated)
    return content


__all__ = ["ContentConsumer", "run_nested_pipeline", "SUB_ACTION_FAILURE_MESSAGE"]
