"""Failure severity derived from an action's (fatal, success_required) flags."""

from enum import Enum


class Severity(str, Enum):
    """
    The four failure-disposition policies.

    Severity is never stored on an action: it is derived from the two
    independent flags, so composites can force one flag without touching
    the other. The four members cover the whole 2x2 space.
    """

    NON_CRITICAL = "non_critical"
    """(fatal=False, success_required=False): failures and negative results are recorded."""

    SUCCESS_REQUIRED = "success_required"
    """(fatal=False, success_required=True): apply failures recorded, negative result raised."""

    FATAL = "fatal"
    """(fatal=True, success_required=False): apply failures raised, negative result accepted."""

    CRITICAL = "critical"
    """(fatal=True, success_required=True): apply failures and negative results raised."""

    @classmethod
    def of(cls, fatal: bool, success_required: bool) -> "Severity":
        """Map the two severity flags to a member."""
        if fatal:
            return cls.CRITICAL if success_required else cls.FATAL
        return cls.SUCCESS_REQUIRED if success_required else cls.NON_CRITICAL

    @property
    def flags(self) -> tuple[bool, bool]:
        """Return the (fatal, success_required) pair for this member."""
        return _FLAGS[self]

    def absorbs_apply_failures(self) -> bool:
        """Check if a failure raised by apply() is recorded instead of raised."""
        return not self.flags[0]

    def promotes_negative_result(self) -> bool:
        """Check if a negative (non-exceptional) result is raised as a failure."""
        return self.flags[1]

    def is_critical(self) -> bool:
        """Check if failures of this severity abort the parent action."""
        return self != Severity.NON_CRITICAL


_FLAGS: dict[Severity, tuple[bool, bool]] = {
    Severity.NON_CRITICAL: (False, False),
    Severity.SUCCESS_REQUIRED: (False, True),
    Severity.FATAL: (True, False),
    Severity.CRITICAL: (True, True),
}


__all__ = ["Severity"]
