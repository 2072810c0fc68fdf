"""Exception classes raised by the committee registry.

Every rejected call raises one of these and leaves the replica state
untouched. Per-signature problems (unrecoverable, non-member or duplicate
signatures) are never raised; they are simply not counted.
"""

from __future__ import annotations


class RosterSyncError(Exception):
    """Base exception for all registry errors."""

    def __init__(self, message: str, error_code: str = "ROSTERSYNC_ERROR") -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InvalidCommittee(RosterSyncError):
    """A proposed committee failed the structural roster rules."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid committee: {reason}", "INVALID_COMMITTEE")
        self.reason = reason


class InsufficientCount(RosterSyncError):
    """Not enough distinct current-member signatures were supplied."""

    def __init__(self, count: int, required: int) -> None:
        super().__init__(
            f"Insufficient approvals: got {count}, need {required}",
            "INSUFFICIENT_COUNT",
        )
        self.count = count
        self.required = required


class InitFailed(RosterSyncError):
    """A bootstrap precondition did not hold."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Init failed: {reason}", "INIT_FAILED")
        self.reason = reason


class InvalidProposal(RosterSyncError):
    """A proposal payload or config entry is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INVALID_PROPOSAL")


class CorruptState(RosterSyncError):
    """Persisted replica state could not be read back."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Corrupt state: {reason}", "CORRUPT_STATE")
        self.reason = reason


__all__ = [
    "RosterSyncError",
    "InvalidCommittee",
    "InsufficientCount",
    "InitFailed",
    "InvalidProposal",
    "CorruptState",
]
