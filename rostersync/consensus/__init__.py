"""Roster validation, signer counting and threshold policy.

Everything in this package is a pure function of its arguments so it can be
unit-tested without a registry instance.
"""

from __future__ import annotations

from .counter import SignerBitset, count_approvals
from .roster import MAX_COMMITTEE_SIZE, MIN_COMMITTEE_SIZE, validate_committee
from .threshold import DEFAULT_THRESHOLD_BPS, required_approvals

__all__ = [
    "SignerBitset",
    "count_approvals",
    "MAX_COMMITTEE_SIZE",
    "MIN_COMMITTEE_SIZE",
    "validate_committee",
    "DEFAULT_THRESHOLD_BPS",
    "required_approvals",
]
