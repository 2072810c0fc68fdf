"""Approval threshold policy.

The number of signatures required is a fixed fraction (in basis points) of
the *current* committee size, rounded up and never below one.
"""

from __future__ import annotations

BPS_DENOMINATOR = 10_000
DEFAULT_THRESHOLD_BPS = 6_000


def required_approvals(committee_size: int, threshold_bps: int = DEFAULT_THRESHOLD_BPS) -> int:
    """Return the minimum number of distinct signers for a committee of *committee_size*.

    Args:
        committee_size: Size of the committee that must approve.
        threshold_bps: Required fraction in basis points (default: 60%).

    Returns:
        ``max(1, ceil(committee_size * threshold_bps / 10000))`` computed with
        integer arithmetic, e.g. 6 members → 4 approvals.
    """
    if committee_size < 0:
        raise ValueError("committee_size cannot be negative")
    if not 0 < threshold_bps <= BPS_DENOMINATOR:
        raise ValueError("threshold_bps must be in (0, 10000]")
    required = -(-committee_size * threshold_bps // BPS_DENOMINATOR)
    return max(1, required)


__all__ = ["BPS_DENOMINATOR", "DEFAULT_THRESHOLD_BPS", "required_approvals"]
