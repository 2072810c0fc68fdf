"""Unit tests for the approval threshold policy."""

from __future__ import annotations

import pytest

from rostersync.consensus.threshold import required_approvals


def test_required_approvals_rounds_up() -> None:
    """It computes ceil(n * 60%) rather than truncating."""
    assert required_approvals(3) == 2  # 1.8
    assert required_approvals(4) == 3  # 2.4
    assert required_approvals(5) == 3  # 3.0
    assert required_approvals(6) == 4  # 3.6, floor would give 3
    assert required_approvals(10) == 6
    assert required_approvals(255) == 153


def test_required_approvals_floor_of_one() -> None:
    """A single-member or empty committee still needs one approval."""
    assert required_approvals(1) == 1
    assert required_approvals(0) == 1


def test_required_approvals_custom_ratio() -> None:
    """Other basis-point thresholds follow the same ceiling rule."""
    assert required_approvals(6, threshold_bps=5000) == 3
    assert required_approvals(7, threshold_bps=5000) == 4
    assert required_approvals(9, threshold_bps=6667) == 7
    assert required_approvals(4, threshold_bps=10_000) == 4


def test_required_approvals_rejects_bad_input() -> None:
    """Negative sizes and out-of-range ratios are programming errors."""
    with pytest.raises(ValueError):
        required_approvals(-1)
    with pytest.raises(ValueError):
        required_approvals(3, threshold_bps=0)
    with pytest.raises(ValueError):
        required_approvals(3, threshold_bps=10_001)
