"""Structural acceptance rules for a proposed committee."""

from __future__ import annotations

from typing import Iterable, List

from rostersync.core.config import MAX_COMMITTEE_BITS
from rostersync.errors import InvalidCommittee
from rostersync.types import ZERO_ADDRESS, Address, normalize_address

MIN_COMMITTEE_SIZE = 3
MAX_COMMITTEE_SIZE = MAX_COMMITTEE_BITS


def validate_committee(
    committee: Iterable[object],
    *,
    min_size: int = MIN_COMMITTEE_SIZE,
    max_size: int = MAX_COMMITTEE_SIZE,
) -> List[Address]:
    """Check a proposed committee and return it in checksum form.

    Rules are applied in order and the first violation is reported:

    1. the size lies within ``[min_size, max_size]``;
    2. every entry is a well-formed, non-zero address;
    3. no address appears twice.

    Raises:
        InvalidCommittee: On the first violated rule.
    """
    members = list(committee)
    if not min_size <= len(members) <= max_size:
        raise InvalidCommittee(f"size {len(members)} outside [{min_size}, {max_size}]")

    normalized: List[Address] = []
    for position, member in enumerate(members):
        try:
            address = normalize_address(member)
        except ValueError as exc:
            raise InvalidCommittee(f"entry {position} is not an address: {exc}") from exc
        if address == ZERO_ADDRESS:
            raise InvalidCommittee(f"entry {position} is the zero address")
        normalized.append(address)

    seen = set()
    for position, address in enumerate(normalized):
        if address in seen:
            raise InvalidCommittee(f"duplicate member {address} at entry {position}")
        seen.add(address)
    return normalized


__all__ = ["MIN_COMMITTEE_SIZE", "MAX_COMMITTEE_SIZE", "validate_committee"]
