"""Distinct-signer counting for a proposal digest."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Sequence

from rostersync.core.config import MAX_COMMITTEE_BITS
from rostersync.crypto.signing import RecoverFn
from rostersync.types import Address, Digest, Signature

LOGGER = logging.getLogger(__name__)


class SignerBitset:
    """Fixed-width set of committee indices seen during one count."""

    def __init__(self, width: int = MAX_COMMITTEE_BITS) -> None:
        self._width = width
        self._bits = 0

    def __contains__(self, index: int) -> bool:
        return bool(self._bits >> index & 1)

    def add(self, index: int) -> None:
        if not 0 <= index < self._width:
            raise IndexError(f"Index {index} outside bitset width {self._width}")
        self._bits |= 1 << index

    def __len__(self) -> int:
        return bin(self._bits).count("1")


def count_approvals(
    digest: Digest,
    committee: Sequence[Address],
    signatures: Iterable[Signature],
    *,
    recover: RecoverFn,
) -> int:
    """Count distinct members of *committee* who signed *digest*.

    Signatures that cannot be recovered, that recover to a non-member, or
    that repeat an already counted member are skipped; none of them aborts
    the count.

    Args:
        digest: The 32-byte proposal digest.
        committee: The committee whose members may approve.
        signatures: Raw signatures in any order.
        recover: Signer recovery primitive for the deployment's scheme.

    Returns:
        Number of distinct authorized signers.
    """
    index: Dict[Address, int] = {}
    for position, member in enumerate(committee):
        index.setdefault(member, position)

    seen = SignerBitset()
    count = 0
    for position, signature in enumerate(signatures):
        try:
            signer = recover(digest, signature)
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("Skipping signature %s: unrecoverable (%s)", position, exc)
            continue

        member_index = index.get(signer)
        if member_index is None:
            LOGGER.debug("Skipping signature %s: %s is not a committee member", position, signer)
            continue
        if member_index in seen:
            LOGGER.debug("Skipping signature %s: %s already counted", position, signer)
            continue

        seen.add(member_index)
        count += 1
    return count


__all__ = ["SignerBitset", "count_approvals"]
