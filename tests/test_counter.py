"""Unit tests for distinct-signer counting."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import pytest

from rostersync.consensus.counter import SignerBitset, count_approvals
from rostersync.crypto.digest import keccak
from rostersync.crypto.signing import TYPED, recoverer, sign_digest

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount
    from pytest_mock.plugin import MockerFixture

DIGEST = keccak(b"roster proposal")
RECOVER = recoverer(TYPED)


def _sigs(signers: List["LocalAccount"]) -> List[bytes]:
    return [sign_digest(acct.key, DIGEST) for acct in signers]


def test_counts_distinct_members(accounts: List["LocalAccount"]) -> None:
    """Each member signature counts once."""
    committee = [acct.address for acct in accounts[:5]]
    assert count_approvals(DIGEST, committee, _sigs(accounts[:3]), recover=RECOVER) == 3


def test_duplicate_signatures_count_once(accounts: List["LocalAccount"]) -> None:
    """Two identical signatures from one signer yield a count of 1."""
    committee = [acct.address for acct in accounts[:3]]
    signature = _sigs([accounts[0]])[0]
    assert count_approvals(DIGEST, committee, [signature, signature], recover=RECOVER) == 1


def test_non_member_and_malformed_are_skipped(accounts: List["LocalAccount"]) -> None:
    """Bad signatures are skipped without hiding the valid ones."""
    committee = [acct.address for acct in accounts[:4]]
    signatures = [
        _sigs([accounts[9]])[0],  # not a member
        b"\x00" * 65,  # unrecoverable
        b"\x01\x02",  # wrong length
        *_sigs(accounts[:2]),
    ]
    assert count_approvals(DIGEST, committee, signatures, recover=RECOVER) == 2


def test_signature_over_other_digest_is_not_counted(accounts: List["LocalAccount"]) -> None:
    """A signature for a different digest recovers to an unrelated address."""
    committee = [acct.address for acct in accounts[:3]]
    stale = sign_digest(accounts[0].key, keccak(b"older proposal"))
    assert count_approvals(DIGEST, committee, [stale], recover=RECOVER) == 0


def test_order_does_not_matter(accounts: List["LocalAccount"]) -> None:
    """Reversing the signature list gives the same count."""
    committee = [acct.address for acct in accounts[:5]]
    signatures = _sigs(accounts[:4]) + _sigs(accounts[1:2]) + [b"junk"]
    forward = count_approvals(DIGEST, committee, signatures, recover=RECOVER)
    backward = count_approvals(DIGEST, committee, list(reversed(signatures)), recover=RECOVER)
    assert forward == backward == 4


def test_recovery_errors_are_tolerated(accounts: List["LocalAccount"], mocker: "MockerFixture") -> None:
    """Any exception from the recovery primitive just drops that signature."""
    committee = [acct.address for acct in accounts[:3]]
    recover = mocker.Mock(side_effect=[RuntimeError("boom"), accounts[1].address, accounts[2].address])
    assert count_approvals(DIGEST, committee, [b"a", b"b", b"c"], recover=recover) == 2
    assert recover.call_count == 3


def test_signer_bitset() -> None:
    """The bitset tracks indices up to its width."""
    seen = SignerBitset()
    assert 0 not in seen
    seen.add(0)
    seen.add(254)
    assert 0 in seen and 254 in seen and 1 not in seen
    assert len(seen) == 2
    with pytest.raises(IndexError):
        seen.add(255)
