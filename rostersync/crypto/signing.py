"""Signing and signer-recovery helpers built on ``eth_account``.

Two wrapping schemes are supported and must be fixed per deployment:

* ``typed``    – the digest is signed as-is (EIP-712 style).
* ``personal`` – the digest is wrapped in the EIP-191 personal-message
  prefix before signing, as done by ``eth_sign`` in most wallets.
"""

from __future__ import annotations

from typing import Callable

from eth_account import Account
from eth_account.messages import encode_defunct
from hexbytes import HexBytes

from rostersync.types import Address, Digest, Signature

RecoverFn = Callable[[Digest, Signature], Address]

TYPED = "typed"
PERSONAL = "personal"


def _as_bytes(signature: Signature) -> bytes:
    return bytes(HexBytes(signature))


def sign_digest(private_key: str | bytes, digest: Digest, scheme: str = TYPED) -> bytes:
    """Sign *digest* with *private_key* and return the 65-byte ``r ‖ s ‖ v`` signature."""
    if len(digest) != 32:
        raise ValueError("Digest must be 32 bytes")
    if scheme == TYPED:
        signed = Account.unsafe_sign_hash(digest, private_key)
    elif scheme == PERSONAL:
        signed = Account.sign_message(encode_defunct(primitive=digest), private_key)
    else:
        raise ValueError(f"Unknown signing scheme: {scheme}")
    return bytes(signed.signature)


def recover_signer(digest: Digest, signature: Signature, scheme: str = TYPED) -> Address:
    """Recover the address that produced *signature* over *digest*.

    Raises:
        ValueError: For an unknown scheme. Malformed signatures raise whatever
            ``eth_account``/``eth_keys`` raise; callers counting approvals treat
            any such failure as "not a vote".
    """
    raw = _as_bytes(signature)
    if scheme == TYPED:
        return Account._recover_hash(digest, signature=raw)
    if scheme == PERSONAL:
        return Account.recover_message(encode_defunct(primitive=digest), signature=raw)
    raise ValueError(f"Unknown signing scheme: {scheme}")


def recoverer(scheme: str) -> RecoverFn:
    """Return a recovery function bound to *scheme*."""
    if scheme not in (TYPED, PERSONAL):
        raise ValueError(f"Unknown signing scheme: {scheme}")

    def _recover(digest: Digest, signature: Signature) -> Address:
        return recover_signer(digest, signature, scheme)

    return _recover


__all__ = ["RecoverFn", "TYPED", "PERSONAL", "sign_digest", "recover_signer", "recoverer"]
