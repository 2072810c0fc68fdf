"""Canonical digest over a roster proposal.

The digest follows the EIP-712 layout so that standard wallets can display
and sign it::

    committeeHash   = keccak(enc(id_0) ‖ enc(id_1) ‖ …)
    configHash      = keccak(keccak(enc(CONFIG_TYPEHASH, account, version, keccak(value))) ‖ …)
    structHash      = keccak(enc(SYNC_TYPEHASH, nonce, committeeHash, configHash))
    domainSeparator = keccak(enc(DOMAIN_TYPEHASH, keccak(name), keccak(version)))
    digest          = keccak(0x19 0x01 ‖ domainSeparator ‖ structHash)

The domain deliberately carries no chain id or verifying contract: the same
signed proposal is valid on every replica that shares the protocol name and
version string.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Sequence

from eth_abi import encode
from web3 import Web3

from rostersync.types import Address, ConfigEntry, Digest, UINT256_MAX

DOMAIN_TYPE = "EIP712Domain(string name,string version)"
CONFIG_TYPE = "Config(address account,uint64 version,bytes value)"
SYNC_TYPE = "Sync(uint256 nonce,address[] committee,Config[] config)" + CONFIG_TYPE

DOMAIN_TYPEHASH: bytes = bytes(Web3.keccak(text=DOMAIN_TYPE))
CONFIG_TYPEHASH: bytes = bytes(Web3.keccak(text=CONFIG_TYPE))
SYNC_TYPEHASH: bytes = bytes(Web3.keccak(text=SYNC_TYPE))

EIP712_PREFIX = b"\x19\x01"


def keccak(data: bytes) -> bytes:
    """Return the keccak-256 hash of *data* as plain bytes."""
    return bytes(Web3.keccak(data))


@dataclass(frozen=True)
class Domain:
    """Protocol name and version that scope every digest."""

    name: str
    version: str

    @cached_property
    def separator(self) -> bytes:
        """Return the 32-byte domain separator."""
        return keccak(
            encode(
                ["bytes32", "bytes32", "bytes32"],
                [DOMAIN_TYPEHASH, keccak(self.name.encode("utf-8")), keccak(self.version.encode("utf-8"))],
            )
        )


def committee_hash(committee: Iterable[Address]) -> bytes:
    """Hash the ordered committee; reordering members changes the result."""
    return keccak(b"".join(encode(["address"], [member]) for member in committee))


def config_entry_hash(entry: ConfigEntry) -> bytes:
    return keccak(
        encode(
            ["bytes32", "address", "uint64", "bytes32"],
            [CONFIG_TYPEHASH, entry.account, entry.version, keccak(entry.value)],
        )
    )


def config_hash(config: Iterable[ConfigEntry]) -> bytes:
    """Hash the ordered list of config entries."""
    return keccak(b"".join(config_entry_hash(entry) for entry in config))


def struct_hash(nonce: int, committee: Sequence[Address], config: Sequence[ConfigEntry]) -> bytes:
    if isinstance(nonce, bool) or not isinstance(nonce, int) or not 0 <= nonce <= UINT256_MAX:
        raise ValueError(f"Nonce must be a uint256, got {nonce!r}")
    return keccak(
        encode(
            ["bytes32", "uint256", "bytes32", "bytes32"],
            [SYNC_TYPEHASH, nonce, committee_hash(committee), config_hash(config)],
        )
    )


def build_digest(
    nonce: int,
    committee: Sequence[Address],
    config: Sequence[ConfigEntry],
    *,
    domain: Domain,
) -> Digest:
    """Return the 32-byte digest that committee members sign.

    Args:
        nonce: The nonce the proposal targets (current nonce + 1).
        committee: Proposed committee, in order.
        config: Proposed config entries, in order.
        domain: Protocol domain the digest is bound to.

    Returns:
        The digest as 32 raw bytes.
    """
    return keccak(EIP712_PREFIX + domain.separator + struct_hash(nonce, committee, config))


__all__ = [
    "Domain",
    "DOMAIN_TYPEHASH",
    "CONFIG_TYPEHASH",
    "SYNC_TYPEHASH",
    "build_digest",
    "committee_hash",
    "config_hash",
    "config_entry_hash",
    "keccak",
]
