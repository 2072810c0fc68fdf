"""Base types and data structures for the committee registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Union

from web3 import Web3

from rostersync.errors import InvalidProposal

Address = str
Digest = bytes
Signature = Union[bytes, str]

ZERO_ADDRESS: Address = "0x0000000000000000000000000000000000000000"
UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1


def normalize_address(value: object) -> Address:
    """Return *value* as an EIP-55 checksum address.

    Raises:
        ValueError: If *value* is not a 20-byte hex address (wrong length,
            non-hex characters or a mixed-case string with a bad checksum).
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(value)}")
        return Web3.to_checksum_address(bytes(value))
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValueError(f"Not a valid address: {value!r}")
    return Web3.to_checksum_address(value)


@dataclass(frozen=True)
class ConfigEntry:
    """Per-account configuration carried by a roster proposal."""

    account: Address
    version: int
    value: bytes = b""

    def __post_init__(self) -> None:
        """Normalise the account and reject values that cannot be hashed."""
        try:
            object.__setattr__(self, "account", normalize_address(self.account))
        except ValueError as exc:
            raise InvalidProposal(f"Invalid config account: {exc}") from exc
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise InvalidProposal(f"Config version must be an integer, got {self.version!r}")
        if not 0 <= self.version <= UINT64_MAX:
            raise InvalidProposal(f"Config version {self.version} out of uint64 range")
        if isinstance(self.value, bytearray):
            object.__setattr__(self, "value", bytes(self.value))
        if not isinstance(self.value, bytes):
            raise InvalidProposal("Config value must be bytes")


@dataclass(frozen=True)
class ConfigRecord:
    """Stored configuration for one account."""

    version: int = 0
    value: bytes = b""


@dataclass
class SyncStep:
    """One roster proposal together with the signatures collected for it."""

    committee: List[Address]
    config: List[ConfigEntry] = field(default_factory=list)
    signatures: List[Signature] = field(default_factory=list)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of an accepted roster transition."""

    nonce: int
    committee: Sequence[Address]
    count: int
    digest: Digest


# Notifications ------------------------------------------------------------------------


@dataclass(frozen=True)
class RosterChanged:
    """Emitted once a proposal has been applied."""

    nonce: int
    committee: Sequence[Address]
    count: int
    digest: Digest


@dataclass(frozen=True)
class NonceInitialized:
    """Emitted when the seed member advances the nonce through bootstrap."""

    nonce: int


RegistryEvent = Union[RosterChanged, NonceInitialized]
ConfigMap = Dict[Address, ConfigRecord]
