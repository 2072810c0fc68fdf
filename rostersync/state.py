"""Replica state held by a committee registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rostersync.core.config import MAX_COMMITTEE_BITS
from rostersync.types import (
    UINT64_MAX,
    UINT256_MAX,
    ZERO_ADDRESS,
    Address,
    ConfigMap,
    ConfigRecord,
    normalize_address,
)


@dataclass
class RegistryState:
    """Committee, nonce and per-account config of one replica.

    ``updated`` is the unix timestamp of the last accepted sync (0 until the
    first one). Instances are treated as scratch copies while a call is
    running and are published whole once the call succeeds.
    """

    committee: List[Address]
    nonce: int = 0
    updated: int = 0
    config: ConfigMap = field(default_factory=dict)

    @classmethod
    def genesis(cls, seed: Address) -> "RegistryState":
        """Return the bootstrap state: a single seed member at nonce 0."""
        return cls(committee=[normalize_address(seed)])

    def copy(self) -> "RegistryState":
        # ConfigRecord is frozen, so a shallow dict copy is enough.
        return RegistryState(
            committee=list(self.committee),
            nonce=self.nonce,
            updated=self.updated,
            config=dict(self.config),
        )

    def check(self) -> "RegistryState":
        """Verify the state is one a registry could have produced.

        Bootstrap states have a single member, so only the bitset width bounds
        the committee here, not the roster policy.

        Returns:
            The state itself, for chaining.

        Raises:
            ValueError: If the committee, nonce, timestamp or config is out of range.
        """
        if not 1 <= len(self.committee) <= MAX_COMMITTEE_BITS:
            raise ValueError(
                f"State committee size must be between 1 and {MAX_COMMITTEE_BITS}, got {len(self.committee)}"
            )
        seen = set()
        for member in self.committee:
            if normalize_address(member) != member:
                raise ValueError(f"State committee member {member!r} is not a checksum address")
            if member == ZERO_ADDRESS:
                raise ValueError("State committee contains the zero address")
            if member in seen:
                raise ValueError(f"State committee contains {member} twice")
            seen.add(member)
        for name in ("nonce", "updated"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT256_MAX:
                raise ValueError(f"State {name} must be a non-negative uint256, got {value!r}")
        for account, record in self.config.items():
            if not 0 <= record.version <= UINT64_MAX:
                raise ValueError(f"Config version for {account} out of uint64 range: {record.version}")
        return self

    def index_of(self, member: Address) -> Optional[int]:
        """Return the position of *member* in the committee, or None."""
        try:
            address = normalize_address(member)
        except ValueError:
            return None
        for position, current in enumerate(self.committee):
            if current == address:
                return position
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Convert the state to a JSON-serialisable dictionary."""
        return {
            "committee": list(self.committee),
            "nonce": self.nonce,
            "updated": self.updated,
            "config": {
                account: {"version": record.version, "value": "0x" + record.value.hex()}
                for account, record in self.config.items()
            },
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RegistryState":
        """Recreate a state from a payload produced by :meth:`to_payload`."""
        config: ConfigMap = {}
        for account, record in dict(payload.get("config", {})).items():
            config[normalize_address(account)] = ConfigRecord(
                version=int(record["version"]),
                value=bytes.fromhex(str(record["value"]).removeprefix("0x")),
            )
        committee = [normalize_address(member) for member in payload["committee"]]
        return cls(
            committee=committee,
            nonce=int(payload.get("nonce", 0)),
            updated=int(payload.get("updated", 0)),
            config=config,
        ).check()


__all__ = ["RegistryState"]
