"""rostersync package.

Keeps a committee roster consistent across independent replicas. Committee
members sign an off-line proposal (new roster plus per-account config); any
replica that sees enough distinct member signatures applies it locally.

  - rostersync.registry      the state transition engine (sync / syncs / init)
  - rostersync.consensus     roster rules, signer counting, threshold policy
  - rostersync.crypto        proposal digest and signing helpers
  - rostersync.messages      JSON wire format for proposals and results
  - rostersync.store         state persistence for long-running hosts
"""

from __future__ import annotations

# Public API re-exports -----------------------------------------------------------

from .types import (  # noqa: F401
    Address,
    ConfigEntry,
    ConfigRecord,
    NonceInitialized,
    RosterChanged,
    SyncResult,
    SyncStep,
    ZERO_ADDRESS,
)
from .errors import (  # noqa: F401
    CorruptState,
    InitFailed,
    InsufficientCount,
    InvalidCommittee,
    InvalidProposal,
    RosterSyncError,
)
from .crypto import Domain, build_digest, recover_signer, sign_digest  # noqa: F401
from .consensus import count_approvals, required_approvals, validate_committee  # noqa: F401
from .state import RegistryState  # noqa: F401
from .store import JsonStateStore, MemoryStateStore, StateStore  # noqa: F401
from .registry import CommitteeRegistry  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    # types
    "Address",
    "ConfigEntry",
    "ConfigRecord",
    "NonceInitialized",
    "RosterChanged",
    "SyncResult",
    "SyncStep",
    "ZERO_ADDRESS",
    # errors
    "InitFailed",
    "InsufficientCount",
    "InvalidCommittee",
    "InvalidProposal",
    "CorruptState",
    "RosterSyncError",
    # building blocks
    "Domain",
    "build_digest",
    "recover_signer",
    "sign_digest",
    "count_approvals",
    "required_approvals",
    "validate_committee",
    # engine
    "RegistryState",
    "StateStore",
    "JsonStateStore",
    "MemoryStateStore",
    "CommitteeRegistry",
]
