"""Committee registry: the state transition engine of a replica.

A :class:`CommitteeRegistry` owns one :class:`~rostersync.state.RegistryState`
and exposes the three mutating operations:

* :meth:`CommitteeRegistry.sync` applies one signed roster proposal;
* :meth:`CommitteeRegistry.syncs` replays a batch of proposals, all or nothing;
* :meth:`CommitteeRegistry.init` lets the seed member advance the nonce once.

Every mutating call runs against a scratch copy of the state. The copy is
saved to the optional store and published only after the whole call has
passed its checks; listeners are notified afterwards.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from rostersync.consensus.counter import count_approvals
from rostersync.consensus.roster import validate_committee
from rostersync.consensus.threshold import required_approvals
from rostersync.core.config import Settings, get_settings
from rostersync.crypto.digest import Domain, build_digest
from rostersync.crypto.signing import RecoverFn, recoverer
from rostersync.errors import InitFailed, InsufficientCount, InvalidProposal
from rostersync.state import RegistryState
from rostersync.store import StateStore
from rostersync.types import (
    UINT256_MAX,
    Address,
    ConfigEntry,
    ConfigRecord,
    Digest,
    NonceInitialized,
    RegistryEvent,
    RosterChanged,
    Signature,
    SyncResult,
    SyncStep,
    normalize_address,
)

LOGGER = logging.getLogger(__name__)

Listener = Callable[[RegistryEvent], None]


class CommitteeRegistry:
    """Replica-local register of the committee, its nonce and account config."""

    def __init__(
        self,
        state: RegistryState,
        *,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
        recover: Optional[RecoverFn] = None,
        store: Optional[StateStore] = None,
    ) -> None:
        """Create a registry around an existing state.

        Args:
            state: Initial replica state; the registry keeps its own copy.
            settings: Policy and domain settings (defaults to the global ones).
            clock: Source of the ``updated`` timestamp.
            recover: Signer recovery primitive; defaults to the configured
                signing scheme.
            store: Optional persistence, written on every accepted call.

        Raises:
            ValueError: If *state* fails :meth:`RegistryState.check`.
        """
        state.check()
        self._settings = settings or get_settings()
        self._domain = Domain(self._settings.protocol_name, self._settings.protocol_version)
        self._clock = clock
        self._recover = recover or recoverer(self._settings.signing_scheme)
        self._store = store
        self._state = state.copy()
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    @classmethod
    def bootstrap(cls, seed: Address, **kwargs) -> "CommitteeRegistry":
        """Create a fresh registry whose committee is the single *seed* member."""
        return cls(RegistryState.genesis(seed), **kwargs)

    @classmethod
    def from_store(cls, store: StateStore, *, seed: Optional[Address] = None, **kwargs) -> "CommitteeRegistry":
        """Load the registry from *store*, bootstrapping from *seed* if it is empty."""
        state = store.load()
        if state is None:
            if seed is None:
                raise ValueError("Store is empty and no seed member was given")
            state = RegistryState.genesis(seed)
            store.save(state)
        return cls(state, store=store, **kwargs)

    # ----------------------------------------------------------------------------------
    # Read accessors
    # ----------------------------------------------------------------------------------

    @property
    def domain(self) -> Domain:
        return self._domain

    @property
    def nonce(self) -> int:
        return self._state.nonce

    @property
    def updated(self) -> int:
        """Unix timestamp of the last accepted sync (0 if none yet)."""
        return self._state.updated

    def get_committee(self) -> List[Address]:
        """Return the current committee in order."""
        return list(self._state.committee)

    def index_of(self, member: Address) -> Optional[int]:
        """Return *member*'s committee position, or None when it is not a member."""
        return self._state.index_of(member)

    def is_member(self, member: Address) -> bool:
        return self.index_of(member) is not None

    def config(self, account: Address) -> Tuple[int, bytes]:
        """Return ``(version, value)`` stored for *account*; ``(0, b"")`` if unset."""
        try:
            key = normalize_address(account)
        except ValueError as exc:
            raise InvalidProposal(f"Invalid account: {exc}") from exc
        record = self._state.config.get(key, ConfigRecord())
        return record.version, record.value

    def snapshot(self) -> RegistryState:
        """Return a detached copy of the current state."""
        return self._state.copy()

    def required_approvals(self) -> int:
        """Approvals the current committee must provide for the next sync."""
        return required_approvals(len(self._state.committee), self._settings.threshold_bps)

    def hash(self, nonce: int, committee: Sequence[Address], config: Sequence[ConfigEntry] = ()) -> Digest:
        """Return the digest signers must sign for the given proposal."""
        return build_digest(nonce, committee, config, domain=self._domain)

    def next_digest(self, committee: Sequence[Address], config: Sequence[ConfigEntry] = ()) -> Digest:
        """Return the digest of a proposal targeting the next nonce."""
        return self.hash(self._state.nonce + 1, committee, config)

    # ----------------------------------------------------------------------------------
    # Notifications
    # ----------------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for registry events and return an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, events: Iterable[RegistryEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:  # noqa: BLE001
                    LOGGER.exception("Listener %r failed on %s", listener, type(event).__name__)

    # ----------------------------------------------------------------------------------
    # Mutating operations
    # ----------------------------------------------------------------------------------

    def sync(
        self,
        committee: Sequence[Address],
        config: Sequence[ConfigEntry] = (),
        signatures: Sequence[Signature] = (),
    ) -> SyncResult:
        """Apply one roster proposal if enough current members signed it.

        Raises:
            InvalidCommittee: The proposed committee is malformed.
            InsufficientCount: Fewer distinct current members signed than required.
        """
        step = SyncStep(committee=list(committee), config=list(config), signatures=list(signatures))
        return self.syncs([step])[0]

    def syncs(self, steps: Sequence[SyncStep]) -> List[SyncResult]:
        """Apply *steps* in order, or none of them.

        Each step is checked against the state produced by the previous one.
        If any step fails, its exception propagates and the registry is left
        exactly as it was before the call.
        """
        if not steps:
            return []

        with self._lock:
            scratch = self._state.copy()
            results: List[SyncResult] = []
            for position, step in enumerate(steps):
                try:
                    results.append(self._apply(scratch, step))
                except Exception as exc:
                    LOGGER.warning(
                        "Rejected sync step %s/%s at nonce %s: %s",
                        position + 1,
                        len(steps),
                        scratch.nonce + 1,
                        exc,
                    )
                    raise
            self._publish(scratch)

        for result in results:
            LOGGER.info(
                "Committee updated to nonce %s (%s members, %s approvals, digest 0x%s)",
                result.nonce,
                len(result.committee),
                result.count,
                result.digest.hex(),
            )
        self._emit(
            RosterChanged(nonce=r.nonce, committee=r.committee, count=r.count, digest=r.digest)
            for r in results
        )
        return results

    def init(self, new_nonce: int, caller: Address) -> int:
        """Advance the nonce through the one-time bootstrap path.

        Allowed only while the committee has exactly one member, only for
        that member, and only to a strictly larger nonce.

        Raises:
            InitFailed: When any of the three conditions does not hold.
        """
        with self._lock:
            state = self._state
            if len(state.committee) != 1:
                raise InitFailed(f"committee has {len(state.committee)} members, bootstrap needs exactly 1")
            try:
                caller_address = normalize_address(caller)
            except ValueError as exc:
                raise InitFailed(f"caller is not an address: {exc}") from exc
            if caller_address != state.committee[0]:
                raise InitFailed(f"caller {caller_address} is not the seed member")
            if isinstance(new_nonce, bool) or not isinstance(new_nonce, int) or new_nonce > UINT256_MAX:
                raise InitFailed(f"nonce must be a uint256, got {new_nonce!r}")
            if new_nonce <= state.nonce:
                raise InitFailed(f"nonce {new_nonce} is not greater than current nonce {state.nonce}")

            scratch = state.copy()
            scratch.nonce = new_nonce
            self._publish(scratch)

        LOGGER.info("Nonce initialized to %s by seed member %s", new_nonce, caller_address)
        self._emit([NonceInitialized(nonce=new_nonce)])
        return new_nonce

    # ----------------------------------------------------------------------------------
    # Internal helpers
    # ----------------------------------------------------------------------------------

    def _apply(self, state: RegistryState, step: SyncStep) -> SyncResult:
        """Run one step of the transition pipeline against *state* in place."""
        committee = validate_committee(
            step.committee,
            min_size=self._settings.min_committee_size,
            max_size=self._settings.max_committee_size,
        )
        config = list(step.config)
        for entry in config:
            if not isinstance(entry, ConfigEntry):
                raise InvalidProposal(f"Expected ConfigEntry, got {type(entry).__name__}")

        target_nonce = state.nonce + 1
        digest = build_digest(target_nonce, committee, config, domain=self._domain)
        count = count_approvals(digest, state.committee, step.signatures, recover=self._recover)
        required = required_approvals(len(state.committee), self._settings.threshold_bps)
        if count < required:
            raise InsufficientCount(count, required)

        state.committee = committee
        state.nonce = target_nonce
        state.updated = int(self._clock())
        for entry in config:
            state.config[entry.account] = ConfigRecord(version=entry.version, value=entry.value)

        return SyncResult(nonce=target_nonce, committee=tuple(committee), count=count, digest=digest)

    def _publish(self, state: RegistryState) -> None:
        if self._store is not None:
            self._store.save(state)
        self._state = state


__all__ = ["CommitteeRegistry", "Listener"]
