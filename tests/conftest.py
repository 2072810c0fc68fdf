"""Shared fixtures for registry tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Sequence

import pytest
from eth_account import Account

from rostersync.core.config import Settings
from rostersync.crypto.signing import sign_digest
from rostersync.registry import CommitteeRegistry
from rostersync.types import ConfigEntry

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

FIXED_TIME = 1_700_000_000

Signer = Callable[..., List[bytes]]


@pytest.fixture
def accounts() -> List["LocalAccount"]:
    """Ten deterministic accounts (private keys 1..10)."""
    return [Account.from_key((i + 1).to_bytes(32, "big")) for i in range(10)]


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any local ``.env`` file."""
    return Settings(_env_file=None)


@pytest.fixture
def registry(accounts: List["LocalAccount"], settings: Settings) -> CommitteeRegistry:
    """A freshly bootstrapped registry seeded by ``accounts[0]``."""
    return CommitteeRegistry.bootstrap(accounts[0].address, settings=settings, clock=lambda: FIXED_TIME)


@pytest.fixture
def sign() -> Signer:
    """Return a helper that signs the next proposal of a registry with each signer."""

    def _sign(
        registry: CommitteeRegistry,
        signers: Sequence["LocalAccount"],
        committee: Sequence[str],
        config: Sequence[ConfigEntry] = (),
        nonce: int | None = None,
    ) -> List[bytes]:
        target = registry.nonce + 1 if nonce is None else nonce
        digest = registry.hash(target, committee, config)
        return [sign_digest(acct.key, digest) for acct in signers]

    return _sign


@pytest.fixture
def six_member_registry(
    registry: CommitteeRegistry,
    accounts: List["LocalAccount"],
    sign: Signer,
) -> CommitteeRegistry:
    """Registry at nonce 1 whose committee is ``accounts[0:6]``."""
    committee = [acct.address for acct in accounts[:6]]
    registry.sync(committee, [], sign(registry, [accounts[0]], committee))
    return registry
