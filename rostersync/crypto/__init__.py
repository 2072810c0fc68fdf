"""Digest construction and signature helpers."""

from __future__ import annotations

from .digest import Domain, build_digest, committee_hash, config_hash
from .signing import PERSONAL, TYPED, RecoverFn, recover_signer, recoverer, sign_digest

__all__ = [
    "Domain",
    "build_digest",
    "committee_hash",
    "config_hash",
    "PERSONAL",
    "TYPED",
    "RecoverFn",
    "recover_signer",
    "recoverer",
    "sign_digest",
]
