"""Wire format for roster proposals and sync results.

Proposals travel between parties as JSON while signatures are being
collected. Bytes (config values, signatures, digests) are hex strings with a
``0x`` prefix.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hexbytes import HexBytes

from rostersync.errors import InvalidProposal
from rostersync.types import UINT256_MAX, ConfigEntry, SyncResult, SyncStep


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _unhex(value: Any, what: str) -> bytes:
    if not isinstance(value, str):
        raise InvalidProposal(f"{what} must be a hex string")
    try:
        return bytes(HexBytes(value))
    except ValueError as exc:
        raise InvalidProposal(f"{what} is not valid hex: {exc}") from exc


def _nonce_hint(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT256_MAX:
        raise InvalidProposal(f"Nonce hint must be a non-negative integer, got {value!r}")
    return value


def config_entry_to_payload(entry: ConfigEntry) -> Dict[str, Any]:
    return {"account": entry.account, "version": entry.version, "value": _hex(entry.value)}


def config_entry_from_payload(payload: Dict[str, Any]) -> ConfigEntry:
    try:
        return ConfigEntry(
            account=payload["account"],
            version=payload["version"],
            value=_unhex(payload.get("value", "0x"), "Config value"),
        )
    except (KeyError, TypeError) as exc:
        raise InvalidProposal(f"Malformed config entry: {exc}") from exc


def step_to_payload(step: SyncStep, nonce: Optional[int] = None) -> Dict[str, Any]:
    """Convert a sync step to a payload; *nonce* is informational only."""
    payload: Dict[str, Any] = {
        "committee": list(step.committee),
        "config": [config_entry_to_payload(entry) for entry in step.config],
        "signatures": [_hex(HexBytes(sig)) for sig in step.signatures],
    }
    if nonce is not None:
        payload["nonce"] = nonce
    return payload


def step_from_payload(payload: Dict[str, Any]) -> SyncStep:
    """Create a sync step from a payload produced by :func:`step_to_payload`."""
    if not isinstance(payload, dict):
        raise InvalidProposal("Proposal must be a JSON object")
    committee = payload.get("committee")
    if not isinstance(committee, list):
        raise InvalidProposal("Proposal committee must be a list")
    config = payload.get("config", [])
    signatures = payload.get("signatures", [])
    if not isinstance(config, list) or not isinstance(signatures, list):
        raise InvalidProposal("Proposal config and signatures must be lists")
    return SyncStep(
        committee=[str(member) for member in committee],
        config=[config_entry_from_payload(entry) for entry in config],
        signatures=[_unhex(sig, "Signature") for sig in signatures],
    )


@dataclass
class SyncRequestMessage:
    """A batch of proposals (one element for a plain sync) with optional nonce hints."""

    steps: List[SyncStep]
    nonces: List[Optional[int]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Convert to message payload."""
        nonces = self.nonces or [None] * len(self.steps)
        return {"steps": [step_to_payload(step, nonce) for step, nonce in zip(self.steps, nonces)]}

    @classmethod
    def from_payload(cls, payload: Any) -> "SyncRequestMessage":
        """Create from message payload.

        Accepts ``{"steps": [...]}``, a bare list of steps, or a single step object.
        """
        if isinstance(payload, dict) and "steps" in payload:
            raw_steps = payload["steps"]
        elif isinstance(payload, list):
            raw_steps = payload
        else:
            raw_steps = [payload]
        if not isinstance(raw_steps, list):
            raise InvalidProposal("steps must be a list")
        steps = [step_from_payload(raw) for raw in raw_steps]
        nonces = [_nonce_hint(raw.get("nonce")) for raw in raw_steps]
        return cls(steps=steps, nonces=nonces)

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "SyncRequestMessage":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise InvalidProposal(f"Proposal is not valid JSON: {exc}") from exc
        return cls.from_payload(data)


@dataclass
class SyncResponseMessage:
    """Results of an accepted sync or batch."""

    results: List[SyncResult]

    def to_payload(self) -> Dict[str, Any]:
        """Convert to message payload."""
        return {
            "results": [
                {
                    "nonce": result.nonce,
                    "committee": list(result.committee),
                    "count": result.count,
                    "digest": _hex(result.digest),
                }
                for result in self.results
            ]
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SyncResponseMessage":
        """Create from message payload."""
        return cls(
            results=[
                SyncResult(
                    nonce=int(raw["nonce"]),
                    committee=tuple(raw["committee"]),
                    count=int(raw["count"]),
                    digest=_unhex(raw["digest"], "Digest"),
                )
                for raw in payload["results"]
            ]
        )


__all__ = [
    "config_entry_to_payload",
    "config_entry_from_payload",
    "step_to_payload",
    "step_from_payload",
    "SyncRequestMessage",
    "SyncResponseMessage",
]
