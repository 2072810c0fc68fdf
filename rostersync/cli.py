"""Command-line interface for operating a replica and preparing proposals.

Usage example:
    rostersync init-state --seed 0xSeed... --state ./state.json
    rostersync hash --proposal ./proposal.json --state ./state.json
    ROSTERSYNC_KEY=0x... rostersync sign --proposal ./proposal.json --state ./state.json
    rostersync apply --proposal ./proposal.json --state ./state.json

A proposal file holds one step, a list of steps, or ``{"steps": [...]}``.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from rostersync.core.config import Settings, get_settings
from rostersync.crypto.digest import Domain, build_digest
from rostersync.crypto.signing import sign_digest
from rostersync.errors import InvalidProposal, RosterSyncError
from rostersync.logger import configure_logging
from rostersync.messages import SyncRequestMessage, SyncResponseMessage
from rostersync.registry import CommitteeRegistry
from rostersync.store import JsonStateStore
from rostersync.types import normalize_address


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Returns:
        Parsed arguments as a namespace.
    """
    parser = argparse.ArgumentParser(prog="rostersync", description="Committee roster registry tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_state(p: argparse.ArgumentParser) -> None:
        p.add_argument("--state", dest="state", type=Path, default=None,
                       help="Replica state file (defaults to ROSTERSYNC_STATE_FILE)")

    p = sub.add_parser("init-state", help="Create a bootstrap state with a single seed member")
    p.add_argument("--seed", required=True, help="Address of the seed member")
    add_state(p)

    p = sub.add_parser("show", help="Print the replica state")
    add_state(p)

    p = sub.add_parser("hash", help="Print the digest(s) signers must sign")
    p.add_argument("--proposal", type=Path, required=True, help="Proposal JSON file")
    p.add_argument("--nonce", type=int, default=None, help="Target nonce of the first step")
    add_state(p)

    p = sub.add_parser("sign", help="Append a signature to every step of a proposal")
    p.add_argument("--proposal", type=Path, required=True, help="Proposal JSON file")
    p.add_argument("--key-env", default="ROSTERSYNC_KEY",
                   help="Environment variable holding the hex private key")
    p.add_argument("--nonce", type=int, default=None, help="Target nonce of the first step")
    p.add_argument("--out", type=Path, default=None, help="Output file (defaults to in-place)")
    add_state(p)

    p = sub.add_parser("apply", help="Apply a proposal (or batch) to the replica state")
    p.add_argument("--proposal", type=Path, required=True, help="Proposal JSON file")
    add_state(p)

    p = sub.add_parser("bootstrap", help="Advance the nonce as the sole seed member")
    p.add_argument("--nonce", type=int, required=True, help="New nonce (must exceed the current one)")
    p.add_argument("--caller", required=True, help="Address of the caller")
    add_state(p)

    return parser.parse_args(argv)


def _state_path(args: argparse.Namespace, settings: Settings) -> Path:
    path = args.state or (Path(settings.state_file) if settings.state_file else None)
    if path is None:
        raise SystemExit("error: no state file given (use --state or ROSTERSYNC_STATE_FILE)")
    return path


def _load_registry(args: argparse.Namespace, settings: Settings) -> CommitteeRegistry:
    store = JsonStateStore(_state_path(args, settings))
    if store.load() is None:
        raise SystemExit(f"error: state file {store.path} does not exist; run init-state first")
    return CommitteeRegistry.from_store(store, settings=settings)


def _read_proposal(path: Path) -> SyncRequestMessage:
    return SyncRequestMessage.from_json(path.read_text(encoding="utf-8"))


def _target_nonces(message: SyncRequestMessage, args: argparse.Namespace, settings: Settings) -> List[int]:
    """Resolve the nonce each step targets: file hint, then --nonce, then state."""
    base: Optional[int] = args.nonce
    if base is None and (args.state or settings.state_file):
        base = _load_registry(args, settings).nonce + 1
    nonces: List[int] = []
    for position, hint in enumerate(message.nonces or [None] * len(message.steps)):
        if hint is not None:
            nonces.append(hint)
        elif base is not None:
            nonces.append(base + position)
        else:
            raise SystemExit("error: cannot determine target nonce (use --nonce or --state)")
    return nonces


def _digests(message: SyncRequestMessage, nonces: List[int], settings: Settings) -> List[bytes]:
    domain = Domain(settings.protocol_name, settings.protocol_version)
    digests: List[bytes] = []
    for step, nonce in zip(message.steps, nonces):
        try:
            committee = [normalize_address(member) for member in step.committee]
        except ValueError as exc:
            raise InvalidProposal(f"Invalid committee member: {exc}") from exc
        digests.append(build_digest(nonce, committee, step.config, domain=domain))
    return digests


def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "init-state":
        store = JsonStateStore(_state_path(args, settings))
        if store.load() is not None:
            raise SystemExit(f"error: state file {store.path} already exists")
        registry = CommitteeRegistry.from_store(store, seed=args.seed, settings=settings)
        print(json.dumps(registry.snapshot().to_payload(), indent=2))
        return 0

    if args.command == "show":
        registry = _load_registry(args, settings)
        print(json.dumps(registry.snapshot().to_payload(), indent=2))
        return 0

    if args.command == "hash":
        message = _read_proposal(args.proposal)
        nonces = _target_nonces(message, args, settings)
        for nonce, digest in zip(nonces, _digests(message, nonces, settings)):
            print(f"{nonce} 0x{digest.hex()}")
        return 0

    if args.command == "sign":
        key = os.environ.get(args.key_env)
        if not key:
            raise SystemExit(f"error: environment variable {args.key_env} is not set")
        message = _read_proposal(args.proposal)
        nonces = _target_nonces(message, args, settings)
        for step, digest in zip(message.steps, _digests(message, nonces, settings)):
            step.signatures.append(sign_digest(key, digest, settings.signing_scheme))
        message.nonces = nonces
        (args.out or args.proposal).write_text(message.to_json(), encoding="utf-8")
        return 0

    if args.command == "apply":
        registry = _load_registry(args, settings)
        message = _read_proposal(args.proposal)
        results = registry.syncs(message.steps)
        print(json.dumps(SyncResponseMessage(results).to_payload(), indent=2))
        return 0

    if args.command == "bootstrap":
        registry = _load_registry(args, settings)
        print(registry.init(args.nonce, args.caller))
        return 0

    raise SystemExit(f"error: unknown command {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for the CLI script."""
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    try:
        return run(args, settings)
    except RosterSyncError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
