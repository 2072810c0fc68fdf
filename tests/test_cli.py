"""End-to-end tests for the rostersync command-line interface."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, List

import pytest

from rostersync import cli
from rostersync.core.config import Settings
from rostersync.crypto.digest import Domain, build_digest

if TYPE_CHECKING:
    from pathlib import Path

    from _pytest.capture import CaptureFixture
    from _pytest.monkeypatch import MonkeyPatch
    from eth_account.signers.local import LocalAccount
    from pytest_mock.plugin import MockerFixture


@pytest.fixture(autouse=True)
def _isolated_settings(mocker: "MockerFixture") -> Settings:
    """Run the CLI with default settings and without installing log handlers."""
    settings = Settings(_env_file=None)
    mocker.patch.object(cli, "get_settings", return_value=settings)
    mocker.patch.object(cli, "configure_logging")
    return settings


def _init_state(tmp_path: "Path", seed: str) -> "Path":
    state = tmp_path / "state.json"
    assert cli.main(["init-state", "--seed", seed, "--state", str(state)]) == 0
    return state


def test_init_state_and_show(
    tmp_path: "Path",
    accounts: List["LocalAccount"],
    capsys: "CaptureFixture[str]",
) -> None:
    """init-state writes a single-member state that show prints back."""
    state = _init_state(tmp_path, accounts[0].address.lower())
    capsys.readouterr()

    assert cli.main(["show", "--state", str(state)]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["committee"] == [accounts[0].address]
    assert shown["nonce"] == 0

    with pytest.raises(SystemExit):
        cli.main(["init-state", "--seed", accounts[1].address, "--state", str(state)])


def test_hash_sign_apply_flow(
    tmp_path: "Path",
    accounts: List["LocalAccount"],
    capsys: "CaptureFixture[str]",
    monkeypatch: "MonkeyPatch",
) -> None:
    """A proposal is hashed, signed by the seed and applied to the state file."""
    state = _init_state(tmp_path, accounts[0].address)
    committee = [acct.address for acct in accounts[1:4]]
    proposal = tmp_path / "proposal.json"
    proposal.write_text(json.dumps({"committee": committee}))
    capsys.readouterr()

    assert cli.main(["hash", "--proposal", str(proposal), "--state", str(state)]) == 0
    expected = build_digest(1, committee, [], domain=Domain("CommitteeSync", "1"))
    assert capsys.readouterr().out.strip() == f"1 0x{expected.hex()}"

    monkeypatch.setenv("ROSTERSYNC_KEY", "0x" + bytes(accounts[0].key).hex())
    assert cli.main(["sign", "--proposal", str(proposal), "--state", str(state)]) == 0
    signed = json.loads(proposal.read_text())
    assert signed["steps"][0]["nonce"] == 1
    assert len(signed["steps"][0]["signatures"]) == 1

    assert cli.main(["apply", "--proposal", str(proposal), "--state", str(state)]) == 0
    applied = json.loads(capsys.readouterr().out)
    assert applied["results"][0]["nonce"] == 1
    assert applied["results"][0]["digest"] == "0x" + expected.hex()
    assert json.loads(state.read_text())["committee"] == committee

    assert cli.main(["apply", "--proposal", str(proposal), "--state", str(state)]) == 1
    assert "Insufficient approvals" in capsys.readouterr().err


def test_bootstrap_command(
    tmp_path: "Path",
    accounts: List["LocalAccount"],
    capsys: "CaptureFixture[str]",
) -> None:
    """bootstrap advances the nonce only for the seed member."""
    state = _init_state(tmp_path, accounts[0].address)
    capsys.readouterr()

    assert cli.main(["bootstrap", "--nonce", "50", "--caller", accounts[1].address, "--state", str(state)]) == 1
    assert "Init failed" in capsys.readouterr().err

    assert cli.main(["bootstrap", "--nonce", "50", "--caller", accounts[0].address, "--state", str(state)]) == 0
    assert capsys.readouterr().out.strip() == "50"
    assert json.loads(state.read_text())["nonce"] == 50


def test_hash_needs_a_nonce_source(tmp_path: "Path", accounts: List["LocalAccount"]) -> None:
    """Without --nonce, --state or a nonce hint the target is unknown."""
    proposal = tmp_path / "proposal.json"
    proposal.write_text(json.dumps({"committee": [acct.address for acct in accounts[:3]]}))
    with pytest.raises(SystemExit):
        cli.main(["hash", "--proposal", str(proposal)])


def test_corrupt_state_file_fails_cleanly(
    tmp_path: "Path",
    accounts: List["LocalAccount"],
    capsys: "CaptureFixture[str]",
) -> None:
    """Unreadable or out-of-range state files exit with 1 instead of a traceback."""
    state = tmp_path / "state.json"
    state.write_text('{"committee": [')
    assert cli.main(["show", "--state", str(state)]) == 1
    assert "Corrupt state" in capsys.readouterr().err

    state.write_text(json.dumps({"committee": [accounts[0].address], "nonce": -5}))
    assert cli.main(["show", "--state", str(state)]) == 1
    assert "Corrupt state" in capsys.readouterr().err


def test_non_integer_nonce_hint_fails_cleanly(
    tmp_path: "Path",
    accounts: List["LocalAccount"],
    capsys: "CaptureFixture[str]",
) -> None:
    """A proposal whose nonce hint is not an integer is rejected with exit code 1."""
    proposal = tmp_path / "proposal.json"
    proposal.write_text(json.dumps({"committee": [acct.address for acct in accounts[:3]], "nonce": "abc"}))

    assert cli.main(["hash", "--proposal", str(proposal), "--nonce", "1"]) == 1
    assert "Nonce hint" in capsys.readouterr().err
