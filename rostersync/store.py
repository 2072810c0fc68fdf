"""Host-side persistence for replica state.

A registry only needs ``load``/``save``; the JSON store is what the CLI uses
between invocations. Saves happen before a new state is published in memory,
so a failed write leaves both copies at the previous state.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from rostersync.errors import CorruptState
from rostersync.state import RegistryState

LOGGER = logging.getLogger(__name__)


class StateStore(Protocol):
    """Durable home for a registry's state."""

    def load(self) -> Optional[RegistryState]:
        """Return the stored state, or None when nothing was saved yet."""

    def save(self, state: RegistryState) -> None:
        """Persist *state*, replacing whatever was stored."""


class MemoryStateStore:
    """Keeps a private copy of the last saved state."""

    def __init__(self, state: Optional[RegistryState] = None) -> None:
        self._state = state.copy() if state is not None else None

    def load(self) -> Optional[RegistryState]:
        return self._state.copy() if self._state is not None else None

    def save(self, state: RegistryState) -> None:
        self._state = state.copy()


class JsonStateStore:
    """Stores the state as a JSON document, replaced atomically on save."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Optional[RegistryState]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fp:
                data = json.load(fp)
            return RegistryState.from_payload(data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            # json.JSONDecodeError is a ValueError
            raise CorruptState(f"{self.path}: {exc}") from exc

    def save(self, state: RegistryState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(state.to_payload(), fp, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.debug("Saved state at nonce %s to %s", state.nonce, self.path)


__all__ = ["StateStore", "MemoryStateStore", "JsonStateStore"]
