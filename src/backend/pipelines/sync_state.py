from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel


logger = logging.getLogger(__name__)


class SyncState(BaseModel):
    """Incremental sync cursor plus the hash of the rules that produced it."""

    since: Optional[str] = None
    rules_hash: Optional[str] = None


def load_state(path: Union[str, Path]) -> SyncState:
    state_path = Path(path).expanduser()
    if not state_path.exists():
        return SyncState()
    with state_path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError(
            f"Sync state file {state_path} must contain a JSON object, got {type(raw).__name__}."
        )
    return SyncState.model_validate(raw)


def save_state(path: Union[str, Path], state: SyncState) -> None:
    """Atomically overwrite the state file (write to a sibling temp file, then rename)."""
    state_path = Path(path).expanduser()
    state_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{state_path.name}.", dir=str(state_path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(state.model_dump(), handle, indent=2)
        os.replace(tmp_name, state_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def resolve_state(stored: SyncState, current_rules_hash: str) -> SyncState:
    """
    Bring a loaded state in line with the current rule set.

    A missing or different rules hash clears the cursor so the next fetch covers
    the full date range.
    """
    if stored.rules_hash == current_rules_hash:
        return stored
    if stored.since is not None:
        logger.info("Rules changed since last sync; clearing cursor %s", stored.since)
    return SyncState(since=None, rules_hash=current_rules_hash)


def advance_state(state: SyncState, watermark: Optional[str]) -> SyncState:
    if watermark is None:
        return state
    return state.model_copy(update={"since": watermark})
