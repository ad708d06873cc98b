"""
JSON snapshot persistence for the proposal store.

- Atomic write (temp file + fsync + os.replace + directory fsync)
- One rolling backup (.bak1) that load() falls back to
- Big-integer tallies and vote weights stored as decimal strings

The whole state is rewritten on every mutation; fine for a dashboard-sized
proposal set, not for a chain indexer.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from govdash_node.governance.errors import BackendUnavailable
from govdash_node.governance.models import Delegation, Proposal, VoteRecord
from govdash_node.storage.memory_store import InMemoryProposalStore

log = logging.getLogger(__name__)

JsonDict = Dict[str, Any]
PathLike = Union[str, Path]

SNAPSHOT_VERSION = 1


def _fsync_dir(dir_path: Path) -> None:
    try:
        fd = os.open(str(dir_path), os.O_DIRECTORY)
    except (AttributeError, OSError):
        # O_DIRECTORY is unavailable on some platforms
        return
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(str(tmp_path), str(path))
        _fsync_dir(path.parent)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def _read_json(path: Path) -> Optional[JsonDict]:
    try:
        obj = json.loads(path.read_bytes().decode("utf-8"))
    except (OSError, UnicodeDecodeError, ValueError):
        log.warning("Unreadable snapshot %s", path, exc_info=True)
        return None
    return obj if isinstance(obj, dict) else None


class JSONProposalStore(InMemoryProposalStore):
    """
    In-memory store that snapshots itself to a JSON file after every write.
    """

    def __init__(self, path: PathLike = "govdash_state.json", clock: Callable[[], float] = time.time) -> None:
        super().__init__(clock=clock)
        self.path = Path(path)
        self._load()

    @property
    def backup_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".bak1")

    # ---------------------------
    # Load: primary -> backup
    # ---------------------------
    def _load(self) -> None:
        if not self.path.exists() and not self.backup_path.exists():
            return

        state = None
        for p in (self.path, self.backup_path):
            if p.exists():
                state = _read_json(p)
                if state is not None:
                    break

        if state is None:
            raise BackendUnavailable(f"proposal snapshot at {self.path} is unreadable")

        try:
            for raw in state.get("proposals", []):
                p = Proposal.from_record(raw)
                self._proposals[p.id] = p
            for raw in state.get("votes", []):
                v = VoteRecord.from_record(raw)
                self._votes[(v.proposal_id, v.voter)] = v
            for raw in state.get("delegations", []):
                d = Delegation(
                    delegator=str(raw["delegator"]).lower(),
                    delegatee=str(raw["delegatee"]).lower(),
                    timestamp=int(raw.get("timestamp", 0)),
                    transaction_hash=raw.get("transactionHash"),
                )
                self._delegations[d.delegator] = d
        except (KeyError, TypeError, ValueError) as e:
            raise BackendUnavailable(f"proposal snapshot at {self.path} is malformed") from e

    # ---------------------------
    # Save: rotate backup + atomic write
    # ---------------------------
    def _snapshot(self) -> JsonDict:
        return {
            "version": SNAPSHOT_VERSION,
            "proposals": [p.to_record() for p in self._proposals.values()],
            "votes": [v.to_record() for v in self._votes.values()],
            "delegations": [
                {
                    "delegator": d.delegator,
                    "delegatee": d.delegatee,
                    "timestamp": d.timestamp,
                    "transactionHash": d.transaction_hash,
                }
                for d in self._delegations.values()
            ],
        }

    def _after_write(self) -> None:
        data = json.dumps(self._snapshot(), ensure_ascii=False, sort_keys=True, indent=2).encode("utf-8")
        try:
            if self.path.exists():
                os.replace(str(self.path), str(self.backup_path))
            atomic_write_bytes(self.path, data)
        except OSError as e:
            raise BackendUnavailable(f"failed to persist proposals to {self.path}") from e

