from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from govdash_node.governance.errors import DuplicateVote, NotFound
from govdash_node.governance.models import Delegation, Proposal, ProposalDraft, VoteRecord
from govdash_node.storage.base import ProposalStore


class InMemoryProposalStore(ProposalStore):
    """
    Dict-backed store for single-node and test usage.

    Enumeration follows insertion order. Vote records are append-only and a
    voter gets at most one per proposal.
    """

    def __init__(
        self,
        proposals: Iterable[Proposal] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._lock = threading.RLock()
        self._clock = clock
        self._proposals: Dict[int, Proposal] = {}
        self._votes: Dict[Tuple[int, str], VoteRecord] = {}
        self._delegations: Dict[str, Delegation] = {}
        for p in proposals:
            self._proposals[int(p.id)] = p

    # ------------------------
    # Reads
    # ------------------------
    def get_by_id(self, pid: int) -> Optional[Proposal]:
        with self._lock:
            return self._proposals.get(int(pid))

    def list(self) -> List[Proposal]:
        with self._lock:
            return list(self._proposals.values())

    def has_voted(self, pid: int, voter: str) -> bool:
        with self._lock:
            return (int(pid), voter.lower()) in self._votes

    def votes_for(self, pid: int) -> List[VoteRecord]:
        with self._lock:
            return [v for (p, _), v in self._votes.items() if p == int(pid)]

    def get_delegate(self, delegator: str) -> Optional[str]:
        with self._lock:
            d = self._delegations.get(delegator.lower())
            return d.delegatee if d else None

    # ------------------------
    # Writes
    # ------------------------
    @contextmanager
    def _write(self) -> Iterator[None]:
        """
        Run a mutation under the lock and persist it. If the mutation or
        ``_after_write`` raises, the maps are put back as they were.
        """
        with self._lock:
            saved = (dict(self._proposals), dict(self._votes), dict(self._delegations))
            try:
                yield
                self._after_write()
            except Exception:
                self._proposals, self._votes, self._delegations = saved
                raise

    def append(self, draft: ProposalDraft) -> int:
        with self._write():
            pid = max(self._proposals.keys(), default=0) + 1
            self._proposals[pid] = Proposal.from_draft(pid, draft)
        return pid

    def add_vote(self, pid: int, voter: str, support: bool, weight: int) -> Tuple[int, int]:
        voter = voter.lower()
        with self._write():
            p = self._proposals.get(int(pid))
            if p is None:
                raise NotFound()
            key = (p.id, voter)
            if key in self._votes:
                raise DuplicateVote()

            self._votes[key] = VoteRecord(
                proposal_id=p.id,
                voter=voter,
                support=bool(support),
                weight=int(weight),
                timestamp=int(self._clock()),
            )
            if support:
                p = p.with_tallies(p.for_votes + int(weight), p.against_votes)
            else:
                p = p.with_tallies(p.for_votes, p.against_votes + int(weight))
            self._proposals[p.id] = p
        return p.for_votes, p.against_votes

    def mark_executed(self, pid: int) -> Proposal:
        with self._write():
            p = self._proposals.get(int(pid))
            if p is None:
                raise NotFound()
            p = replace(p, executed=True)
            self._proposals[p.id] = p
        return p

    def seed(self, proposals: Iterable[Proposal]) -> None:
        """Insert fully-formed proposals, keeping their ids."""
        with self._write():
            for p in proposals:
                self._proposals[int(p.id)] = p

    def record_delegation(self, delegation: Delegation) -> None:
        with self._write():
            self._delegations[delegation.delegator.lower()] = delegation

    def _after_write(self) -> None:
        """Hook for persistent subclasses; called with the lock held."""
