from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from govdash_node.governance.models import Delegation, Proposal, ProposalDraft


class ProposalStore(ABC):
    """
    Capability interface the governance core reads and writes through.

    Backends own their own locking: ``add_vote`` must be atomic per proposal,
    so that any read after it returns sees the new tallies. A write that
    fails to persist leaves no trace in later reads. Any method may raise
    ``BackendUnavailable`` when the backend cannot be reached.
    """

    @abstractmethod
    def get_by_id(self, pid: int) -> Optional[Proposal]:
        ...

    @abstractmethod
    def list(self) -> List[Proposal]:
        """All proposals in a stable enumeration order."""

    @abstractmethod
    def append(self, draft: ProposalDraft) -> int:
        """Persist a new proposal and return its fresh id (>= 1)."""

    @abstractmethod
    def add_vote(self, pid: int, voter: str, support: bool, weight: int) -> Tuple[int, int]:
        """Record a vote and return the updated (for_votes, against_votes)."""

    @abstractmethod
    def mark_executed(self, pid: int) -> Proposal:
        """Set the executed flag and return the updated proposal."""

    @abstractmethod
    def has_voted(self, pid: int, voter: str) -> bool:
        ...

    @abstractmethod
    def record_delegation(self, delegation: Delegation) -> None:
        ...

    @abstractmethod
    def get_delegate(self, delegator: str) -> Optional[str]:
        ...
