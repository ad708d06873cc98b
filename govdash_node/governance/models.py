"""
Proposal records as the store hands them to the governance core.

Status is never part of a stored record; it is derived on read by
``governance.status.proposal_status`` and only appears in wire payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

PROPOSAL_TYPES = ("integration", "parameter", "upgrade", "funding")


@dataclass(frozen=True)
class ProposalAction:
    target: str
    value: str = "0"
    signature: str = ""
    calldata: str = "0x"

    def to_dict(self) -> Dict[str, str]:
        return {
            "target": self.target,
            "value": self.value,
            "signature": self.signature,
            "calldata": self.calldata,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ProposalAction":
        return cls(
            target=str(raw.get("target", "")),
            value=str(raw.get("value", "0")),
            signature=str(raw.get("signature", "")),
            calldata=str(raw.get("calldata", "0x")),
        )


@dataclass(frozen=True)
class ProposalDraft:
    """Everything a store needs to append a new proposal; the store picks the id."""

    title: str
    description: str
    proposer: str
    proposal_type: str
    start_time: int
    end_time: int
    created_at: int
    actions: List[ProposalAction] = field(default_factory=list)
    transaction_hash: str = ""


@dataclass(frozen=True)
class Proposal:
    id: int
    title: str
    description: str
    proposer: str
    start_time: int
    end_time: int
    for_votes: int = 0
    against_votes: int = 0
    executed: bool = False
    canceled: bool = False
    proposal_type: str = "integration"
    actions: List[ProposalAction] = field(default_factory=list)
    created_at: int = 0
    transaction_hash: str = ""

    @classmethod
    def from_draft(cls, pid: int, draft: ProposalDraft) -> "Proposal":
        return cls(
            id=pid,
            title=draft.title,
            description=draft.description,
            proposer=draft.proposer.lower(),
            start_time=draft.start_time,
            end_time=draft.end_time,
            proposal_type=draft.proposal_type,
            actions=list(draft.actions),
            created_at=draft.created_at,
            transaction_hash=draft.transaction_hash,
        )

    def with_tallies(self, for_votes: int, against_votes: int) -> "Proposal":
        return replace(self, for_votes=int(for_votes), against_votes=int(against_votes))

    # ------------------------
    # (De)serialization
    # ------------------------
    def to_record(self) -> Dict[str, Any]:
        """Persistence form. Tallies are decimal strings, like on the wire."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "proposer": self.proposer,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "forVotes": str(self.for_votes),
            "againstVotes": str(self.against_votes),
            "executed": self.executed,
            "canceled": self.canceled,
            "proposalType": self.proposal_type,
            "actions": [a.to_dict() for a in self.actions],
            "createdAt": self.created_at,
            "transactionHash": self.transaction_hash,
        }

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> "Proposal":
        return cls(
            id=int(raw["id"]),
            title=str(raw.get("title", "")),
            description=str(raw.get("description", "")),
            proposer=str(raw.get("proposer", "")).lower(),
            start_time=int(raw.get("startTime", 0)),
            end_time=int(raw.get("endTime", 0)),
            for_votes=int(str(raw.get("forVotes", "0"))),
            against_votes=int(str(raw.get("againstVotes", "0"))),
            executed=bool(raw.get("executed", False)),
            canceled=bool(raw.get("canceled", False)),
            proposal_type=str(raw.get("proposalType", "integration")),
            actions=[ProposalAction.from_dict(a) for a in raw.get("actions", []) or []],
            created_at=int(raw.get("createdAt", 0)),
            transaction_hash=str(raw.get("transactionHash", "")),
        )

    def to_wire(self, status: str) -> Dict[str, Any]:
        out = self.to_record()
        out["status"] = status
        return out


@dataclass(frozen=True)
class VoteRecord:
    proposal_id: int
    voter: str
    support: bool
    weight: int
    timestamp: int

    def to_record(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "support": self.support,
            "weight": str(self.weight),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> "VoteRecord":
        return cls(
            proposal_id=int(raw["proposalId"]),
            voter=str(raw["voter"]).lower(),
            support=bool(raw["support"]),
            weight=int(str(raw.get("weight", "0"))),
            timestamp=int(raw.get("timestamp", 0)),
        )


@dataclass(frozen=True)
class Delegation:
    delegator: str
    delegatee: str
    timestamp: int
    transaction_hash: Optional[str] = None
