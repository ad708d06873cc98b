"""
GovernanceService: the dashboard operations over an injected store.

  list_proposals  -> parse query, stamp status, filter, paginate
  get_proposal    -> fetch + stamp
  create_proposal -> validate, authenticate, append
  vote            -> validate, authenticate, fetch, gate on status, add vote
  delegate        -> validate, authenticate, record
  execute         -> validate, authenticate, fetch, require succeeded, mark executed

Anything that is not a GovernanceError coming out of the store or the
verifier is logged with its cause and re-raised as BackendUnavailable with
an opaque message.
"""

from __future__ import annotations

import logging
import secrets
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from govdash_node.crypto_utils import SignatureVerifier, normalize_address
from govdash_node.governance import admission
from govdash_node.governance.errors import (
    BackendUnavailable,
    GovernanceError,
    InvalidState,
    NotFound,
)
from govdash_node.governance.models import Delegation, ProposalDraft
from govdash_node.governance.query import DEFAULT_LIMIT, MAX_LIMIT, parse_list_query, run_query, stamp
from govdash_node.governance.status import ACTIVE, SUCCEEDED, proposal_status
from govdash_node.storage.base import ProposalStore

log = logging.getLogger(__name__)

DEFAULT_VOTE_WEIGHT = 1000 * 10**18
DEFAULT_VOTING_DELAY = 86400
DEFAULT_VOTING_PERIOD = 7 * 86400


def new_transaction_hash() -> str:
    return "0x" + secrets.token_hex(32)


@contextmanager
def _backend(operation: str) -> Iterator[None]:
    try:
        yield
    except GovernanceError:
        raise
    except Exception as e:
        log.exception("%s failed", operation)
        raise BackendUnavailable(f"An error occurred while {operation}") from e


class GovernanceService:
    def __init__(
        self,
        store: ProposalStore,
        verifier: Optional[SignatureVerifier] = None,
        clock: Callable[[], float] = time.time,
        vote_weight: int = DEFAULT_VOTE_WEIGHT,
        voting_delay_sec: int = DEFAULT_VOTING_DELAY,
        voting_period_sec: int = DEFAULT_VOTING_PERIOD,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        enforce_single_vote: bool = True,
    ) -> None:
        self.store = store
        self.verifier = verifier or SignatureVerifier()
        self.clock = clock
        self.vote_weight = int(vote_weight)
        # start_time must land strictly after creation
        self.voting_delay_sec = max(1, int(voting_delay_sec))
        self.voting_period_sec = max(0, int(voting_period_sec))
        self.default_limit = int(default_limit)
        self.max_limit = int(max_limit)
        self.enforce_single_vote = bool(enforce_single_vote)

    def now(self) -> int:
        return int(self.clock())

    # ------------------------
    # Reads
    # ------------------------
    def list_proposals(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        q = parse_list_query(params, default_limit=self.default_limit, max_limit=self.max_limit)
        with _backend("fetching proposals"):
            proposals = self.store.list()
            return run_query(proposals, q, self.now(), self.store.has_voted)

    def get_proposal(self, raw_id: Any) -> Dict[str, Any]:
        pid = admission.parse_proposal_id(raw_id)
        with _backend("fetching the proposal"):
            p = self.store.get_by_id(pid)
        if p is None:
            raise NotFound("Proposal not found")
        return stamp(p, self.now())

    # ------------------------
    # Writes
    # ------------------------
    def create_proposal(self, payload: Any) -> Dict[str, Any]:
        req = admission.parse_create(payload)
        with _backend("creating the proposal"):
            proposer = admission.authenticate_create(self.verifier, req)

            now = self.now()
            start = now + self.voting_delay_sec
            tx_hash = new_transaction_hash()
            draft = ProposalDraft(
                title=req.title,
                description=req.description,
                proposer=proposer,
                proposal_type=req.proposalType,
                start_time=start,
                end_time=start + self.voting_period_sec,
                created_at=now,
                actions=[a.to_action() for a in req.actions],
                transaction_hash=tx_hash,
            )
            pid = self.store.append(draft)

        log.info("proposal %s created by %s (network %s)", pid, proposer, req.networkId)
        return {"proposalId": pid, "transactionHash": tx_hash}

    def vote(self, payload: Any) -> Dict[str, Any]:
        req = admission.parse_vote(payload)
        with _backend("processing the vote"):
            voter = admission.authenticate_vote(self.verifier, req)

            p = self.store.get_by_id(req.proposalId)
            if p is None:
                raise NotFound("Proposal not found")

            if proposal_status(p, self.now()) != ACTIVE:
                raise InvalidState("Proposal is not active for voting")

            # early rejection; the store refuses a repeat vote either way
            if self.enforce_single_vote and self.store.has_voted(p.id, voter):
                raise InvalidState("Already voted on this proposal")

            if self.vote_weight <= 0:
                raise InvalidState("No voting power")

            for_votes, against_votes = self.store.add_vote(p.id, voter, req.support, self.vote_weight)

        log.info(
            "vote %s on proposal %s by %s",
            "for" if req.support else "against",
            p.id,
            voter,
        )
        return {
            "transactionHash": new_transaction_hash(),
            "proposal": {
                "id": p.id,
                "forVotes": str(for_votes),
                "againstVotes": str(against_votes),
            },
        }

    def delegate(self, payload: Any) -> Dict[str, Any]:
        req = admission.parse_delegate(payload)
        with _backend("processing the delegation"):
            delegator = admission.authenticate_delegate(self.verifier, req)
            delegation = Delegation(
                delegator=delegator,
                delegatee=normalize_address(req.delegatee),
                timestamp=self.now(),
                transaction_hash=new_transaction_hash(),
            )
            self.store.record_delegation(delegation)

        log.info("%s delegated voting power to %s", delegation.delegator, delegation.delegatee)
        return {
            "transactionHash": delegation.transaction_hash,
            "delegator": req.address,
            "delegatee": req.delegatee,
            "timestamp": delegation.timestamp,
        }

    def execute(self, payload: Any) -> Dict[str, Any]:
        req = admission.parse_execute(payload)
        with _backend("executing the proposal"):
            executor = admission.authenticate_execute(self.verifier, req)

            p = self.store.get_by_id(req.proposalId)
            if p is None:
                raise NotFound("Proposal not found")

            status = proposal_status(p, self.now())
            if status != SUCCEEDED:
                raise InvalidState(f"Proposal not in executable state. Current state: {status}")

            p = self.store.mark_executed(p.id)

        log.info("proposal %s executed by %s", p.id, executor)
        return {
            "transactionHash": new_transaction_hash(),
            "proposalId": p.id,
            "executor": req.address,
            "status": proposal_status(p, self.now()),
        }
