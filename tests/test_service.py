# tests/test_service.py

import pytest

from conftest import DAY, T0, make_proposal
from govdash_node.governance.admission import create_message, delegate_message, execute_message, vote_message
from govdash_node.governance.errors import (
    BackendUnavailable,
    DuplicateVote,
    InvalidInput,
    InvalidState,
    NotFound,
    Unauthorized,
)
from govdash_node.governance.service import GovernanceService
from govdash_node.storage.memory_store import InMemoryProposalStore

WEIGHT = 1000 * 10**18


class SpyStore(InMemoryProposalStore):
    """Records which write operations the service reached."""

    def __init__(self, *a, **kw):
        super().__init__(*a, **kw)
        self.add_vote_calls = []
        self.append_calls = []

    def add_vote(self, pid, voter, support, weight):
        self.add_vote_calls.append((pid, voter, support, weight))
        return super().add_vote(pid, voter, support, weight)

    def append(self, draft):
        self.append_calls.append(draft)
        return super().append(draft)


class BrokenStore(InMemoryProposalStore):
    def list(self):
        raise ConnectionError("rpc node unreachable")

    def get_by_id(self, pid):
        raise ConnectionError("rpc node unreachable")


@pytest.fixture
def store(clock):
    return SpyStore(
        [
            make_proposal(1, for_votes=10, against_votes=5),
            make_proposal(2, start_time=T0 + DAY, end_time=T0 + 2 * DAY),
            make_proposal(3, executed=True),
        ],
        clock=clock,
    )


@pytest.fixture
def svc(store, clock):
    clock.now = T0 + 100
    return GovernanceService(store, clock=clock, vote_weight=WEIGHT)


def _vote(wallet, pid, support=True, **kw):
    body = {
        "proposalId": pid,
        "support": support,
        "address": wallet.address,
        "networkId": 1,
        "signature": wallet.sign(vote_message(pid, support)),
    }
    body.update(kw)
    return body


def _create(wallet, title="Enable fee rebates", description="r" * 200, **kw):
    body = {
        "title": title,
        "description": description,
        "proposalType": "parameter",
        "address": wallet.address,
        "networkId": 1,
        "signature": wallet.sign(create_message(title)),
    }
    body.update(kw)
    return body


# ============================================================
# Vote
# ============================================================


def test_vote_on_active_adds_weight_and_returns_post_update_tallies(svc, store, wallet):
    out = svc.vote(_vote(wallet, 1, support=True))

    assert out["proposal"] == {"id": 1, "forVotes": str(10 + WEIGHT), "againstVotes": "5"}
    assert out["transactionHash"].startswith("0x") and len(out["transactionHash"]) == 66
    assert store.get_by_id(1).for_votes == 10 + WEIGHT
    assert store.has_voted(1, wallet.address.lower())


def test_vote_against(svc, wallet):
    out = svc.vote(_vote(wallet, 1, support=False))
    assert out["proposal"]["againstVotes"] == str(5 + WEIGHT)
    assert out["proposal"]["forVotes"] == "10"


def test_vote_on_pending_is_invalid_state_without_store_write(svc, store, wallet):
    with pytest.raises(InvalidState) as excinfo:
        svc.vote(_vote(wallet, 2))
    assert excinfo.value.message == "Proposal is not active for voting"
    assert store.add_vote_calls == []


def test_vote_on_executed_inside_window_is_rejected(svc, store, wallet):
    # proposal 3 is inside its time window but already executed
    with pytest.raises(InvalidState):
        svc.vote(_vote(wallet, 3))
    assert store.add_vote_calls == []


def test_vote_after_window_is_rejected(svc, store, clock, wallet):
    clock.now = T0 + DAY + 1
    with pytest.raises(InvalidState):
        svc.vote(_vote(wallet, 1))
    assert store.add_vote_calls == []


def test_vote_unknown_proposal(svc, wallet):
    with pytest.raises(NotFound):
        svc.vote(_vote(wallet, 99))


def test_vote_signature_mismatch_is_unauthorized(svc, store, wallet, other_wallet):
    body = _vote(wallet, 1, signature=other_wallet.sign(vote_message(1, True)))
    with pytest.raises(Unauthorized):
        svc.vote(body)
    assert store.add_vote_calls == []
    assert store.get_by_id(1).for_votes == 10


def test_signature_checked_before_existence(svc, wallet, other_wallet):
    body = _vote(wallet, 99, signature=other_wallet.sign(vote_message(99, True)))
    with pytest.raises(Unauthorized):
        svc.vote(body)


def test_second_vote_by_same_voter_rejected(svc, store, wallet):
    svc.vote(_vote(wallet, 1))
    with pytest.raises(InvalidState) as excinfo:
        svc.vote(_vote(wallet, 1, support=False))
    assert excinfo.value.message == "Already voted on this proposal"
    assert len(store.add_vote_calls) == 1


def test_single_vote_check_off_still_refused_by_store(store, clock, wallet):
    clock.now = T0 + 100
    svc = GovernanceService(store, clock=clock, vote_weight=WEIGHT, enforce_single_vote=False)
    svc.vote(_vote(wallet, 1))
    with pytest.raises(DuplicateVote):
        svc.vote(_vote(wallet, 1, support=False))
    # reached the store this time, which refused it
    assert len(store.add_vote_calls) == 2
    assert store.get_by_id(1).against_votes == 5


def test_zero_weight_has_no_voting_power(store, clock, wallet):
    clock.now = T0 + 100
    svc = GovernanceService(store, clock=clock, vote_weight=0)
    with pytest.raises(InvalidState) as excinfo:
        svc.vote(_vote(wallet, 1))
    assert excinfo.value.message == "No voting power"
    assert store.add_vote_calls == []


def test_invalid_vote_body(svc):
    with pytest.raises(InvalidInput):
        svc.vote({"proposalId": 1})


# ============================================================
# Create
# ============================================================


def test_create_appends_pending_proposal(svc, store, clock, wallet):
    out = svc.create_proposal(_create(wallet))

    assert out["proposalId"] == 4
    assert out["transactionHash"].startswith("0x")

    p = store.get_by_id(4)
    assert p.proposer == wallet.address.lower()
    assert p.created_at == clock.now
    assert p.start_time > clock.now
    assert p.start_time <= p.end_time
    assert (p.for_votes, p.against_votes) == (0, 0)
    assert svc.get_proposal("4")["status"] == "pending"


def test_create_short_description_never_writes(svc, store, wallet):
    with pytest.raises(InvalidInput):
        svc.create_proposal(_create(wallet, description="s" * 50))
    assert store.append_calls == []


def test_create_with_foreign_signature(svc, store, wallet, other_wallet):
    body = _create(wallet, signature=other_wallet.sign(create_message("Enable fee rebates")))
    with pytest.raises(Unauthorized):
        svc.create_proposal(body)
    assert store.append_calls == []


def test_create_keeps_actions(svc, store, wallet):
    actions = [{"target": "0x" + "12" * 20, "value": "0", "signature": "setFee(uint256)", "calldata": "0x01"}]
    pid = svc.create_proposal(_create(wallet, actions=actions))["proposalId"]
    assert store.get_by_id(pid).actions[0].signature == "setFee(uint256)"


# ============================================================
# Reads
# ============================================================


def test_get_proposal_stamps_status(svc):
    assert svc.get_proposal("1")["status"] == "active"
    assert svc.get_proposal(2)["status"] == "pending"
    assert svc.get_proposal("3")["status"] == "executed"


def test_get_proposal_unknown(svc):
    with pytest.raises(NotFound):
        svc.get_proposal("42")


def test_list_reflects_votes(svc, wallet):
    svc.vote(_vote(wallet, 1))
    out = svc.list_proposals({"voter": wallet.address})
    assert [p["id"] for p in out["proposals"]] == [1]
    assert out["proposals"][0]["forVotes"] == str(10 + WEIGHT)


def test_backend_failure_becomes_backend_unavailable(clock):
    svc = GovernanceService(BrokenStore(clock=clock), clock=clock)
    with pytest.raises(BackendUnavailable):
        svc.list_proposals({})
    with pytest.raises(BackendUnavailable):
        svc.get_proposal("1")


def test_input_errors_win_over_backend_failure(clock):
    svc = GovernanceService(BrokenStore(clock=clock), clock=clock)
    with pytest.raises(InvalidInput):
        svc.list_proposals({"limit": "500"})


# ============================================================
# Delegate
# ============================================================


def test_delegate_records_delegation(svc, store, wallet):
    delegatee = "0x" + "cd" * 20
    body = {
        "delegatee": delegatee,
        "address": wallet.address,
        "networkId": 1,
        "signature": wallet.sign(delegate_message(delegatee)),
    }
    out = svc.delegate(body)

    assert out["delegator"] == wallet.address
    assert out["delegatee"] == delegatee
    assert out["timestamp"] == T0 + 100
    assert store.get_delegate(wallet.address) == delegatee


def test_delegate_rejects_bad_delegatee(svc, wallet):
    body = {"delegatee": "bob", "address": wallet.address, "networkId": 1, "signature": "0x00"}
    with pytest.raises(InvalidInput) as excinfo:
        svc.delegate(body)
    assert excinfo.value.message == "Invalid address format"


# ============================================================
# Execute
# ============================================================


def _execute(wallet, pid, **kw):
    body = {
        "proposalId": pid,
        "address": wallet.address,
        "networkId": 1,
        "signature": wallet.sign(execute_message(pid)),
    }
    body.update(kw)
    return body


@pytest.fixture
def closed(store):
    store.seed(
        [
            make_proposal(10, start_time=T0 - 3 * DAY, end_time=T0 - DAY, for_votes=9, against_votes=2),
            make_proposal(11, start_time=T0 - 3 * DAY, end_time=T0 - DAY, for_votes=4, against_votes=4),
        ]
    )
    return store


def test_execute_succeeded_proposal(svc, closed, wallet):
    assert svc.get_proposal(10)["status"] == "succeeded"

    out = svc.execute(_execute(wallet, 10))

    assert out["proposalId"] == 10
    assert out["status"] == "executed"
    assert out["executor"] == wallet.address
    assert out["transactionHash"].startswith("0x")
    assert closed.get_by_id(10).executed is True
    assert svc.get_proposal(10)["status"] == "executed"


def test_execute_twice_is_invalid_state(svc, closed, wallet):
    svc.execute(_execute(wallet, 10))
    with pytest.raises(InvalidState) as excinfo:
        svc.execute(_execute(wallet, 10))
    assert excinfo.value.message == "Proposal not in executable state. Current state: executed"


@pytest.mark.parametrize(
    "pid, status",
    [(11, "defeated"), (1, "active"), (2, "pending")],
)
def test_execute_requires_succeeded(svc, closed, wallet, pid, status):
    with pytest.raises(InvalidState) as excinfo:
        svc.execute(_execute(wallet, pid))
    assert excinfo.value.message.endswith(f"Current state: {status}")
    assert closed.get_by_id(pid).executed is False


def test_execute_signature_mismatch(svc, closed, wallet, other_wallet):
    body = _execute(wallet, 10, signature=other_wallet.sign(execute_message(10)))
    with pytest.raises(Unauthorized):
        svc.execute(body)
    assert closed.get_by_id(10).executed is False


def test_execute_unknown_proposal(svc, wallet):
    with pytest.raises(NotFound):
        svc.execute(_execute(wallet, 99))


def test_execute_missing_fields(svc):
    with pytest.raises(InvalidInput) as excinfo:
        svc.execute({"proposalId": 10})
    assert excinfo.value.message == "Missing required fields"
