import pathlib
import sys

import pytest
from eth_account import Account

# Ensure repo root (containing the govdash_node package) is on sys.path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from govdash_node.crypto_utils import sign_message
from govdash_node.governance.models import Proposal

T0 = 1_700_000_000
DAY = 86400


class FakeClock:
    """Settable clock so status boundaries can be hit exactly."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)


class Wallet:
    def __init__(self) -> None:
        acct = Account.create()
        self.key = acct.key.hex()
        self.address = acct.address

    def sign(self, message: str) -> str:
        return sign_message(self.key, message)


def make_proposal(pid: int = 1, **kw) -> Proposal:
    fields = dict(
        id=pid,
        title=f"Proposal number {pid}",
        description="d" * 120,
        proposer="0x" + "11" * 20,
        start_time=T0,
        end_time=T0 + DAY,
        for_votes=0,
        against_votes=0,
        created_at=T0 - DAY,
    )
    fields.update(kw)
    return Proposal(**fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wallet():
    return Wallet()


@pytest.fixture
def other_wallet():
    return Wallet()
